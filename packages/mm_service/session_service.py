import logging
import uuid
from typing import Callable, Optional

from packages.mm_core.errors import NotFoundError, PermissionDeniedError, TransportError
from packages.mm_feedback.pipeline import FeedbackPipeline
from packages.mm_providers.voice.base import IVoiceTransport, VoiceEvent
from packages.mm_session.dto import CallConfig, SessionState
from packages.mm_session.engine import CallSessionEngine
from packages.mm_session.registry import SessionRegistry
from packages.mm_service.concurrency import ConcurrencyManager

logger = logging.getLogger("mockmate.service.session")

TransportFactory = Callable[[], IVoiceTransport]

WEBHOOK_PATH = "/api/v1/sessions/{session_id}/vapi"


class SessionService:
    """
    Application service for live call sessions.
    Responsible for:
    1. Session creation/teardown in the registry
    2. Serializing commands and transport events per session
    3. Ownership checks for user-facing reads and commands
    4. Expiring finished sessions nobody came back for
    """
    def __init__(
        self,
        registry: SessionRegistry,
        transport_factory: TransportFactory,
        pipeline: FeedbackPipeline,
        workflow_id: Optional[str] = None,
        concurrency_manager: Optional[ConcurrencyManager] = None,
        public_base_url: Optional[str] = None,
        finished_ttl_sec: float = 300.0,
    ):
        self.registry = registry
        self.transport_factory = transport_factory
        self.pipeline = pipeline
        self.workflow_id = workflow_id
        self.concurrency_manager = concurrency_manager or ConcurrencyManager()
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.finished_ttl_sec = finished_ttl_sec

    def webhook_url(self, session_id: str) -> Optional[str]:
        if not self.public_base_url:
            return None
        return self.public_base_url + WEBHOOK_PATH.format(session_id=session_id)

    async def start_session(self, config: CallConfig) -> SessionState:
        """
        Create an engine with its own transport and open the call.
        The session lock is not held while the call is opened, so a disconnect
        or webhook event can reach a CONNECTING session. A session that fails
        to connect is released; the caller may retry.
        """
        self.purge_expired()

        session_id = f"sess_{uuid.uuid4().hex[:16]}"
        engine = CallSessionEngine(
            session_id=session_id,
            transport=self.transport_factory(),
            pipeline=self.pipeline,
            workflow_id=self.workflow_id,
            server_url=self.webhook_url(session_id),
        )
        self.registry.add(engine)

        try:
            await engine.start(config)
        except TransportError:
            self.registry.release(session_id)
            self.concurrency_manager.forget(session_id)
            raise
        return engine.state()

    def get_session(self, session_id: str, user_id: Optional[str] = None) -> SessionState:
        """Read-only; bypasses the lock."""
        return self._get_engine(session_id, user_id).state()

    async def disconnect_session(self, session_id: str, user_id: Optional[str] = None) -> SessionState:
        engine = self._get_engine(session_id, user_id)
        async with self.concurrency_manager.acquire_lock(session_id):
            await engine.disconnect()
            return engine.state()

    async def handle_event(self, session_id: str, event: VoiceEvent, user_id: Optional[str] = None) -> SessionState:
        """
        Deliver a transport event to the session's subscribers.
        `user_id` scopes client-pushed events; the signed platform webhook passes None.
        """
        engine = self._get_engine(session_id, user_id)
        async with self.concurrency_manager.acquire_lock(session_id):
            await engine.transport.emit(event)
            state = engine.state()
        self.purge_expired()
        return state

    async def inject_user_turn(self, session_id: str, text: str, user_id: Optional[str] = None) -> SessionState:
        engine = self._get_engine(session_id, user_id)
        async with self.concurrency_manager.acquire_lock(session_id):
            await engine.inject_user_turn(text)
            return engine.state()

    def end_session(self, session_id: str, user_id: Optional[str] = None) -> None:
        """Discard the session once its FINISHED state has been handled (or abandoned)."""
        self._get_engine(session_id, user_id)
        self.registry.release(session_id)
        self.concurrency_manager.forget(session_id)
        logger.info(f"Session {session_id} released")

    def purge_expired(self) -> None:
        """Release finished sessions older than the TTL, with their locks."""
        for session_id in self.registry.purge_finished(self.finished_ttl_sec):
            self.concurrency_manager.forget(session_id)
            logger.info(f"Session {session_id} expired")

    def _get_engine(self, session_id: str, user_id: Optional[str] = None) -> CallSessionEngine:
        engine = self.registry.get(session_id)
        if engine is None:
            raise NotFoundError(f"Session {session_id} not found")
        if user_id is not None and engine.config is not None and engine.config.user_id != user_id:
            raise PermissionDeniedError(f"Session {session_id} belongs to another user")
        return engine
