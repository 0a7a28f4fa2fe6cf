import asyncio
import unittest

from packages.mm_core.errors import NotFoundError, PermissionDeniedError, TransportError
from packages.mm_feedback.pipeline import FeedbackPipeline
from packages.mm_feedback.repository import FeedbackRepository
from packages.mm_providers.llm.mock import MockScoringProvider
from packages.mm_providers.voice.base import VoiceEvent, VoiceEventType
from packages.mm_providers.voice.inprocess import InProcessVoiceTransport
from packages.mm_service.concurrency import ConcurrencyManager
from packages.mm_service.session_service import SessionService
from packages.mm_session.dto import CallConfig
from packages.mm_session.infrastructure.memory_registry import MemorySessionRegistry
from packages.mm_session.state import SessionMode, SessionStatus
from packages.mm_store.memory_store import MemoryDocumentStore


class GatedStartTransport(InProcessVoiceTransport):
    """Transport whose start blocks until the test opens the gate."""
    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def start(self, session_config) -> None:
        self.entered.set()
        await self.gate.wait()
        await super().start(session_config)


class TestSessionService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = MemoryDocumentStore()
        self.scorer = MockScoringProvider()
        self.registry = MemorySessionRegistry()
        self.concurrency = ConcurrencyManager()
        self.transports = []
        self.generate = CallConfig(user_name="Ada", user_id="user_1", mode=SessionMode.GENERATE)

    def _service(self, transport_cls=InProcessVoiceTransport, **kwargs) -> SessionService:
        def transport_factory():
            transport = transport_cls()
            self.transports.append(transport)
            return transport

        return SessionService(
            self.registry,
            transport_factory,
            FeedbackPipeline(self.scorer, FeedbackRepository(self.store)),
            concurrency_manager=self.concurrency,
            **kwargs,
        )

    async def test_01_call_gets_session_webhook(self):
        """Scenario: with a public base URL the call is told to post to this session's webhook"""
        service = self._service(public_base_url="https://api.example.com/")

        state = await service.start_session(self.generate)

        session_config = self.transports[0].session_config
        self.assertEqual(session_config.session_id, state.session_id)
        self.assertEqual(
            session_config.server_url,
            f"https://api.example.com/api/v1/sessions/{state.session_id}/vapi",
        )

    async def test_02_no_webhook_without_base_url(self):
        service = self._service()
        await service.start_session(self.generate)
        self.assertIsNone(self.transports[0].session_config.server_url)

    async def test_03_disconnect_does_not_wait_for_slow_start(self):
        """Scenario: hang up while the call is still opening -> FINISHED at once, opened call stopped"""
        service = self._service(transport_cls=GatedStartTransport)

        starting = asyncio.create_task(service.start_session(self.generate))
        while not self.transports:
            await asyncio.sleep(0)
        transport = self.transports[0]
        await transport.entered.wait()
        session_id = self.registry.find_by_user("user_1")[0].session_id

        state = await asyncio.wait_for(service.disconnect_session(session_id, "user_1"), timeout=1)
        self.assertEqual(state.status, SessionStatus.FINISHED)
        self.assertEqual(state.redirect, "/")

        transport.gate.set()
        state = await starting
        self.assertEqual(state.status, SessionStatus.FINISHED)
        self.assertFalse(transport.is_open)

    async def test_04_failed_start_releases_session(self):
        service = self._service(transport_cls=lambda: InProcessVoiceTransport(fail_on_start=True))

        with self.assertRaises(TransportError):
            await service.start_session(self.generate)
        self.assertEqual(len(self.registry), 0)

    async def test_05_finished_sessions_expire(self):
        """Scenario: finished sessions past the TTL are released along with their locks"""
        service = self._service(finished_ttl_sec=0)
        state = await service.start_session(self.generate)
        await service.disconnect_session(state.session_id, "user_1")
        self.assertIn(state.session_id, self.concurrency._locks)

        service.purge_expired()

        self.assertEqual(len(self.registry), 0)
        self.assertNotIn(state.session_id, self.concurrency._locks)
        self.assertEqual(self.transports[0].handler_count(), 0)
        with self.assertRaises(NotFoundError):
            service.get_session(state.session_id, "user_1")

    async def test_06_live_sessions_do_not_expire(self):
        service = self._service(finished_ttl_sec=0)
        state = await service.start_session(self.generate)

        await service.start_session(self.generate)

        self.assertEqual(service.get_session(state.session_id, "user_1").status, SessionStatus.CONNECTING)
        self.assertEqual(len(self.registry), 2)

    async def test_07_events_scoped_to_owner(self):
        """Scenario: another user's event is refused and leaves the session as it was"""
        service = self._service()
        state = await service.start_session(self.generate)
        ended = VoiceEvent(type=VoiceEventType.CALL_ENDED)

        with self.assertRaises(PermissionDeniedError):
            await service.handle_event(state.session_id, ended, "user_2")
        self.assertEqual(service.get_session(state.session_id).status, SessionStatus.CONNECTING)

        state = await service.handle_event(state.session_id, ended, "user_1")
        self.assertEqual(state.status, SessionStatus.FINISHED)


if __name__ == "__main__":
    unittest.main()
