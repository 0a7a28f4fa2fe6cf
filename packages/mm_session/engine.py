import asyncio
import logging
import time
from typing import Callable, List, Optional

from packages.mm_core.errors import SessionStateError, TransportError
from packages.mm_feedback.pipeline import FeedbackPipeline, SynthesisResult
from packages.mm_providers.voice.base import (
    IVoiceTransport,
    Subscription,
    TransportSessionConfig,
    VoiceEvent,
    VoiceEventType,
)
from packages.mm_transcript.accumulator import TranscriptAccumulator
from packages.mm_transcript.dto import Speaker, Turn

from .dto import CallConfig, SessionContext, SessionState
from .state import HOME_ROUTE, FinishTrigger, SessionMode, SessionStatus, feedback_route

logger = logging.getLogger("mockmate.session")

Navigator = Callable[[str], None]


class CallSessionEngine:
    """
    Core logic for one voice call session.
    Owns the lifecycle, reacts to transport events and dispatches the
    FINISHED side effect exactly once, from inside the transition.

    One instance per call: FINISHED is terminal, a new call needs a new engine.
    """
    def __init__(
        self,
        session_id: str,
        transport: IVoiceTransport,
        pipeline: Optional[FeedbackPipeline] = None,
        navigate: Optional[Navigator] = None,
        workflow_id: Optional[str] = None,
        server_url: Optional[str] = None,
        stop_timeout_sec: float = 5.0,
    ):
        self.session_id = session_id
        self.transport = transport
        self.pipeline = pipeline
        self.navigate = navigate
        self.workflow_id = workflow_id
        self.server_url = server_url
        self.stop_timeout_sec = stop_timeout_sec

        self.config: Optional[CallConfig] = None
        self.context = SessionContext(session_id=session_id)
        self.transcript = TranscriptAccumulator()
        self.synthesis: Optional[SynthesisResult] = None
        self._finished_dispatched = False
        self._dispatch_completed = False

        self._subscriptions: List[Subscription] = [
            transport.on(VoiceEventType.CALL_STARTED, self._on_call_started),
            transport.on(VoiceEventType.CALL_ENDED, self._on_call_ended),
            transport.on(VoiceEventType.SPEECH_STARTED, self._on_speech_started),
            transport.on(VoiceEventType.SPEECH_ENDED, self._on_speech_ended),
            transport.on(VoiceEventType.TRANSCRIPT_FINAL, self._on_transcript_final),
            transport.on(VoiceEventType.ERROR, self._on_error),
        ]

    @property
    def status(self) -> SessionStatus:
        return self.context.status

    @property
    def is_settled(self) -> bool:
        """FINISHED and the finished dispatch has run to completion."""
        return self.context.status == SessionStatus.FINISHED and self._dispatch_completed

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def start(self, config: CallConfig) -> None:
        """IDLE -> CONNECTING, then open the call. Returns to IDLE if the transport refuses."""
        if self.context.status != SessionStatus.IDLE:
            raise SessionStateError(
                f"Session {self.session_id} cannot start from {self.context.status.value}"
            )
        if config.mode == SessionMode.INTERVIEW and self.pipeline is None:
            raise SessionStateError("Interview sessions require a feedback pipeline")

        self.config = config
        self.context.mode = config.mode
        self._update_status(SessionStatus.CONNECTING)

        session_config = TransportSessionConfig(
            workflow_id=self.workflow_id,
            variable_values=config.to_variable_values(),
            session_id=self.session_id,
            server_url=self.server_url,
        )
        try:
            await self.transport.start(session_config)
        except Exception as e:
            # a disconnect may already have finished the session while we were waiting
            if self.context.status == SessionStatus.CONNECTING:
                self._update_status(SessionStatus.IDLE)
            logger.error(f"Session {self.session_id} failed to connect: {e}")
            if isinstance(e, TransportError):
                raise
            raise TransportError(f"Voice transport failed to open: {e}") from e

        if self.context.status == SessionStatus.FINISHED:
            # disconnected while the call was being opened
            await self._stop_transport()

    async def disconnect(self) -> None:
        """
        User-initiated end of call. Forces FINISHED without waiting for the
        transport to confirm, then asks the transport to close.
        """
        if self.context.status == SessionStatus.IDLE:
            raise SessionStateError(f"Session {self.session_id} has not been started")
        if self.context.status == SessionStatus.FINISHED:
            logger.debug(f"Session {self.session_id} already finished; disconnect ignored")
            return

        transcript = self._enter_finished(FinishTrigger.USER_DISCONNECT)
        await self._stop_transport()
        await self._dispatch_finished(transcript)

    async def inject_user_turn(self, text: str) -> None:
        """Forward a synthetic user message into the live call."""
        if self.context.status != SessionStatus.ACTIVE:
            raise SessionStateError(
                f"Session {self.session_id} is not active ({self.context.status.value})"
            )
        await self.transport.send({"role": "user", "content": text})

    def close(self) -> None:
        """Deregister every transport callback. Safe to call more than once."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def state(self) -> SessionState:
        turns = list(self.transcript.all())
        return SessionState(
            session_id=self.session_id,
            status=self.context.status,
            mode=self.context.mode,
            turns=turns,
            latest_turn=self.transcript.latest(),
            is_counterpart_speaking=self.context.is_counterpart_speaking,
            redirect=self.context.redirect,
            feedback_id=self.context.feedback_id,
            last_error=self.context.last_error,
        )

    # ------------------------------------------------------------------
    # Transport event handlers
    # ------------------------------------------------------------------
    def _on_call_started(self, event: VoiceEvent) -> None:
        if self.context.status != SessionStatus.CONNECTING:
            logger.warning(f"Ignoring call-started for {self.session_id} in {self.context.status.value}")
            return
        self.context.started_at = time.time()
        self._update_status(SessionStatus.ACTIVE)

    async def _on_call_ended(self, event: VoiceEvent) -> None:
        if self.context.status not in (SessionStatus.CONNECTING, SessionStatus.ACTIVE):
            logger.debug(f"Ignoring call-ended for {self.session_id} in {self.context.status.value}")
            return
        transcript = self._enter_finished(FinishTrigger.CALL_ENDED)
        await self._dispatch_finished(transcript)

    def _on_speech_started(self, event: VoiceEvent) -> None:
        self.context.is_counterpart_speaking = True

    def _on_speech_ended(self, event: VoiceEvent) -> None:
        self.context.is_counterpart_speaking = False

    def _on_transcript_final(self, event: VoiceEvent) -> None:
        if self.context.status == SessionStatus.FINISHED:
            logger.warning(f"Dropping transcript received after {self.session_id} finished")
            return
        try:
            speaker = Speaker.parse(event.speaker or "")
        except ValueError:
            logger.warning(f"Dropping transcript with unknown speaker {event.speaker!r}")
            return
        self.transcript.append(Turn(speaker=speaker, text=event.text or ""))

    def _on_error(self, event: VoiceEvent) -> None:
        # tolerated: only call-ended or disconnect end a session
        self.context.last_error = event.detail
        logger.error(f"Transport error in session {self.session_id}: {event.detail}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _update_status(self, new_status: SessionStatus) -> None:
        logger.info(f"Session {self.session_id}: {self.context.status.value} -> {new_status.value}")
        self.context.status = new_status

    def _enter_finished(self, trigger: FinishTrigger):
        """
        The terminal transition. Synchronous so nothing can interleave between
        the status change and the transcript snapshot.
        """
        self._update_status(SessionStatus.FINISHED)
        self.context.finish_trigger = trigger
        self.context.finished_at = time.time()
        self.context.is_counterpart_speaking = False
        return self.transcript.snapshot()

    async def _dispatch_finished(self, transcript) -> None:
        if self._finished_dispatched:
            logger.warning(f"Finished dispatch for {self.session_id} already ran")
            return
        self._finished_dispatched = True

        try:
            if self.config.mode == SessionMode.GENERATE:
                self._redirect(HOME_ROUTE)
                return

            self.synthesis = await self.pipeline.synthesize_feedback(
                interview_id=self.config.interview_id,
                user_id=self.config.user_id,
                transcript=transcript,
                feedback_id=self.config.feedback_id,
            )
            if self.synthesis.success and self.synthesis.feedback_id:
                self.context.feedback_id = self.synthesis.feedback_id
                self._redirect(feedback_route(self.config.interview_id))
            else:
                self._redirect(HOME_ROUTE)
        finally:
            self._dispatch_completed = True

    def _redirect(self, route: str) -> None:
        self.context.redirect = route
        if self.navigate is not None:
            self.navigate(route)

    async def _stop_transport(self) -> None:
        try:
            await asyncio.wait_for(self.transport.stop(), timeout=self.stop_timeout_sec)
        except asyncio.TimeoutError:
            logger.warning(f"Transport stop timed out for session {self.session_id}")
        except TransportError as e:
            logger.warning(f"Transport stop failed for session {self.session_id}: {e}")
