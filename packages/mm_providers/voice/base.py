import inspect
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import Field

from packages.mm_core.dto import BaseDTO

logger = logging.getLogger("mockmate.transport")


class VoiceEventType(str, Enum):
    """Events emitted by a realtime voice transport."""
    CALL_STARTED = "call-started"
    CALL_ENDED = "call-ended"
    SPEECH_STARTED = "speech-started"
    SPEECH_ENDED = "speech-ended"
    TRANSCRIPT_FINAL = "transcript-final"
    ERROR = "error"


class VoiceEvent(BaseDTO):
    type: VoiceEventType
    speaker: Optional[str] = Field(None, description="Only for transcript-final")
    text: Optional[str] = Field(None, description="Only for transcript-final")
    detail: Optional[str] = Field(None, description="Only for error")


class TransportSessionConfig(BaseDTO):
    """What the transport needs to open a call: the workflow and its variable values."""
    workflow_id: Optional[str] = None
    variable_values: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = None
    server_url: Optional[str] = Field(None, description="Where the platform posts server messages for this call")


EventHandler = Union[Callable[[VoiceEvent], None], Callable[[VoiceEvent], Awaitable[None]]]


class Subscription:
    """Handle returned by `on()`. `unsubscribe()` is idempotent."""
    def __init__(self, transport: "IVoiceTransport", event_type: VoiceEventType, handler: EventHandler):
        self.transport = transport
        self.event_type = event_type
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.transport.off(self.event_type, self.handler)
        self.active = False


class IVoiceTransport(ABC):
    """
    Realtime voice transport contract.
    Subclasses implement start/stop/send; the handler registry is shared.
    """
    def __init__(self):
        self._handlers: Dict[VoiceEventType, List[EventHandler]] = defaultdict(list)

    @abstractmethod
    async def start(self, session_config: TransportSessionConfig) -> None:
        """Open a call. Raises TransportError if it cannot be opened."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass

    @abstractmethod
    async def send(self, message: Dict[str, Any]) -> None:
        """Inject a synthetic message (e.g. a user turn) into the live call."""
        pass

    def on(self, event_type: VoiceEventType, handler: EventHandler) -> Subscription:
        self._handlers[event_type].append(handler)
        return Subscription(self, event_type, handler)

    def off(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event_type: Optional[VoiceEventType] = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values())

    async def emit(self, event: VoiceEvent) -> None:
        """Deliver an event to its subscribers, in registration order."""
        # copy: a handler may unsubscribe while we iterate
        for handler in list(self._handlers.get(event.type, [])):
            result = handler(event)
            if inspect.isawaitable(result):
                await result
