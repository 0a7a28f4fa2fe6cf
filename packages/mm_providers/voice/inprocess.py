from typing import Any, Dict, List, Optional

from packages.mm_core.errors import TransportError

from .base import IVoiceTransport, TransportSessionConfig, logger


class InProcessVoiceTransport(IVoiceTransport):
    """
    Transport whose events are pushed by the host process.
    Used behind the events webhook and in tests. `fail_on_start` simulates
    a call that cannot be opened.
    """
    def __init__(self, fail_on_start: bool = False):
        super().__init__()
        self.fail_on_start = fail_on_start
        self.session_config: Optional[TransportSessionConfig] = None
        self.is_open = False
        self.stop_calls = 0
        self.sent: List[Dict[str, Any]] = []

    async def start(self, session_config: TransportSessionConfig) -> None:
        if self.fail_on_start:
            raise TransportError("In-process transport configured to refuse calls")
        self.session_config = session_config
        self.is_open = True
        logger.debug(f"In-process call opened with {len(session_config.variable_values)} variables")

    async def stop(self) -> None:
        self.stop_calls += 1
        self.is_open = False

    async def send(self, message: Dict[str, Any]) -> None:
        if not self.is_open:
            raise TransportError("Cannot send on a closed call")
        self.sent.append(message)
