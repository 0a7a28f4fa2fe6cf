from .base import (
    IVoiceTransport,
    Subscription,
    TransportSessionConfig,
    VoiceEvent,
    VoiceEventType,
)
from .inprocess import InProcessVoiceTransport
from .vapi_impl import VapiVoiceTransport, parse_server_message

__all__ = [
    "IVoiceTransport",
    "Subscription",
    "TransportSessionConfig",
    "VoiceEvent",
    "VoiceEventType",
    "InProcessVoiceTransport",
    "VapiVoiceTransport",
    "parse_server_message",
]
