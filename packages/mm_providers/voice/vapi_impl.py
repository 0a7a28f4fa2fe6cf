from typing import Any, Dict, Optional

import httpx

from packages.mm_core.errors import TransportError

from .base import IVoiceTransport, TransportSessionConfig, VoiceEvent, VoiceEventType, logger


class VapiVoiceTransport(IVoiceTransport):
    """
    Vapi-backed transport.
    Calls are created and ended over the REST API; lifecycle and transcript
    events arrive as server messages on the webhook and are replayed with `emit()`.
    """
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.vapi.ai",
        default_workflow_id: Optional[str] = None,
        timeout: float = 10.0,
        server_secret: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_workflow_id = default_workflow_id
        self.timeout = timeout
        self.server_secret = server_secret
        self._http_transport = transport
        self.call_id: Optional[str] = None
        self.control_url: Optional[str] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._http_transport,
        )

    async def start(self, session_config: TransportSessionConfig) -> None:
        workflow_id = session_config.workflow_id or self.default_workflow_id
        if not workflow_id:
            raise TransportError("No Vapi workflow id configured")

        overrides: Dict[str, Any] = {"variableValues": session_config.variable_values}
        if session_config.server_url:
            # this call's server messages go to the session's own webhook
            server: Dict[str, Any] = {"url": session_config.server_url}
            if self.server_secret:
                server["secret"] = self.server_secret
            overrides["server"] = server

        body: Dict[str, Any] = {"workflowId": workflow_id, "workflowOverrides": overrides}
        if session_config.session_id:
            body["metadata"] = {"sessionId": session_config.session_id}
        try:
            async with self._client() as client:
                resp = await client.post("/call", json=body)
        except httpx.HTTPError as e:
            raise TransportError(f"Vapi call creation failed: {e}") from e

        if resp.status_code >= 400:
            raise TransportError(
                f"Vapi call creation rejected: {resp.status_code}",
                details={"body": resp.text[:500]},
            )

        data = resp.json()
        self.call_id = data.get("id")
        self.control_url = (data.get("monitor") or {}).get("controlUrl")
        logger.info(f"Vapi call created: {self.call_id}")

    async def _control(self, payload: Dict[str, Any]) -> None:
        if not self.control_url:
            raise TransportError("Vapi call has no control url")
        try:
            async with self._client() as client:
                resp = await client.post(self.control_url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Vapi control request failed: {e}") from e
        if resp.status_code >= 400:
            raise TransportError(f"Vapi control request rejected: {resp.status_code}")

    async def stop(self) -> None:
        if not self.control_url:
            return
        await self._control({"type": "end-call"})

    async def send(self, message: Dict[str, Any]) -> None:
        await self._control({"type": "add-message", "message": message})


def parse_server_message(payload: Dict[str, Any]) -> Optional[VoiceEvent]:
    """
    Translate a Vapi server message into a VoiceEvent.
    Returns None for message types the session does not track
    (partial transcripts, tool calls, ...).
    """
    message = payload.get("message", payload)
    msg_type = message.get("type")

    if msg_type == "status-update":
        status = message.get("status")
        if status == "in-progress":
            return VoiceEvent(type=VoiceEventType.CALL_STARTED)
        if status == "ended":
            return VoiceEvent(type=VoiceEventType.CALL_ENDED)
        return None

    if msg_type == "end-of-call-report":
        return VoiceEvent(type=VoiceEventType.CALL_ENDED)

    if msg_type == "speech-update":
        # only the assistant side drives the "counterpart speaking" indicator
        if message.get("role") != "assistant":
            return None
        if message.get("status") == "started":
            return VoiceEvent(type=VoiceEventType.SPEECH_STARTED)
        if message.get("status") == "stopped":
            return VoiceEvent(type=VoiceEventType.SPEECH_ENDED)
        return None

    if msg_type == "transcript":
        if message.get("transcriptType") != "final":
            return None
        return VoiceEvent(
            type=VoiceEventType.TRANSCRIPT_FINAL,
            speaker=message.get("role", "user"),
            text=message.get("transcript", ""),
        )

    if msg_type == "hang" or msg_type == "error":
        return VoiceEvent(type=VoiceEventType.ERROR, detail=str(message.get("error") or msg_type))

    return None
