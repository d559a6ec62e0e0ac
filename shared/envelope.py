from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union
import json

from shared.utils import require_str


class DecodeError(Exception):
    """Raised when an inbound text frame cannot be turned into an envelope."""
    pass
class BadFrameError(DecodeError):
    """Raised when a frame is not JSON or misses fields its type requires."""
    pass
class UnknownTypeError(DecodeError):
    """Raised when a frame carries a ``type`` this client does not understand."""
    def __init__(self, msg_type: str) -> None:
        super().__init__(f"Unknown message type: {msg_type}")
        self.msg_type = msg_type


@dataclass
class CommandPayload:
    """
    Slash command context as delivered inside a ``slash_commands`` envelope.

    Every value is opaque text, including ``is_enterprise_install``.
    """
    token: str
    team_id: str
    team_domain: str
    channel_id: str
    channel_name: str
    user_id: str
    user_name: str
    command: str
    text: str
    api_app_id: str
    is_enterprise_install: str
    response_url: str    # carried but not used for delayed responses
    trigger_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommandPayload':
        if not isinstance(data, dict):
            raise BadFrameError("'payload' must be an object")
        try:
            values = {f.name: require_str(data, f.name) for f in fields(cls)}
        except (KeyError, TypeError) as e:
            raise BadFrameError(f"Invalid slash command payload: {e}")
        return cls(**values)


@dataclass
class Hello:
    num_connections: Optional[int] = None
    debug_info: Dict[str, Any] = field(default_factory=dict)
    type: str = field(default="hello", init=False)


@dataclass
class Disconnect:
    reason: str
    debug_info: Dict[str, Any] = field(default_factory=dict)
    type: str = field(default="disconnect", init=False)


@dataclass
class SlashCommand:
    envelope_id: str
    payload: CommandPayload
    type: str = field(default="slash_commands", init=False)


@dataclass
class Interactive:
    """Block action envelope, only ``envelope_id`` is interpreted."""
    envelope_id: str
    type: str = field(default="interactive", init=False)


InboundEnvelope = Union[Hello, Disconnect, SlashCommand, Interactive]


@dataclass
class AckEnvelope:
    """
    Outbound acknowledgement:
    {
    "envelope_id": "STRING (echoed verbatim)",
    "payload": { ... }   (omitted entirely when there is nothing to render)
    }
    """
    envelope_id: str
    payload: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'envelope_id': self.envelope_id}
        if self.payload is not None:
            result['payload'] = self.payload
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'), ensure_ascii=False)


# ========================================
#           DECODING
# ========================================

def _decode_hello(data: Dict[str, Any]) -> Hello:
    num = data.get('num_connections')
    return Hello(
        num_connections=num if isinstance(num, int) else None,
        debug_info=_debug_info(data),
    )


def _decode_disconnect(data: Dict[str, Any]) -> Disconnect:
    return Disconnect(reason=_field(data, 'reason'), debug_info=_debug_info(data))


def _decode_slash_command(data: Dict[str, Any]) -> SlashCommand:
    if 'payload' not in data:
        raise BadFrameError("Missing required field: 'payload'")
    return SlashCommand(
        envelope_id=_field(data, 'envelope_id'),
        payload=CommandPayload.from_dict(data['payload']),
    )


def _decode_interactive(data: Dict[str, Any]) -> Interactive:
    return Interactive(envelope_id=_field(data, 'envelope_id'))


_DECODERS = {
    "hello": _decode_hello,
    "disconnect": _decode_disconnect,
    "slash_commands": _decode_slash_command,
    "interactive": _decode_interactive,
}


def decode_frame(text: str) -> InboundEnvelope:
    """Parse a text frame into one of the inbound envelope variants"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BadFrameError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise BadFrameError("Frame must be a JSON object")
    msg_type = data.get('type')
    if not isinstance(msg_type, str):
        raise BadFrameError("'type' must be a string")

    decoder = _DECODERS.get(msg_type)
    if decoder is None:
        raise UnknownTypeError(msg_type)
    return decoder(data)


def encode_ack(ack: AckEnvelope) -> str:
    """Serialize an acknowledgement to the compact JSON text sent on the wire"""
    return ack.to_json()


def _field(data: Dict[str, Any], name: str) -> str:
    try:
        return require_str(data, name)
    except (KeyError, TypeError) as e:
        raise BadFrameError(str(e))


def _debug_info(data: Dict[str, Any]) -> Dict[str, Any]:
    info = data.get('debug_info')
    return info if isinstance(info, dict) else {}
