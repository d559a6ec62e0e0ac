"""Fakes and frame builders shared by the test modules."""

import json
from typing import Iterable, List, Optional, Union


class DummyWebSocket:
    """Stands in for a websockets client connection: replays frames, records sends."""

    def __init__(
        self,
        frames: Iterable[Union[str, bytes]] = (),
        *,
        end_with: Optional[BaseException] = None,
        fail_send: Optional[BaseException] = None,
    ) -> None:
        self.frames = list(frames)
        self.end_with = end_with
        self.fail_send = fail_send
        self.sent_messages: List[str] = []
        self.frames_read = 0
        self.closed = False
        self.close_code: Optional[int] = None

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            self.frames_read += 1
            yield frame
        if self.end_with is not None:
            raise self.end_with

    async def send(self, data: str) -> None:
        if self.fail_send is not None:
            raise self.fail_send
        self.sent_messages.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True
        self.close_code = code


def command_payload(**overrides) -> dict:
    payload = {
        "token": "verification-token",
        "team_id": "T0001",
        "team_domain": "example",
        "channel_id": "C2147483705",
        "channel_name": "test",
        "user_id": "U2147483697",
        "user_name": "steve",
        "command": "/test",
        "text": "hello",
        "api_app_id": "A0001",
        "is_enterprise_install": "false",
        "response_url": "https://hooks.slack.com/commands/1234/5678",
        "trigger_id": "13345224609.738474920.8088930838d88f008e0",
    }
    payload.update(overrides)
    return payload


def slash_frame(envelope_id: str = "E1", **overrides) -> str:
    return json.dumps({
        "type": "slash_commands",
        "envelope_id": envelope_id,
        "payload": command_payload(**overrides),
        "accepts_response_payload": True,
    })


def interactive_frame(envelope_id: str = "I1") -> str:
    return json.dumps({
        "type": "interactive",
        "envelope_id": envelope_id,
        "payload": {"type": "block_actions", "actions": [{"action_id": "button-action"}]},
        "accepts_response_payload": False,
    })


HELLO = json.dumps({"type": "hello", "num_connections": 1, "debug_info": {"host": "applink-1"}})
DISCONNECT = '{"type":"disconnect","reason":"refresh_requested"}'


