import json

import pytest
import websockets
import websockets.exceptions

from helpers import DISCONNECT, HELLO, DummyWebSocket, interactive_frame, slash_frame


@pytest.mark.asyncio
async def test_hello_sends_nothing_and_keeps_reading(make_session):
    from socketmode.core.MessageTypes import SessionState

    ws = DummyWebSocket([HELLO, '{"type":"hello"}', interactive_frame("I1")])
    session = make_session(ws)

    reason = await session.recv_loop()

    assert reason is None
    assert ws.frames_read == 3
    assert [json.loads(m) for m in ws.sent_messages] == [{"envelope_id": "I1"}]
    assert session.state is SessionState.CLOSED
    assert ws.closed is True


@pytest.mark.asyncio
async def test_disconnect_stops_the_loop_without_sending(make_session):
    ws = DummyWebSocket([DISCONNECT, slash_frame("E9"), interactive_frame("I9")])
    session = make_session(ws)

    reason = await session.recv_loop()

    assert reason == "refresh_requested"
    assert ws.sent_messages == []
    assert ws.frames_read == 1
    assert session.acks_sent == 0


@pytest.mark.asyncio
async def test_slash_command_ack_carries_rendered_payload(make_session):
    ws = DummyWebSocket([slash_frame("E1", command="/test")])
    session = make_session(ws)

    await session.recv_loop()

    assert len(ws.sent_messages) == 1
    ack = json.loads(ws.sent_messages[0])
    assert ack["envelope_id"] == "E1"
    payload = ack["payload"]
    assert payload["response_type"] == "ephemeral"
    assert len(payload["blocks"]) >= 1
    assert payload["blocks"][0]["accessory"]["action_id"] == "button-action"


@pytest.mark.asyncio
async def test_interactive_ack_has_no_payload_key(make_session):
    ws = DummyWebSocket([interactive_frame("I1")])
    session = make_session(ws)

    await session.recv_loop()

    assert len(ws.sent_messages) == 1
    assert "payload" not in json.loads(ws.sent_messages[0])


@pytest.mark.asyncio
async def test_unknown_and_malformed_frames_are_skipped(make_session):
    ws = DummyWebSocket([
        '{"type":"events_api","envelope_id":"X1","payload":{}}',
        "{broken",
        b"\x00\x01binary",
        slash_frame("E2"),
    ])
    session = make_session(ws)

    await session.recv_loop()

    assert ws.frames_read == 4
    assert [json.loads(m)["envelope_id"] for m in ws.sent_messages] == ["E2"]


@pytest.mark.asyncio
async def test_one_ack_per_envelope_in_arrival_order(make_session):
    ids = ["E1", "I1", "E2", "I2", "E3"]
    frames = [slash_frame(i) if i.startswith("E") else interactive_frame(i) for i in ids]
    ws = DummyWebSocket([HELLO] + frames + [DISCONNECT])
    session = make_session(ws)

    reason = await session.recv_loop()

    assert reason == "refresh_requested"
    assert [json.loads(m)["envelope_id"] for m in ws.sent_messages] == ids
    assert session.acks_sent == len(ids)


@pytest.mark.asyncio
async def test_send_failure_is_fatal(make_session):
    from socketmode.core.MessageTypes import SessionState
    from socketmode.errors import SendError

    closed = websockets.exceptions.ConnectionClosedError(None, None)
    ws = DummyWebSocket([slash_frame("E1"), slash_frame("E2")], fail_send=closed)
    session = make_session(ws)

    with pytest.raises(SendError) as info:
        await session.recv_loop()

    assert info.value.envelope_id == "E1"
    assert ws.frames_read == 1
    assert session.state is SessionState.CLOSED


@pytest.mark.asyncio
async def test_abnormal_stream_end_is_fatal(make_session):
    from socketmode.errors import TransportError

    ws = DummyWebSocket([HELLO], end_with=websockets.exceptions.ConnectionClosedError(None, None))
    session = make_session(ws)

    with pytest.raises(TransportError):
        await session.recv_loop()
    assert ws.closed is True


@pytest.mark.asyncio
async def test_custom_response_builder_is_used(make_session):
    from socketmode.responses import Block, ResponseBuilder, ResponsePayload, Text

    class EchoBuilder(ResponseBuilder):
        def __init__(self):
            self.seen = []

        def build_response(self, command):
            self.seen.append(command.payload.text)
            return ResponsePayload(
                text=command.payload.text,
                response_type="in_channel",
                blocks=[Block(text=Text("mrkdwn", command.payload.command))],
            )

    builder = EchoBuilder()
    ws = DummyWebSocket([slash_frame("E1", command="/echo", text="hi there")])
    session = make_session(ws, responder=builder)

    await session.recv_loop()

    assert builder.seen == ["hi there"]
    ack = json.loads(ws.sent_messages[0])
    assert ack["payload"] == {
        "text": "hi there",
        "response_type": "in_channel",
        "blocks": [{"type": "section", "text": {"type": "mrkdwn", "text": "/echo"}}],
    }


@pytest.mark.asyncio
async def test_handlers_can_be_overridden(make_session):
    from socketmode.core.MessageTypes import MessageType

    seen = []

    async def on_interactive(session, envelope):
        seen.append(envelope.envelope_id)

    ws = DummyWebSocket([interactive_frame("I7")])
    session = make_session(ws)
    session.on(MessageType.INTERACTIVE, on_interactive)

    await session.recv_loop()

    assert seen == ["I7"]
    assert ws.sent_messages == []


@pytest.mark.asyncio
async def test_connect_failure_is_wrapped(monkeypatch, ticket):
    from socketmode.errors import ConnectError
    from socketmode.ws_client import SocketModeSession

    captured = {}

    async def failing_connect(uri, **kwargs):
        captured["uri"] = uri
        raise OSError("Name or service not known")

    monkeypatch.setattr(websockets, "connect", failing_connect)
    session = SocketModeSession(ticket)

    with pytest.raises(ConnectError):
        await session.connect()
    assert captured["uri"] == ticket.url


@pytest.mark.asyncio
async def test_run_connects_with_full_ticket_url(monkeypatch, ticket):
    from socketmode.ws_client import SocketModeSession

    ws = DummyWebSocket([HELLO, DISCONNECT])
    captured = {}

    async def fake_connect(uri, **kwargs):
        captured["uri"] = uri
        captured["kwargs"] = kwargs
        return ws

    monkeypatch.setattr(websockets, "connect", fake_connect)
    session = SocketModeSession(ticket, ping_interval=None)

    reason = await session.run()

    assert reason == "refresh_requested"
    assert captured["uri"] == "wss://wss-primary.slack.com/link/?ticket=abc&app_id=A0001"
    assert captured["kwargs"] == {
        "ping_interval": None,
        "ping_timeout": 45.0,
        "max_size": 64 * 1024 * 1024,
        "open_timeout": None,
    }


@pytest.mark.asyncio
async def test_oversized_unknown_frame_is_skipped_over_a_real_connection(ticket):
    from websockets.asyncio.server import serve

    from socketmode.ws_client import SocketModeSession

    big_frame = json.dumps({"type": "events_api", "envelope_id": "X1", "payload": {"blob": "x" * (2 * 1024 * 1024)}})
    received = []

    async def provider(websocket):
        await websocket.send(big_frame)
        await websocket.send(slash_frame("E2"))
        received.append(json.loads(await websocket.recv()))
        await websocket.send(DISCONNECT)
        await websocket.wait_closed()

    async with serve(provider, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        session = SocketModeSession(ticket)
        session.websocket = await websockets.connect(
            f"ws://127.0.0.1:{port}/link/?ticket=abc", **session.connect_options()
        )

        reason = await session.recv_loop()

    assert reason == "refresh_requested"
    assert [ack["envelope_id"] for ack in received] == ["E2"]
    assert session.acks_sent == 1
