from __future__ import annotations
import asyncio
from typing import Any, Dict, Optional

import websockets
import websockets.exceptions

from shared.envelope import AckEnvelope, DecodeError, decode_frame, encode_ack
from shared.log import get_logger
from socketmode.config import MAX_FRAME_SIZE
from socketmode.core.MessageHandlers import HANDLER_REGISTRY, MessageHandler
from socketmode.core.MessageTypes import MessageType, SessionState
from socketmode.errors import ConnectError, SendError, TransportError
from socketmode.handshake import ConnectionTicket
from socketmode.responses import DemoResponseBuilder, ResponseBuilder

logger = get_logger(__name__)


class SocketModeSession:
    """
    Socket Mode session owning the single WebSocket connection.

    Frames are handled one at a time: decode, build, encode and send finish
    before the next frame is read, so acknowledgements leave in the order
    their envelopes arrived.
    """

    def __init__(
        self,
        ticket: ConnectionTicket,
        responder: Optional[ResponseBuilder] = None,
        *,
        ping_interval: Optional[float] = 15.0,
        ping_timeout: Optional[float] = 45.0,
        max_size: Optional[int] = MAX_FRAME_SIZE,
        name: str = "socket-mode",
    ) -> None:
        self.ticket = ticket
        self.responder: ResponseBuilder = responder or DemoResponseBuilder()
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.max_size = max_size
        self.name = name
        self.websocket: Optional[Any] = None
        self.handlers: Dict[MessageType, MessageHandler] = dict(HANDLER_REGISTRY)
        self.state = SessionState.CONNECTED
        self.disconnect_reason: Optional[str] = None
        self.acks_sent = 0

    def connect_options(self) -> Dict[str, Any]:
        """
        Keyword arguments for websockets.connect.

        No opening handshake timeout. Frames up to max_size are delivered so
        that large unknown envelopes reach the decoder and get skipped there.
        """
        return {
            "ping_interval": self.ping_interval,
            "ping_timeout": self.ping_timeout,
            "max_size": self.max_size,
            "open_timeout": None,
        }

    async def connect(self) -> None:
        """Open the secure WebSocket to the ticket URL (path and query included)"""
        target = self.ticket.endpoint()
        logger.info(f"Connecting to {target.host}:{target.port}", extra={"conn": self.name})
        try:
            self.websocket = await websockets.connect(self.ticket.url, **self.connect_options())
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            raise ConnectError(f"failed to connect websocket to {target.host}:{target.port}: {e}") from e

    async def send_ack(self, ack: AckEnvelope) -> None:
        """Send an acknowledgement, any failure is fatal"""
        assert self.websocket is not None
        try:
            await self.websocket.send(encode_ack(ack))
        except (websockets.exceptions.ConnectionClosed, OSError) as e:
            raise SendError(ack.envelope_id, e) from e
        self.acks_sent += 1
        logger.debug(f"Acknowledged {ack.envelope_id}", extra={"conn": self.name})

    def on(self, msg_type: MessageType, handler: MessageHandler) -> None:
        self.handlers[msg_type] = handler

    async def recv_loop(self) -> Optional[str]:
        """
        Dispatch frames until the provider disconnects or the stream ends.

        Returns the disconnect reason, or None when the stream simply ended.
        Raises SendError or TransportError on fatal failures.
        """
        assert self.websocket is not None
        try:
            async for raw in self.websocket:
                if isinstance(raw, bytes):
                    logger.debug("Ignoring non-text frame", extra={"conn": self.name})
                    continue
                try:
                    env = decode_frame(raw)
                except DecodeError as e:
                    logger.warning(f"Unknown text frame ({len(raw)} chars): {raw[:200]}: {e}", extra={"conn": self.name})
                    continue

                await self.handlers[MessageType.from_string(env.type)](self, env)
                if self.state is not SessionState.CONNECTED:
                    break
        except websockets.exceptions.ConnectionClosedError as e:
            raise TransportError(f"connection lost: {e}") from e
        finally:
            self.state = SessionState.TERMINATING
            await self.close()
            self.state = SessionState.CLOSED
        return self.disconnect_reason

    async def run(self) -> Optional[str]:
        await self.connect()
        return await self.recv_loop()

    async def close(self) -> None:
        if self.websocket is None:
            return
        try:
            await self.websocket.close(code=1000)
        except Exception as e:
            logger.error(f"Error closing connection: {e}")
