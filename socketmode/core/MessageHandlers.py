from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Dict

from shared.envelope import AckEnvelope, Disconnect, Hello, Interactive, SlashCommand
from shared.log import get_logger, log_envelope
from socketmode.core.MessageTypes import MessageType, SessionState

if TYPE_CHECKING:
    from shared.envelope import InboundEnvelope
    from socketmode.ws_client import SocketModeSession

logger = get_logger(__name__)

# Type alias for handler functions
MessageHandler = Callable[["SocketModeSession", "InboundEnvelope"], Awaitable[None]]


class MessageHandlers:
    """
    One handler per envelope kind. Handlers run to completion, send included,
    before the session pulls the next frame.
    """

    @staticmethod
    async def handle_hello(session: "SocketModeSession", envelope: Hello) -> None:
        logger.info(
            f"Hello: connections={envelope.num_connections} debug_info={envelope.debug_info}",
            extra={"conn": session.name, "msg_type": envelope.type},
        )

    @staticmethod
    async def handle_disconnect(session: "SocketModeSession", envelope: Disconnect) -> None:
        logger.info(
            f"Disconnect request: {envelope.reason}",
            extra={"conn": session.name, "msg_type": envelope.type},
        )
        session.disconnect_reason = envelope.reason
        session.state = SessionState.TERMINATING

    @staticmethod
    async def handle_slash_command(session: "SocketModeSession", envelope: SlashCommand) -> None:
        command = envelope.payload
        log_envelope(
            logger, "info",
            f"Slash command {command.command} from {command.user_name} in #{command.channel_name}",
            envelope=envelope, conn=session.name,
        )
        payload = session.responder.build_response(envelope)
        await session.send_ack(AckEnvelope(envelope.envelope_id, payload.to_dict()))

    @staticmethod
    async def handle_interactive(session: "SocketModeSession", envelope: Interactive) -> None:
        log_envelope(logger, "info", "Block actions", envelope=envelope, conn=session.name)
        await session.send_ack(AckEnvelope(envelope.envelope_id))


HANDLER_REGISTRY: Dict[MessageType, MessageHandler] = {
    MessageType.HELLO: MessageHandlers.handle_hello,
    MessageType.DISCONNECT: MessageHandlers.handle_disconnect,
    MessageType.SLASH_COMMANDS: MessageHandlers.handle_slash_command,
    MessageType.INTERACTIVE: MessageHandlers.handle_interactive,
}
