from __future__ import annotations

from enum import Enum


class MessageType(str, Enum):
    """Socket Mode envelope kinds, the value is the wire ``type`` tag."""

    HELLO = "hello"                      # Connection accepted, no payload
    DISCONNECT = "disconnect"            # Provider asks the client to go away
    SLASH_COMMANDS = "slash_commands"    # Slash command invocation, needs ack
    INTERACTIVE = "interactive"          # Block actions and friends, needs ack

    @classmethod
    def from_string(cls, value: str) -> MessageType:
        """Convert string to MessageType enum, raise ValueError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown message type: {value}")


class SessionState(str, Enum):
    """Dispatch loop lifecycle."""
    CONNECTED = "connected"
    TERMINATING = "terminating"
    CLOSED = "closed"
