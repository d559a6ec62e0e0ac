"""
Fatal error classes for the Socket Mode client.

Decode problems are recoverable and live with the transcoder in
``shared.envelope``. Everything here ends the process.
"""

from __future__ import annotations

from typing import Optional


class SocketModeError(Exception):
    """Base class for every fatal Socket Mode condition."""
    pass


# ========================================
#           SETUP FAILURES
# ========================================

class SetupError(SocketModeError):
    """Raised before any protocol state exists."""
    pass
class MissingTokenError(SetupError):
    """Raised when the app-level token is not configured."""
    def __init__(self, env_var: str) -> None:
        super().__init__(f"Environment variable {env_var} is not set")
        self.env_var = env_var
class HandshakeError(SetupError):
    """Raised when apps.connections.open could not be called or answered garbage."""
    pass
class HandshakeRejectedError(SetupError):
    """Raised when apps.connections.open answered ``ok: false``."""
    def __init__(self, error: Optional[str]) -> None:
        self.error = error or "unknown_error"
        super().__init__(f"apps.connections.open failed: {self.error}")
class InvalidTicketError(SetupError):
    """Raised when the connection URL handed out by the provider is unusable."""
    pass
class ConnectError(SetupError):
    """Raised when DNS, TLS or the WebSocket upgrade fails."""
    pass


# ========================================
#           RUNTIME FAILURES
# ========================================

class SendError(SocketModeError):
    """Raised when an acknowledgement could not be transmitted."""
    def __init__(self, envelope_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to acknowledge envelope {envelope_id}: {cause}")
        self.envelope_id = envelope_id
class TransportError(SocketModeError):
    """Raised when the stream ends abnormally while waiting for frames."""
    pass
