from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from shared.log import get_logger
from shared.utils import StreamTarget, parse_ws_url
from socketmode.config import DEFAULT_API_URL
from socketmode.errors import HandshakeError, HandshakeRejectedError, InvalidTicketError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectionTicket:
    """
    Answer of apps.connections.open:
    {
    "ok":    BOOL,
    "url":   "wss://... (present when ok)",
    "error": "STRING (present when not ok)"
    }
    """
    ok: bool
    url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConnectionTicket':
        if not isinstance(data.get('ok'), bool):
            raise HandshakeError("'ok' must be a boolean")
        url = data.get('url')
        error = data.get('error')
        return cls(
            ok=data['ok'],
            url=url if isinstance(url, str) else None,
            error=error if isinstance(error, str) else None,
        )

    def endpoint(self) -> StreamTarget:
        """Host, port and upgrade resource of the connection URL"""
        if self.url is None:
            raise InvalidTicketError("no url passed from server")
        target = parse_ws_url(self.url)
        if target is None:
            raise InvalidTicketError(f"failed to parse entrypoint url: {self.url}")
        return target


async def open_connection(
    token: str,
    *,
    api_url: str = DEFAULT_API_URL,
    client: Optional[httpx.AsyncClient] = None,
) -> ConnectionTicket:
    """
    Ask the provider for a one-time WebSocket URL.

    Sends a single POST with the bearer token and no body. Not retried.

    Raises:
        HandshakeError: transport failure, HTTP error status or unparsable body
        HandshakeRejectedError: the provider answered ``ok: false``
        InvalidTicketError: ``ok: true`` but the URL is missing or malformed
    """
    headers = {"Authorization": f"Bearer {token}"}
    try:
        if client is None:
            async with httpx.AsyncClient() as owned:
                response = await owned.post(api_url, headers=headers)
        else:
            response = await client.post(api_url, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        raise HandshakeError(f"failed to request apps.connections.open: {e}") from e
    except ValueError as e:
        raise HandshakeError(f"apps.connections.open returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise HandshakeError("apps.connections.open returned a non-object body")

    ticket = ConnectionTicket.from_dict(data)
    if not ticket.ok:
        raise HandshakeRejectedError(ticket.error)

    # validates the URL before anybody tries to dial it
    ticket.endpoint()
    logger.debug(f"full_url {ticket.url}")
    return ticket
