from __future__ import annotations
from typing import Any, Mapping, NamedTuple, Optional
from urllib.parse import urlsplit

# ========================================
#           INPUT VALIDATION HELPERS
# ========================================
"""
Helpers used by the envelope decoder and the handshake to decide whether
incoming JSON and connection URLs are well formed.
"""

SECURE_PORT = 443


def require_str(data: Mapping[str, Any], key: str) -> str:
    """
    Return ``data[key]`` if it is a string.

    Raises KeyError when the key is missing and TypeError when the value is
    any other JSON type (null included).
    """
    if key not in data:
        raise KeyError(f"Missing required field: '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string")
    return value


class StreamTarget(NamedTuple):
    """Where the secure stream is opened and what the upgrade request asks for."""
    host: str
    port: int
    resource: str


def parse_ws_url(url: str) -> Optional[StreamTarget]:
    """
    Split a WebSocket URL into host, port and upgrade resource.

    - scheme must be wss; plaintext ws is refused
    - the stream always goes to port 443, a URL naming any other port is refused
    - host must be non-empty
    - resource is the path plus ``?query`` ("/" when the URL has no path)

    Returns None when the URL is not usable.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() != "wss" or not parts.hostname:
        return None
    if port is not None and port != SECURE_PORT:
        return None
    resource = parts.path or "/"
    if parts.query:
        resource = f"{resource}?{parts.query}"
    return StreamTarget(parts.hostname, SECURE_PORT, resource)
