import pytest

from helpers import DummyWebSocket


@pytest.fixture
def ticket():
    from socketmode.handshake import ConnectionTicket
    return ConnectionTicket(ok=True, url="wss://wss-primary.slack.com/link/?ticket=abc&app_id=A0001")


@pytest.fixture
def make_session(ticket):
    from socketmode.ws_client import SocketModeSession

    def _make(websocket: DummyWebSocket, **kwargs) -> SocketModeSession:
        session = SocketModeSession(ticket, **kwargs)
        session.websocket = websocket
        return session

    return _make
