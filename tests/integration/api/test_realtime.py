"""
WebSocket channel tests.

httpx cannot speak WebSocket, so these use Starlette's TestClient with the
authentication service stubbed out.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from pos_auth.app.services.authentication import AuthenticatedUser
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.depends import connection_manager, get_authentication_service
from pos_auth.domain import errors
from pos_auth.libs.result import Return
from tests.fixtures.api_helpers import IntegrationConfig

CASHIER = UserInfo(
    id="9f1c2f9e-0000-4000-8000-000000000001",
    username="casey",
    email="casey@smartgrocery.io",
    role="cashier",
    first_name="Casey",
    last_name="Staff",
    status="active",
    is_approved=True,
)


class StubAuthenticationService:
    async def authenticate(self, token):
        if token == "good-token":
            return Return.ok(AuthenticatedUser(user=CASHIER, session_id="sid-1"))
        return Return.err(errors.INVALID_TOKEN)


@pytest.fixture
def ws_client():
    from pos_auth.api.app import create_app

    app = create_app(IntegrationConfig)
    app.dependency_overrides[get_authentication_service] = StubAuthenticationService
    return TestClient(app)


def test_connect_receives_events_for_own_rooms(ws_client):
    with ws_client.websocket_connect("/ws?token=good-token") as ws:
        connected = ws.receive_json()
        assert connected["event"] == "connected"
        assert connection_manager.connection_count() == 1

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"event": "pong", "data": {}}

    assert connection_manager.connection_count() == 0


def test_invalid_token_closes_with_4001(ws_client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with ws_client.websocket_connect("/ws?token=bad") as ws:
            ws.receive_json()

    assert exc.value.code == 4001
