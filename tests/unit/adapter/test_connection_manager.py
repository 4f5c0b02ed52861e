import json
from datetime import datetime

import pytest

from pos_auth.adapter.services.connection_manager import WS_SESSION_TERMINATED, ConnectionManager


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.accepted = False
        self.fail = fail
        self.sent = []
        self.close_code = None

    async def accept(self):
        self.accepted = True

    async def send_text(self, text: str):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))

    async def close(self, code: int = 1000, reason: str = ""):
        self.close_code = code


@pytest.mark.asyncio
async def test_connect_joins_user_and_role_rooms():
    manager = ConnectionManager()
    ws = FakeWebSocket()

    connection_id = await manager.connect(ws, "user-1", "cashier")

    assert ws.accepted is True
    assert manager.connection_count() == 1
    assert connection_id in manager.room_subscriptions["user:user-1"]
    assert connection_id in manager.room_subscriptions["role:cashier"]


@pytest.mark.asyncio
async def test_emit_reaches_only_addressed_rooms():
    manager = ConnectionManager()
    cashier_ws = FakeWebSocket()
    manager_ws = FakeWebSocket()
    await manager.connect(cashier_ws, "user-1", "cashier")
    await manager.connect(manager_ws, "user-2", "manager")

    await manager.emit_to_user("user-1", "session_terminated", {"at": datetime(2024, 1, 1)})
    await manager.emit_to_role("manager", "notification", {"type": "user_approval"})

    assert cashier_ws.sent == [
        {"event": "session_terminated", "data": {"at": "2024-01-01T00:00:00"}}
    ]
    assert manager_ws.sent == [
        {"event": "notification", "data": {"type": "user_approval"}}
    ]


@pytest.mark.asyncio
async def test_disconnect_cleans_up_rooms():
    manager = ConnectionManager()
    connection_id = await manager.connect(FakeWebSocket(), "user-1", "cashier")

    manager.disconnect(connection_id)
    manager.disconnect(connection_id)

    assert manager.connection_count() == 0
    assert manager.room_subscriptions == {}


@pytest.mark.asyncio
async def test_broken_socket_is_dropped():
    manager = ConnectionManager()
    await manager.connect(FakeWebSocket(fail=True), "user-1", "cashier")

    delivered = await manager.broadcast_to_room("user:user-1", "ping", {})

    assert delivered == 1
    assert manager.connection_count() == 0


@pytest.mark.asyncio
async def test_closing_one_session_leaves_other_devices_connected():
    manager = ConnectionManager()
    old_device = FakeWebSocket()
    new_device = FakeWebSocket()
    await manager.connect(old_device, "user-1", "manager", "sid-old")
    await manager.connect(new_device, "user-1", "manager", "sid-new")

    closed = await manager.close_user_connections("user-1", "sid-old")
    await manager.emit_to_role("manager", "notification", {"type": "user_approval"})

    assert closed == 1
    assert old_device.close_code == WS_SESSION_TERMINATED
    assert old_device.sent == []
    assert new_device.close_code is None
    assert new_device.sent == [{"event": "notification", "data": {"type": "user_approval"}}]


@pytest.mark.asyncio
async def test_closing_without_session_drops_every_connection_of_the_user():
    manager = ConnectionManager()
    first = FakeWebSocket()
    second = FakeWebSocket()
    other = FakeWebSocket()
    await manager.connect(first, "user-1", "cashier", "sid-1")
    await manager.connect(second, "user-1", "cashier", "sid-2")
    await manager.connect(other, "user-2", "cashier", "sid-3")

    closed = await manager.close_user_connections("user-1")

    assert closed == 2
    assert manager.connection_count() == 1
    assert "user:user-1" not in manager.room_subscriptions
    assert other.close_code is None
