"""
Real-time WebSocket connection manager.

Each authenticated connection joins two rooms: ``user:{id}`` and
``role:{role}``. Messages are JSON objects ``{"event": ..., "data": ...}``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set
from uuid import uuid4

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from pos_auth.app.services.notifications import IRealtimeNotifier

logger = logging.getLogger(__name__)

# Close code sent after a session_terminated push
WS_SESSION_TERMINATED = 4000


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


def role_room(role: str) -> str:
    return f"role:{role}"


class ConnectionManager(IRealtimeNotifier):
    """Manages WebSocket connections for real-time updates."""

    def __init__(self):
        # Active connections by connection ID
        self.active_connections: Dict[str, WebSocket] = {}

        # Connection metadata
        self.connection_metadata: Dict[str, Dict] = {}

        # Room -> set of connection_ids
        self.room_subscriptions: Dict[str, Set[str]] = {}

    async def connect(
        self,
        websocket: WebSocket,
        user_id: str,
        role: str,
        session_id: Optional[str] = None,
    ) -> str:
        """Accept a new WebSocket connection and join its rooms."""
        await websocket.accept()

        connection_id = f"conn_{uuid4().hex[:12]}"
        rooms = {user_room(user_id), role_room(role)}

        self.active_connections[connection_id] = websocket
        self.connection_metadata[connection_id] = {
            "user_id": user_id,
            "role": role,
            "session_id": session_id,
            "rooms": rooms,
            "connected_at": datetime.now(timezone.utc),
        }
        for room in rooms:
            self.room_subscriptions.setdefault(room, set()).add(connection_id)

        logger.info(f"WebSocket connected: {connection_id} user={user_id} role={role}")
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        if connection_id not in self.active_connections:
            return

        del self.active_connections[connection_id]
        metadata = self.connection_metadata.pop(connection_id, {})

        for room in metadata.get("rooms", ()):
            members = self.room_subscriptions.get(room)
            if members is None:
                continue
            members.discard(connection_id)
            if not members:
                del self.room_subscriptions[room]

        logger.info(f"WebSocket disconnected: {connection_id}")

    async def send_personal_message(self, message: Dict, connection_id: str) -> None:
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.warning(f"Failed to send to {connection_id}: {e}")
            self.disconnect(connection_id)

    async def broadcast_to_room(self, room: str, event: str, data: Any) -> int:
        message = {"event": event, "data": jsonable_encoder(data)}
        connection_ids = list(self.room_subscriptions.get(room, ()))
        for connection_id in connection_ids:
            await self.send_personal_message(message, connection_id)
        return len(connection_ids)

    async def emit_to_user(self, user_id: str, event: str, data: Any) -> None:
        await self.broadcast_to_room(user_room(user_id), event, data)

    async def emit_to_role(self, role: str, event: str, data: Any) -> None:
        await self.broadcast_to_room(role_room(role), event, data)

    async def close_user_connections(
        self, user_id: str, session_id: Optional[str] = None
    ) -> int:
        connection_ids = [
            connection_id
            for connection_id, metadata in self.connection_metadata.items()
            if metadata["user_id"] == user_id
            and (session_id is None or metadata["session_id"] == session_id)
        ]
        for connection_id in connection_ids:
            websocket = self.active_connections[connection_id]
            self.disconnect(connection_id)
            try:
                await websocket.close(code=WS_SESSION_TERMINATED, reason="Session terminated")
            except Exception as e:
                logger.warning(f"Failed to close {connection_id}: {e}")
        return len(connection_ids)

    def connection_count(self) -> int:
        return len(self.active_connections)
