"""
Real-time WebSocket endpoint.

Clients connect with ``/ws?token=<access token>`` and receive the events
addressed to their user and role rooms.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from pos_auth.adapter.services.connection_manager import ConnectionManager
from pos_auth.app.services.authentication import AuthenticationService
from pos_auth.depends import get_authentication_service, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Real-time"])

# Application close code for a rejected handshake
WS_UNAUTHORIZED = 4001


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    service: AuthenticationService = Depends(get_authentication_service),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    result = await service.authenticate(token)
    if result.is_err():
        await websocket.close(code=WS_UNAUTHORIZED, reason=result.error.message)
        return

    current_user = result.value
    connection_id = await manager.connect(
        websocket, current_user.id, current_user.role, current_user.session_id
    )

    try:
        await manager.send_personal_message(
            {"event": "connected", "data": {"connection_id": connection_id}},
            connection_id,
        )
        while websocket.application_state == WebSocketState.CONNECTED:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except ValueError:
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                await manager.send_personal_message(
                    {"event": "pong", "data": {}}, connection_id
                )
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(connection_id)
