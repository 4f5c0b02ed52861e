from fastapi import APIRouter, Depends

from pos_auth.adapter.services.connection_manager import ConnectionManager
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.depends import get_connection_manager, get_session_registry

router = APIRouter()


@router.get("/health")
async def health_check(
    sessions: SessionRegistry = Depends(get_session_registry),
    connections: ConnectionManager = Depends(get_connection_manager),
):
    return {
        "status": "ok",
        "sessions": sessions.get_session_stats(),
        "realtime_connections": connections.connection_count(),
    }
