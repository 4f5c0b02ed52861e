"""
Logout Use Case
"""

import logging

from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Error, Result, Return
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    def __init__(self, sessions: SessionRegistry):
        self.sessions = sessions

    def logout_user(self, session_id: str) -> Result[LogoutResponse]:
        """Deactivate exactly one session"""
        if not self.sessions.deactivate_session(session_id):
            return Return.err(Error(ErrorCode.SESSION_NOT_FOUND, "Session not found"))

        logger.info(f"Session {session_id[:8]}... logged out")
        return Return.ok(
            LogoutResponse(status="success", message="Logged out successfully")
        )

    def logout_all_devices(self, user_id: str) -> Result[LogoutResponse]:
        count = self.sessions.deactivate_all_user_sessions(user_id)
        logger.info(f"User {user_id} logged out of {count} session(s)")
        return Return.ok(
            LogoutResponse(
                status="success",
                message=f"Logged out from {count} device(s)",
                sessions_terminated=count,
            )
        )
