"""
Session Entity

Process-local record of one logged-in device. Not persisted.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DeviceInfo(BaseModel):
    """Best-effort description of the client that opened a session"""

    user_agent: Optional[str] = None
    ip: Optional[str] = None
    platform: Optional[str] = None


class Session(BaseModel):
    """
    Session entity - proof of an active login.

    Business Rules:
    - Visible to per-user queries only while is_active and not expired
    - Expired sessions are dropped lazily on read and by the periodic sweep
    - A new login for the same user deactivates the previous sessions
    """

    session_id: str
    user_id: str
    device_info: Optional[DeviceInfo] = None
    is_active: bool = True
    last_activity: datetime
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
