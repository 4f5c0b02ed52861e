"""
Session Registry

Tracks which logins are live. Sessions are held in a key-value store keyed
by session id and are never written to the database.
"""

import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.key_value_store import IKeyValueStore
from pos_auth.domain.entities import DeviceInfo, Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Process-local session registry.

    Business Rules:
    - Session ids are 32 random bytes, hex encoded
    - Sessions expire a fixed TTL after creation
    - Reads drop expired sessions lazily; a periodic sweep removes the rest
    - Deactivated sessions stay in the store until they expire
    - Every change is written back with store.set, so stores may hand out copies
    """

    def __init__(
        self,
        store: IKeyValueStore[Session],
        session_ttl: timedelta = timedelta(days=7),
        clock: Clock = utcnow,
    ):
        self.store = store
        self.session_ttl = session_ttl
        self.clock = clock

    @staticmethod
    def generate_session_id() -> str:
        return secrets.token_hex(32)

    def create_session(
        self,
        user_id: str,
        session_id: str,
        device_info: Optional[DeviceInfo] = None,
    ) -> Session:
        now = self.clock()
        session = Session(
            session_id=session_id,
            user_id=str(user_id),
            device_info=device_info,
            is_active=True,
            last_activity=now,
            created_at=now,
            expires_at=now + self.session_ttl,
        )
        self.store.set(session_id, session)
        logger.info(f"Session created: {session_id[:8]}... for user {user_id}")
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the session and bump its activity, or None if missing/expired."""
        session = self.store.get(session_id)
        if session is None:
            return None

        now = self.clock()
        if session.is_expired(now):
            self.store.delete(session_id)
            return None

        session.last_activity = now
        self.store.set(session_id, session)
        return session

    def update_session_activity(self, session_id: str) -> bool:
        session = self.store.get(session_id)
        if session is None or not session.is_active:
            return False

        session.last_activity = self.clock()
        self.store.set(session_id, session)
        return True

    def deactivate_session(self, session_id: str) -> bool:
        session = self.store.get(session_id)
        if session is None:
            return False

        session.is_active = False
        self.store.set(session_id, session)
        return True

    def remove_session(self, session_id: str) -> bool:
        return self.store.delete(session_id)

    def get_user_sessions(self, user_id: str) -> List[Session]:
        """All active, unexpired sessions of a user"""
        now = self.clock()
        user_id = str(user_id)
        return [
            session
            for _, session in self.store.items()
            if session.user_id == user_id
            and session.is_active
            and not session.is_expired(now)
        ]

    def deactivate_all_user_sessions(self, user_id: str) -> int:
        user_id = str(user_id)
        count = 0
        for session_id, session in self.store.items():
            if session.user_id == user_id and session.is_active:
                session.is_active = False
                self.store.set(session_id, session)
                count += 1
        return count

    def cleanup_expired_sessions(self) -> int:
        now = self.clock()
        count = 0
        for session_id, session in self.store.items():
            if session.is_expired(now):
                self.store.delete(session_id)
                count += 1
        return count

    def get_session_stats(self) -> dict:
        now = self.clock()
        total = active = expired = 0
        for _, session in self.store.items():
            total += 1
            if session.is_expired(now):
                expired += 1
            elif session.is_active:
                active += 1

        return {
            "total_sessions": total,
            "active_sessions": active,
            "expired_sessions": expired,
        }
