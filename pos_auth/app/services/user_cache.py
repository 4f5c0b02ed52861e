"""
Short-TTL read-through cache of authenticated identities.

Anything that changes a user's role, status or approval must call
``invalidate`` (or ``clear``) so the next request reloads the record.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.key_value_store import IKeyValueStore

if TYPE_CHECKING:
    from pos_auth.app.use_cases.auth.dtos import UserInfo


@dataclass
class CachedUser:
    user: "UserInfo"
    cached_at: datetime


class UserCache:
    def __init__(
        self,
        store: IKeyValueStore[CachedUser],
        ttl: timedelta = timedelta(minutes=5),
        max_entries: int = 1000,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock

    def get(self, user_id: str) -> Optional["UserInfo"]:
        cached = self.store.get(str(user_id))
        if cached is None:
            return None
        if self.clock() - cached.cached_at < self.ttl:
            return cached.user

        self.store.delete(str(user_id))
        return None

    def set(self, user_id: str, user: "UserInfo") -> None:
        self.store.set(str(user_id), CachedUser(user=user, cached_at=self.clock()))

        if len(self.store) > self.max_entries:
            self.sweep()

    def sweep(self) -> int:
        """Drop entries older than the TTL. Returns count removed."""
        now = self.clock()
        removed = 0
        for key, cached in self.store.items():
            if now - cached.cached_at > self.ttl:
                self.store.delete(key)
                removed += 1
        return removed

    def invalidate(self, user_id) -> None:
        self.store.delete(str(user_id))

    def clear(self) -> None:
        self.store.clear()
