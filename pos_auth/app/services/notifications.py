from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel


class EmailMessage(BaseModel):
    to: str
    subject: str
    text: str
    html: Optional[str] = None


class IEmailSender(ABC):
    @abstractmethod
    async def send_email(self, message: EmailMessage) -> bool:
        """Deliver one message. Returns False on failure, never raises."""
        pass


class IRealtimeNotifier(ABC):
    """Push channel to connected clients, addressed by user id or role room"""

    @abstractmethod
    async def emit_to_user(self, user_id: str, event: str, data: Any) -> None:
        pass

    @abstractmethod
    async def emit_to_role(self, role: str, event: str, data: Any) -> None:
        pass

    @abstractmethod
    async def close_user_connections(
        self, user_id: str, session_id: Optional[str] = None
    ) -> int:
        """Drop a user's live connections, or only those of one session. Returns the count."""
        pass
