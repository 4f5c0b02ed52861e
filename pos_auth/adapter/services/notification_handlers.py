"""
Turns domain events into real-time pushes and emails.
"""

import logging

from pos_auth.app.services import email_templates
from pos_auth.app.services.notifications import IEmailSender, IRealtimeNotifier
from pos_auth.app.services.outbox import EventDispatcher
from pos_auth.domain.entities import UserRole
from pos_auth.domain.events import (
    ConcurrentLoginDetected,
    SessionTerminated,
    UserApprovalChanged,
    UserRegistered,
)

logger = logging.getLogger(__name__)

# Rooms told about registrations and approval decisions
APPROVER_ROLES = (UserRole.superadmin.value, UserRole.manager.value)


class NotificationHandlers:
    def __init__(
        self,
        notifier: IRealtimeNotifier,
        email_sender: IEmailSender,
        store_name: str = "SmartGrocery",
        client_url: str = "http://localhost:5173",
    ):
        self.notifier = notifier
        self.email_sender = email_sender
        self.store_name = store_name
        self.client_url = client_url.rstrip("/")

    def register(self, dispatcher: EventDispatcher) -> None:
        dispatcher.register(SessionTerminated, self.on_session_terminated)
        dispatcher.register(ConcurrentLoginDetected, self.on_concurrent_login)
        dispatcher.register(UserRegistered, self.on_user_registered)
        dispatcher.register(UserApprovalChanged, self.on_user_approval_changed)

    async def _send(self, message) -> None:
        delivered = await self.email_sender.send_email(message)
        if not delivered:
            logger.warning(f"Email not delivered: {message.subject!r}")

    async def on_session_terminated(self, event: SessionTerminated) -> None:
        await self.notifier.emit_to_user(
            event.user_id,
            "session_terminated",
            {
                "type": event.reason.value,
                "message": event.message,
                "session_id": event.session_id,
                "timestamp": event.occurred_at,
                "metadata": {"new_device_info": event.new_device_info},
            },
        )
        # Terminated sessions leave their rooms
        await self.notifier.close_user_connections(event.user_id, event.session_id)

    async def on_concurrent_login(self, event: ConcurrentLoginDetected) -> None:
        user = event.user

        # One failed recipient must not stop the others
        try:
            await self._send(
                email_templates.concurrent_login_user_email(
                    user.email,
                    user.first_name,
                    event.new_device_info,
                    event.occurred_at,
                    self.store_name,
                )
            )
        except Exception as e:
            logger.error(f"Concurrent login email to user {user.id} failed: {e}")

        if not event.superadmin_emails:
            logger.info("No superadmin to notify about concurrent login")

        for email in event.superadmin_emails:
            try:
                await self._send(
                    email_templates.concurrent_login_admin_email(
                        email,
                        user.username,
                        f"{user.first_name} {user.last_name}",
                        user.role,
                        event.new_device_info,
                        event.occurred_at,
                        event.terminated_count,
                        self.store_name,
                    )
                )
            except Exception as e:
                logger.error(f"Concurrent login email to superadmin failed: {e}")

    async def on_user_registered(self, event: UserRegistered) -> None:
        user = event.user
        notification = {
            "type": "new_user_registration",
            "message": f"New {user.role} registration: {user.first_name} {user.last_name}",
            "user": user,
            "timestamp": event.occurred_at,
        }
        for role in APPROVER_ROLES:
            await self.notifier.emit_to_role(role, "notification", notification)

    async def on_user_approval_changed(self, event: UserApprovalChanged) -> None:
        user = event.user
        verdict = "approved" if event.approved else "rejected"
        notification = {
            "type": "user_approval",
            "message": f"User {user.first_name} {user.last_name} has been {verdict}",
            "user": user,
            "approved_by": event.approver,
            "reason": event.reason,
            "timestamp": event.occurred_at,
        }
        for role in APPROVER_ROLES:
            await self.notifier.emit_to_role(role, "notification", notification)

        if event.approved:
            await self._send(
                email_templates.account_approved_email(
                    user.email,
                    user.first_name,
                    user.role,
                    f"{self.client_url}/login",
                    self.store_name,
                )
            )
