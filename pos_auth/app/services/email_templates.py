"""
Transactional email bodies.
"""

from datetime import datetime
from html import escape
from typing import Optional

from pos_auth.app.services.notifications import EmailMessage
from pos_auth.domain.entities import DeviceInfo


def _html(title: str, paragraphs: list, store_name: str) -> str:
    body = "\n".join(f"<p>{escape(p)}</p>" for p in paragraphs)
    return (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\">"
        f"<title>{escape(title)} - {escape(store_name)}</title></head>\n"
        f"<body>\n<h1>{escape(title)}</h1>\n{body}\n"
        f"<p style=\"font-size: 12px; color: #5b6470;\">{escape(store_name)}</p>\n"
        "</body>\n</html>\n"
    )


def _text(title: str, paragraphs: list, store_name: str) -> str:
    return f"{title}\n\n" + "\n\n".join(paragraphs) + f"\n\n---\n{store_name}\n"


def _message(to: str, subject: str, title: str, paragraphs: list, store_name: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=subject,
        text=_text(title, paragraphs, store_name),
        html=_html(title, paragraphs, store_name),
    )


def _describe_device(device_info: Optional[DeviceInfo]) -> str:
    if device_info is None:
        return "Unknown device"
    parts = [
        device_info.user_agent or "Unknown browser",
        f"IP {device_info.ip}" if device_info.ip else None,
        device_info.platform,
    ]
    return ", ".join(p for p in parts if p)


def password_reset_email(
    to: str,
    first_name: str,
    reset_url: str,
    expires_minutes: int,
    store_name: str,
) -> EmailMessage:
    return _message(
        to,
        f"Reset your {store_name} password",
        "Reset your password",
        [
            f"Hello {first_name},",
            "We received a request to reset your password. "
            "Visit the link below to choose a new password:",
            reset_url,
            f"This link will expire in {expires_minutes} minutes.",
            "If you didn't request this, you can safely ignore this email.",
        ],
        store_name,
    )


def concurrent_login_user_email(
    to: str,
    first_name: str,
    device_info: Optional[DeviceInfo],
    occurred_at: datetime,
    store_name: str,
) -> EmailMessage:
    return _message(
        to,
        "Security Alert: New Login Detected",
        "New login detected",
        [
            f"Hello {first_name},",
            "Your account was just signed in from another device, "
            "so your previous session has been terminated.",
            f"Device: {_describe_device(device_info)}",
            f"Time: {occurred_at.isoformat()} UTC",
            "If this wasn't you, reset your password immediately "
            "and contact your administrator.",
        ],
        store_name,
    )


def concurrent_login_admin_email(
    to: str,
    username: str,
    full_name: str,
    role: str,
    device_info: Optional[DeviceInfo],
    occurred_at: datetime,
    terminated_count: int,
    store_name: str,
) -> EmailMessage:
    return _message(
        to,
        "Security Alert: Concurrent Login Detected",
        "Concurrent login detected",
        [
            f"User {full_name} ({username}, {role}) signed in from a new device "
            f"while {terminated_count} other session(s) were active.",
            "The previous session(s) have been terminated automatically.",
            f"New device: {_describe_device(device_info)}",
            f"Time: {occurred_at.isoformat()} UTC",
        ],
        store_name,
    )


def account_approved_email(
    to: str, first_name: str, role: str, login_url: str, store_name: str
) -> EmailMessage:
    return _message(
        to,
        f"Your {store_name} account has been approved",
        "Account approved",
        [
            f"Hello {first_name},",
            f"Your {role} account has been approved. You can now sign in:",
            login_url,
        ],
        store_name,
    )
