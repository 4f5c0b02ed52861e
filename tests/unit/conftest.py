from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from config import ApplicationConfig
from pos_auth.adapter.services.memory_store import InMemoryKeyValueStore
from pos_auth.adapter.services.notification_handlers import NotificationHandlers
from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.outbox import EventDispatcher, Outbox
from pos_auth.app.services.passwords import hash_password
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.user_cache import UserCache
from pos_auth.domain.entities import User, UserRole, UserStatus
from pos_auth.domain.permissions import AuthorizationEngine
from tests.fixtures.fakes import FakeClock, RecordingEmailSender, RecordingNotifier


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_active_by_email = AsyncMock()
    uow.users.get_active_by_identifier = AsyncMock()
    uow.users.find_by_username_or_email = AsyncMock(return_value=None)
    uow.users.get_superadmin = AsyncMock(return_value=None)
    uow.users.list_active_by_role = AsyncMock(return_value=[])
    uow.users.list_pending = AsyncMock(return_value=[])
    uow.users.list_by_roles = AsyncMock(return_value=([], 0))
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.get_by_token_hash = AsyncMock()
    uow.password_reset_tokens.update = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.delete = AsyncMock()
    uow.password_reset_tokens.invalidate_unused_for_user = AsyncMock(return_value=0)
    uow.password_reset_tokens.count_created_since = AsyncMock(return_value=0)
    uow.password_reset_tokens.delete_expired = AsyncMock(return_value=0)
    uow.password_reset_tokens.get_stats = AsyncMock()
    uow.password_reset_tokens.list_for_user = AsyncMock(return_value=[])
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(clock):
    return SessionRegistry(InMemoryKeyValueStore(), session_ttl=timedelta(days=7), clock=clock)


@pytest.fixture
def user_cache(clock):
    return UserCache(InMemoryKeyValueStore(), ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture
def token_service():
    return TokenService("unit-access-secret", "unit-refresh-secret")


@pytest.fixture
def authorization():
    return AuthorizationEngine()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def outbox(notifier, email_sender):
    dispatcher = EventDispatcher()
    NotificationHandlers(notifier, email_sender).register(dispatcher)
    return Outbox(dispatcher)


@pytest.fixture
def make_user():
    def _make_user(
        role=UserRole.cashier,
        password="Secret123",
        status=UserStatus.active,
        is_approved=True,
        username=None,
    ) -> User:
        name = username or f"{UserRole(role).value}_{uuid4().hex[:6]}"
        return User(
            id=uuid4(),
            username=name,
            email=f"{name}@smartgrocery.io",
            password_hash=hash_password(password),
            role=role,
            first_name=name.capitalize(),
            last_name="Tester",
            status=status,
            is_approved=is_approved,
        )

    return _make_user
