"""
Unit tests for session listing and revocation
"""

import pytest

from pos_auth.app.use_cases.users.revoke_sessions_use_case import (
    ListSessionsUseCase,
    RevokeSessionsUseCase,
)
from pos_auth.domain.entities import UserRole


@pytest.fixture
def use_case(mock_uow, authorization, sessions):
    return RevokeSessionsUseCase(mock_uow, authorization, sessions)


@pytest.mark.asyncio
async def test_revoke_all_sessions_self_success(use_case, mock_uow, sessions, make_user):
    """A cashier may end all of their own sessions"""
    user = make_user(role=UserRole.cashier)
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")
    sessions.create_session(str(user.id), "sid-2")

    result = await use_case.revoke_all_sessions(user.id, str(user.id), "cashier")

    assert result.is_ok()
    assert result.value.revoked_count == 2
    assert result.value.target_user_id == str(user.id)
    assert sessions.get_user_sessions(str(user.id)) == []


@pytest.mark.asyncio
async def test_manager_revokes_cashier_sessions(use_case, mock_uow, sessions, make_user):
    cashier = make_user(role=UserRole.cashier)
    manager = make_user(role=UserRole.manager)
    mock_uow.users.get_by_id.return_value = cashier
    sessions.create_session(str(cashier.id), "sid-1")

    result = await use_case.revoke_all_sessions(cashier.id, str(manager.id), "manager")

    assert result.value.revoked_count == 1


@pytest.mark.asyncio
async def test_manager_cannot_revoke_another_manager(use_case, mock_uow, sessions, make_user):
    other = make_user(role=UserRole.manager)
    manager = make_user(role=UserRole.manager)
    mock_uow.users.get_by_id.return_value = other
    sessions.create_session(str(other.id), "sid-1")

    result = await use_case.revoke_all_sessions(other.id, str(manager.id), "manager")

    assert result.error.code == "INSUFFICIENT_PERMISSIONS"
    assert len(sessions.get_user_sessions(str(other.id))) == 1


@pytest.mark.asyncio
async def test_revoke_unknown_user(use_case, mock_uow, make_user):
    mock_uow.users.get_by_id.return_value = None
    admin = make_user(role=UserRole.superadmin)

    result = await use_case.revoke_all_sessions(admin.id, str(admin.id), "superadmin")

    assert result.error.code == "USER_NOT_FOUND"


def test_list_user_sessions_most_recent_first(sessions, clock):
    sessions.create_session("user-1", "older")
    clock.advance(minutes=5)
    sessions.create_session("user-1", "newer")
    sessions.create_session("user-2", "someone-else")

    result = ListSessionsUseCase(sessions, clock).list_user_sessions("user-1", "newer")

    assert result.value.current_session_id == "newer"
    assert [s.session_id for s in result.value.sessions] == ["newer", "older"]


def test_session_stats(sessions, clock):
    sessions.create_session("user-1", "sid-1")
    sessions.create_session("user-2", "sid-2")
    sessions.deactivate_session("sid-2")

    stats = ListSessionsUseCase(sessions, clock).session_stats().value

    assert stats.total_sessions == 2
    assert stats.active_sessions == 1
    assert stats.expired_sessions == 0
    assert stats.generated_at == clock.now
