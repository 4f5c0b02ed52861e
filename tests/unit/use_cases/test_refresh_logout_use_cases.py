import pytest

from pos_auth.app.use_cases.auth.logout_use_case import LogoutUseCase
from pos_auth.app.use_cases.auth.refresh_token_use_case import RefreshTokenUseCase
from pos_auth.domain.entities import UserStatus


@pytest.fixture
def refresh_use_case(mock_uow, token_service, sessions):
    return RefreshTokenUseCase(mock_uow, token_service, sessions)


@pytest.mark.asyncio
async def test_refresh_issues_new_pair_for_same_session(
    refresh_use_case, mock_uow, token_service, sessions, make_user
):
    # Arrange
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")
    refresh_token = token_service.generate_refresh_token(user.id, "sid-1")

    # Act
    result = await refresh_use_case.execute(refresh_token)

    # Assert
    assert result.is_ok()
    assert result.value.session_id == "sid-1"
    payload = token_service.verify_access_token(result.value.tokens.access_token)
    assert payload["user_id"] == str(user.id)
    assert payload["session_id"] == "sid-1"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(refresh_use_case, token_service, sessions, make_user):
    user = make_user()
    sessions.create_session(str(user.id), "sid-1")
    access_token = token_service.generate_access_token(user, "sid-1")

    result = await refresh_use_case.execute(access_token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_after_logout_is_rejected(
    refresh_use_case, mock_uow, token_service, sessions, make_user
):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")
    refresh_token = token_service.generate_refresh_token(user.id, "sid-1")

    LogoutUseCase(sessions).logout_user("sid-1")
    result = await refresh_use_case.execute(refresh_token)

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.users.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_session_of_another_user(
    refresh_use_case, mock_uow, token_service, sessions, make_user
):
    owner = make_user()
    intruder = make_user()
    mock_uow.users.get_by_id.return_value = intruder
    sessions.create_session(str(owner.id), "sid-1")
    refresh_token = token_service.generate_refresh_token(intruder.id, "sid-1")

    result = await refresh_use_case.execute(refresh_token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_rejects_deactivated_user(
    refresh_use_case, mock_uow, token_service, sessions, make_user
):
    user = make_user(status=UserStatus.deleted)
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")

    result = await refresh_use_case.execute(
        token_service.generate_refresh_token(user.id, "sid-1")
    )

    assert result.error.code == "ACCOUNT_DEACTIVATED"


def test_logout_user_deactivates_one_session(sessions):
    sessions.create_session("user-1", "sid-1")
    sessions.create_session("user-1", "sid-2")

    result = LogoutUseCase(sessions).logout_user("sid-1")

    assert result.value.status == "success"
    assert [s.session_id for s in sessions.get_user_sessions("user-1")] == ["sid-2"]


def test_logout_unknown_session(sessions):
    result = LogoutUseCase(sessions).logout_user("missing")

    assert result.error.code == "SESSION_NOT_FOUND"


def test_logout_all_devices(sessions):
    sessions.create_session("user-1", "sid-1")
    sessions.create_session("user-1", "sid-2")
    sessions.create_session("user-2", "sid-3")

    result = LogoutUseCase(sessions).logout_all_devices("user-1")

    assert result.value.sessions_terminated == 2
    assert sessions.get_user_sessions("user-1") == []
    assert len(sessions.get_user_sessions("user-2")) == 1
