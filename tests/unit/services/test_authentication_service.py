import pytest

from pos_auth.app.services.authentication import AuthenticationService
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.domain.entities import UserRole, UserStatus


@pytest.fixture
def service(mock_uow, token_service, sessions, user_cache):
    return AuthenticationService(mock_uow, token_service, sessions, user_cache)


def _login(user, token_service, sessions, session_id="sid-1") -> str:
    sessions.create_session(str(user.id), session_id)
    return token_service.generate_access_token(user, session_id)


@pytest.mark.asyncio
async def test_missing_token_requires_authentication(service):
    result = await service.authenticate(None)

    assert result.is_err()
    assert result.error.code == "AUTHENTICATION_REQUIRED"


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(service, token_service, make_user):
    token = token_service.generate_refresh_token(make_user().id, "sid-1")

    result = await service.authenticate(token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_valid_token_loads_user_and_caches_it(
    service, mock_uow, token_service, sessions, user_cache, make_user
):
    # Arrange
    user = make_user(role=UserRole.manager)
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)

    # Act
    result = await service.authenticate(token)

    # Assert
    assert result.is_ok()
    assert result.value.id == str(user.id)
    assert result.value.role == "manager"
    assert result.value.session_id == "sid-1"
    mock_uow.users.get_by_id.assert_called_once_with(user.id)
    assert user_cache.get(str(user.id)).username == user.username


@pytest.mark.asyncio
async def test_cached_user_skips_store(
    service, mock_uow, token_service, sessions, user_cache, make_user
):
    user = make_user()
    user_cache.set(str(user.id), UserInfo.from_user(user))
    token = _login(user, token_service, sessions)

    result = await service.authenticate(token)

    assert result.is_ok()
    mock_uow.users.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_deactivated_session_is_rejected(
    service, mock_uow, token_service, sessions, make_user
):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)
    sessions.deactivate_session("sid-1")

    result = await service.authenticate(token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_expired_session_is_rejected(
    service, mock_uow, token_service, sessions, clock, make_user
):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)
    clock.advance(days=8)

    result = await service.authenticate(token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_missing_user_is_rejected(service, mock_uow, token_service, sessions, make_user):
    user = make_user()
    mock_uow.users.get_by_id.return_value = None
    token = _login(user, token_service, sessions)

    result = await service.authenticate(token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(service, mock_uow, token_service, sessions, make_user):
    user = make_user(status=UserStatus.inactive)
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)

    result = await service.authenticate(token)

    assert result.error.code == "ACCOUNT_DEACTIVATED"


@pytest.mark.asyncio
async def test_unapproved_user_is_rejected(service, mock_uow, token_service, sessions, make_user):
    user = make_user(is_approved=False)
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)

    result = await service.authenticate(token)

    assert result.error.code == "ACCOUNT_PENDING_APPROVAL"


@pytest.mark.asyncio
async def test_legacy_user_without_approval_flag_is_accepted(
    service, mock_uow, token_service, sessions, make_user
):
    user = make_user(is_approved=None)
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)

    result = await service.authenticate(token)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_success_updates_session_activity(
    service, mock_uow, token_service, sessions, clock, make_user
):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    token = _login(user, token_service, sessions)
    clock.advance(minutes=30)

    await service.authenticate(token)

    assert sessions.store.get("sid-1").last_activity == clock.now
