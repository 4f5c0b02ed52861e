"""
Unit tests for ConfirmPasswordResetUseCase and reset token cleanup

Tests all business logic with mocked dependencies.
"""

import hashlib
from datetime import timedelta
from uuid import uuid4

import pytest

from pos_auth.app.services.passwords import verify_password
from pos_auth.app.use_cases.auth.cleanup_reset_tokens import cleanup_expired_tokens
from pos_auth.app.use_cases.auth.confirm_password_reset_use_case import (
    ConfirmPasswordResetUseCase,
)
from pos_auth.app.use_cases.auth.verify_reset_token_use_case import VerifyResetTokenUseCase
from pos_auth.domain.entities import PasswordResetToken, UserStatus
from pos_auth.domain.events import SessionTerminated

PLAIN_TOKEN = "ab" * 32


@pytest.fixture
def use_case(mock_uow, sessions, user_cache, outbox, clock):
    return ConfirmPasswordResetUseCase(
        mock_uow, sessions, user_cache, outbox, min_password_length=6, clock=clock
    )


def _token_row(user, clock, **kwargs) -> PasswordResetToken:
    values = dict(
        id=uuid4(),
        user_id=user.id,
        token_hash=hashlib.sha256(PLAIN_TOKEN.encode()).hexdigest(),
        used=False,
        expires_at=clock.now + timedelta(minutes=15),
    )
    values.update(kwargs)
    return PasswordResetToken(**values)


@pytest.mark.asyncio
async def test_successful_password_reset_confirmation(
    use_case, mock_uow, sessions, user_cache, outbox, notifier, clock, make_user
):
    # Arrange
    user = make_user(password="OldSecret1")
    row = _token_row(user, clock)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = row
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")
    sessions.create_session(str(user.id), "sid-2")
    user_cache.set(str(user.id), object())

    # Act
    result = await use_case.execute(PLAIN_TOKEN, "NewSecret2")

    # Assert
    assert result.is_ok()
    assert result.value.status == "success"
    assert result.value.sessions_terminated == 2

    mock_uow.password_reset_tokens.get_by_token_hash.assert_called_once_with(row.token_hash)
    assert verify_password("NewSecret2", user.password_hash)
    assert row.used is True
    assert row.used_at == clock.now
    mock_uow.password_reset_tokens.invalidate_unused_for_user.assert_called_once_with(
        user.id, clock.now
    )
    mock_uow.commit.assert_called_once()

    assert sessions.get_user_sessions(str(user.id)) == []
    assert user_cache.get(str(user.id)) is None

    pending = outbox.pending
    assert len(pending) == 1
    assert isinstance(pending[0], SessionTerminated)
    assert pending[0].reason.value == "password_reset"

    await outbox.flush()
    pushed = notifier.to_user(str(user.id), "session_terminated")
    assert pushed[0]["type"] == "password_reset"


@pytest.mark.asyncio
async def test_short_password_is_rejected_before_lookup(use_case, mock_uow):
    result = await use_case.execute(PLAIN_TOKEN, "12345")

    assert result.error.code == "INVALID_PASSWORD"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_over_long_password_is_rejected_before_lookup(use_case, mock_uow):
    result = await use_case.execute(PLAIN_TOKEN, "x" * 100)

    assert result.error.code == "INVALID_PASSWORD"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_token(use_case, mock_uow):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = None

    result = await use_case.execute(PLAIN_TOKEN, "NewSecret2")

    assert result.error.code == "RESET_TOKEN_INVALID"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_expired_token(use_case, mock_uow, clock, make_user):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = _token_row(
        user, clock, expires_at=clock.now - timedelta(seconds=1)
    )

    result = await use_case.execute(PLAIN_TOKEN, "NewSecret2")

    assert result.error.code == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_used_token(use_case, mock_uow, clock, make_user):
    user = make_user()
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = _token_row(
        user, clock, used=True
    )

    result = await use_case.execute(PLAIN_TOKEN, "NewSecret2")

    assert result.error.code == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_token_of_deleted_user(use_case, mock_uow, clock, make_user):
    user = make_user(status=UserStatus.deleted)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = _token_row(user, clock)
    mock_uow.users.get_by_id.return_value = user

    result = await use_case.execute(PLAIN_TOKEN, "NewSecret2")

    assert result.error.code == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_same_password_is_rejected(use_case, mock_uow, sessions, clock, make_user):
    user = make_user(password="OldSecret1")
    row = _token_row(user, clock)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = row
    mock_uow.users.get_by_id.return_value = user
    sessions.create_session(str(user.id), "sid-1")

    result = await use_case.execute(PLAIN_TOKEN, "OldSecret1")

    assert result.error.code == "SAME_PASSWORD"
    assert row.used is False
    assert len(sessions.get_user_sessions(str(user.id))) == 1
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_verify_reset_token(mock_uow, clock, make_user):
    user = make_user()
    row = _token_row(user, clock)
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = row
    mock_uow.users.get_by_id.return_value = user

    result = await VerifyResetTokenUseCase(mock_uow, clock).execute(PLAIN_TOKEN)

    assert result.value.valid is True
    assert result.value.user.email == user.email
    assert result.value.expires_at == row.expires_at

    clock.advance(minutes=16)
    result = await VerifyResetTokenUseCase(mock_uow, clock).execute(PLAIN_TOKEN)
    assert result.error.code == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_cleanup_expired_tokens(mock_uow, clock):
    mock_uow.password_reset_tokens.delete_expired.return_value = 4

    removed = await cleanup_expired_tokens(mock_uow, clock)

    assert removed == 4
    mock_uow.password_reset_tokens.delete_expired.assert_called_once_with(
        clock.now, clock.now - timedelta(hours=24)
    )
    mock_uow.commit.assert_called_once()
