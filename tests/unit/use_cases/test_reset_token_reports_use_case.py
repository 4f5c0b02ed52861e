"""
Unit tests for ResetTokenReportsUseCase
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from pos_auth.app.use_cases.auth import ResetTokenReportsUseCase
from pos_auth.domain.entities import PasswordResetToken


@pytest.mark.asyncio
async def test_token_stats(mock_uow, clock):
    mock_uow.password_reset_tokens.get_stats.return_value = {
        "total_tokens": 7,
        "active_tokens": 2,
        "expired_tokens": 3,
        "used_tokens": 4,
    }

    result = await ResetTokenReportsUseCase(mock_uow, clock).token_stats()

    assert result.is_ok()
    assert result.value.total_tokens == 7
    assert result.value.active_tokens == 2
    assert result.value.generated_at == clock.now
    mock_uow.password_reset_tokens.get_stats.assert_called_once_with(clock.now)


@pytest.mark.asyncio
async def test_user_history_hides_token_hash(mock_uow, clock, make_user):
    # Arrange
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    token = PasswordResetToken(
        user_id=user.id,
        token_hash="a" * 64,
        ip_address="10.0.0.5",
        expires_at=clock.now + timedelta(minutes=15),
        created_at=clock.now,
    )
    mock_uow.password_reset_tokens.list_for_user.return_value = [token]

    # Act
    result = await ResetTokenReportsUseCase(mock_uow, clock).user_history(user.id, limit=5)

    # Assert
    assert result.is_ok()
    assert result.value.user_id == str(user.id)
    record = result.value.tokens[0]
    assert record.id == str(token.id)
    assert record.used is False
    assert record.ip_address == "10.0.0.5"
    assert "token_hash" not in record.model_dump()
    mock_uow.password_reset_tokens.list_for_user.assert_called_once_with(user.id, 5)


@pytest.mark.asyncio
async def test_user_history_for_unknown_user(mock_uow, clock):
    mock_uow.users.get_by_id.return_value = None

    result = await ResetTokenReportsUseCase(mock_uow, clock).user_history(uuid4())

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    mock_uow.password_reset_tokens.list_for_user.assert_not_called()
