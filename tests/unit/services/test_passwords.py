import pytest

from pos_auth.app.services.passwords import (
    MAX_PASSWORD_BYTES,
    burn_password_check,
    hash_password,
    password_too_long,
    verify_password,
)

LONG_PASSWORD = "x" * 100


def test_byte_limit_counts_encoded_bytes():
    assert password_too_long("a" * MAX_PASSWORD_BYTES) is False
    # 36 two-byte characters fit, 37 do not
    assert password_too_long("é" * 36) is False
    assert password_too_long("é" * 37) is True


def test_hash_and_verify_round_trip():
    password_hash = hash_password("Secret123")

    assert verify_password("Secret123", password_hash) is True
    assert verify_password("Secret124", password_hash) is False


def test_over_long_password_never_verifies():
    password_hash = hash_password("x" * MAX_PASSWORD_BYTES)

    assert verify_password(LONG_PASSWORD, password_hash) is False


def test_over_long_password_dummy_check_does_not_raise():
    burn_password_check(LONG_PASSWORD)


def test_hash_password_refuses_over_long_input():
    with pytest.raises(ValueError):
        hash_password(LONG_PASSWORD)


def test_malformed_stored_hash_does_not_verify():
    assert verify_password("Secret123", "not-a-bcrypt-hash") is False
