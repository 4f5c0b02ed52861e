import re
from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient

from pos_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from pos_auth.depends import get_clock
from pos_auth.app.use_cases.auth.cleanup_reset_tokens import cleanup_expired_tokens
from pos_auth.app.use_cases.auth.request_password_reset_use_case import hash_reset_token
from pos_auth.domain.entities import PasswordResetToken
from tests.fixtures.api_helpers import OWNER, bearer, login, setup_owner, staff
from tests.fixtures.fakes import FakeClock

RESET_LINK = re.compile(r"/reset-password/([0-9a-f]{64})")


def _reset_token(email_sender) -> str:
    message = email_sender.sent_to(OWNER["email"])[-1]
    return RESET_LINK.search(message.text).group(1)


@pytest.mark.asyncio
async def test_full_password_reset_flow(client: AsyncClient, email_sender, notifier):
    # Arrange
    owner = await setup_owner(client)

    # Act
    requested = await client.post("/auth/forgot-password", json={"email": OWNER["email"]})
    token = _reset_token(email_sender)
    verified = await client.get(f"/auth/reset-password/{token}")
    confirmed = await client.post(
        f"/auth/reset-password/{token}", json={"password": "BrandNew99"}
    )

    # Assert
    assert requested.status_code == 200
    assert requested.json()["status"] == "sent"
    assert verified.status_code == 200
    assert verified.json()["valid"] is True
    assert verified.json()["user"]["username"] == "owner"
    assert confirmed.status_code == 200
    assert confirmed.json()["sessions_terminated"] == 1

    me = await client.get("/auth/me", headers=bearer(owner["tokens"]["access_token"]))
    assert me.status_code == 401
    pushed = notifier.to_user(owner["user"]["id"], "session_terminated")
    assert pushed[-1]["type"] == "password_reset"

    assert (await login(client, "owner", OWNER["password"])).status_code == 401
    assert (await login(client, "owner", "BrandNew99")).status_code == 200

    reused = await client.post(f"/auth/reset-password/{token}", json={"password": "Another77"})
    assert reused.status_code == 400
    assert reused.json()["error"]["code"] == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_unknown_email_gets_same_response(client: AsyncClient, email_sender):
    await setup_owner(client)

    response = await client.post("/auth/forgot-password", json={"email": "ghost@smartgrocery.io"})

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    assert email_sender.messages == []


@pytest.mark.asyncio
async def test_second_request_within_window_is_rate_limited(client: AsyncClient, email_sender):
    await setup_owner(client)

    first = await client.post("/auth/forgot-password", json={"email": OWNER["email"]})
    second = await client.post("/auth/forgot-password", json={"email": OWNER["email"]})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["error"]["code"] == "RATE_LIMITED"
    assert len(email_sender.messages) == 1


@pytest.mark.asyncio
async def test_failed_delivery_leaves_no_usable_token(client: AsyncClient, email_sender):
    await setup_owner(client)
    email_sender.deliver = False

    response = await client.post("/auth/forgot-password", json={"email": OWNER["email"]})

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EMAIL_DELIVERY_FAILED"
    token = _reset_token(email_sender)
    verified = await client.get(f"/auth/reset-password/{token}")
    assert verified.status_code == 400

    # The deleted row does not count towards the rate limit
    email_sender.deliver = True
    retry = await client.post("/auth/forgot-password", json={"email": OWNER["email"]})
    assert retry.status_code == 200


@pytest.mark.asyncio
async def test_new_request_invalidates_earlier_token(client: AsyncClient, app, email_sender):
    clock = FakeClock()
    app.dependency_overrides[get_clock] = lambda: clock
    await setup_owner(client)

    await client.post("/auth/forgot-password", json={"email": OWNER["email"]})
    first_token = _reset_token(email_sender)
    clock.advance(minutes=6)
    await client.post("/auth/forgot-password", json={"email": OWNER["email"]})
    second_token = _reset_token(email_sender)

    assert first_token != second_token
    assert (await client.get(f"/auth/reset-password/{first_token}")).status_code == 400
    assert (await client.get(f"/auth/reset-password/{second_token}")).status_code == 200


@pytest.mark.asyncio
async def test_same_password_is_rejected(client: AsyncClient, email_sender):
    await setup_owner(client)
    await client.post("/auth/forgot-password", json={"email": OWNER["email"]})

    response = await client.post(
        f"/auth/reset-password/{_reset_token(email_sender)}",
        json={"password": OWNER["password"]},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SAME_PASSWORD"


@pytest.mark.asyncio
async def test_cleanup_removes_stale_tokens(client: AsyncClient, db_session):
    owner = await setup_owner(client)
    clock = FakeClock()
    now = clock()
    user_id = UUID(owner["user"]["id"])

    def row(name, **kwargs):
        values = dict(
            user_id=user_id,
            token_hash=hash_reset_token(name),
            used=False,
            expires_at=now + timedelta(minutes=15),
            created_at=now,
        )
        values.update(kwargs)
        return PasswordResetToken(**values)

    async with SqlAlchemyUnitOfWork(db_session) as uow:
        for token in [
            row("fresh"),
            row("expired", expires_at=now - timedelta(minutes=1)),
            row("used-recently", used=True, used_at=now - timedelta(hours=1)),
            row("used-long-ago", used=True, used_at=now - timedelta(hours=25)),
        ]:
            await uow.password_reset_tokens.create(token)
        await uow.commit()

    removed = await cleanup_expired_tokens(SqlAlchemyUnitOfWork(db_session), clock)

    assert removed == 2
    async with SqlAlchemyUnitOfWork(db_session) as uow:
        for name, present in [
            ("fresh", True),
            ("expired", False),
            ("used-recently", True),
            ("used-long-ago", False),
        ]:
            found = await uow.password_reset_tokens.get_by_token_hash(hash_reset_token(name))
            assert (found is not None) is present


@pytest.mark.asyncio
async def test_reset_reports_for_superadmin(client: AsyncClient, email_sender):
    # Arrange
    owner = await setup_owner(client)
    headers = bearer(owner["tokens"]["access_token"])
    await client.post(
        "/auth/forgot-password",
        json={"email": OWNER["email"]},
        headers={"User-Agent": "pytest-browser"},
    )

    # Act
    stats = await client.get("/users/reset-tokens/stats", headers=headers)
    history = await client.get(f"/users/{owner['user']['id']}/reset-history", headers=headers)

    # Assert
    assert stats.status_code == 200
    assert stats.json()["total_tokens"] == 1
    assert stats.json()["active_tokens"] == 1
    assert stats.json()["used_tokens"] == 0

    assert history.status_code == 200
    tokens = history.json()["tokens"]
    assert len(tokens) == 1
    assert tokens[0]["used"] is False
    assert tokens[0]["user_agent"] == "pytest-browser"
    assert "token_hash" not in tokens[0]


@pytest.mark.asyncio
async def test_reset_reports_are_superadmin_only(client: AsyncClient):
    owner = await setup_owner(client)
    response = await client.post(
        "/auth/register",
        json=staff("morgan", role="manager"),
        headers=bearer(owner["tokens"]["access_token"]),
    )
    manager = (await login(client, "morgan", "StaffPass1")).json()
    headers = bearer(manager["tokens"]["access_token"])

    stats = await client.get("/users/reset-tokens/stats", headers=headers)
    history = await client.get(f"/users/{response.json()['user']['id']}/reset-history", headers=headers)
    missing = await client.get(
        f"/users/{UUID(int=1)}/reset-history", headers=bearer(owner["tokens"]["access_token"])
    )

    assert stats.status_code == 403
    assert history.status_code == 403
    assert missing.status_code == 404
