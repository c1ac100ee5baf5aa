from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.models import PasswordResetToken

from conftest import TEST_PASSWORD, create_teacher


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, db_session: AsyncSession) -> None:
    await create_teacher(db_session, "Ana", "ana@studio.com")

    response = await client.post("/api/v1/auth/login", json={"email": "Ana@Studio.com", "password": TEST_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["name"] == "Ana"
    assert data["user"]["role"] == "professor"

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ana@studio.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, db_session: AsyncSession) -> None:
    await create_teacher(db_session, "Ana", "ana@studio.com")

    response = await client.post("/api/v1/auth/login", json={"email": "ana@studio.com", "password": "wrong-pass"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401

    bad = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_forgot_password_answers_the_same_for_unknown_email(client: AsyncClient, db_session: AsyncSession) -> None:
    await create_teacher(db_session, "Ana", "ana@studio.com")

    known = await client.post("/api/v1/auth/forgot-password", json={"email": "ana@studio.com"})
    unknown = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@studio.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()

    tokens = (await db_session.execute(select(PasswordResetToken))).scalars().all()
    assert len(tokens) == 1
    assert len(tokens[0].token) == 128
    assert tokens[0].used is False


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, db_session: AsyncSession) -> None:
    await create_teacher(db_session, "Ana", "ana@studio.com")
    await client.post("/api/v1/auth/forgot-password", json={"email": "ana@studio.com"})
    token = (await db_session.execute(select(PasswordResetToken.token))).scalar_one()

    valid = await client.get(f"/api/v1/auth/validate-reset-token/{token}")
    assert valid.json() == {"valid": True}

    reset = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": token, "password": "newpass1", "confirm_password": "newpass1"},
    )
    assert reset.status_code == 200

    login = await client.post("/api/v1/auth/login", json={"email": "ana@studio.com", "password": "newpass1"})
    assert login.status_code == 200

    # Tokens are single use
    reused = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": token, "password": "another1", "confirm_password": "another1"},
    )
    assert reused.status_code == 400
    assert (await client.get(f"/api/v1/auth/validate-reset-token/{token}")).json() == {"valid": False}


@pytest.mark.asyncio
async def test_reset_password_rejects_mismatch_and_short_password(client: AsyncClient) -> None:
    mismatch = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": "abc", "password": "newpass1", "confirm_password": "newpass2"},
    )
    assert mismatch.status_code == 422

    short = await client.post(
        "/api/v1/auth/reset-password",
        json={"token": "abc", "password": "123", "confirm_password": "123"},
    )
    assert short.status_code == 422


@pytest.mark.asyncio
async def test_expired_token_is_invalid(client: AsyncClient, db_session: AsyncSession) -> None:
    teacher_id = await create_teacher(db_session, "Ana", "ana@studio.com")
    db_session.add(
        PasswordResetToken(
            teacher_id=teacher_id,
            token="expired-token",
            expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )
    )
    await db_session.commit()

    response = await client.get("/api/v1/auth/validate-reset-token/expired-token")
    assert response.json() == {"valid": False}
