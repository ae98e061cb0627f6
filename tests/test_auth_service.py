from datetime import datetime, timezone

import pytest

from cityloops.jwt import blocklist
from cityloops.services import auth_service
from cityloops.services.auth_service import AuthService, pwd_context
from cityloops.utils.exceptions import (
    AuthenticationRequiredError, ConflictError, ValidationFailedError,
)

REGISTRATION = {"name": "Jane Doe", "email": "jane@example.com", "password": "Secretpass1"}


async def test_register_hashes_password(db):
    user = await AuthService(db).register(REGISTRATION)

    assert user.id is not None
    assert user.password != REGISTRATION["password"]
    assert pwd_context.verify(REGISTRATION["password"], user.password)


async def test_register_duplicate_email_case_insensitive(db):
    service = AuthService(db)
    await service.register(REGISTRATION)

    with pytest.raises(ConflictError) as exc_info:
        await service.register({**REGISTRATION, "email": "JANE@example.com"})
    assert exc_info.value.message == "User with this email already exists"


async def test_register_reports_first_violation(db):
    with pytest.raises(ValidationFailedError) as exc_info:
        await AuthService(db).register({"name": "J", "email": "bad", "password": "x"})
    assert exc_info.value.message == "Name must be at least 2 characters"


async def test_login_issues_tokens_that_resolve_user(db):
    service = AuthService(db)
    user = await service.register(REGISTRATION)

    tokens = await service.login("jane@example.com", "Secretpass1")

    assert tokens["token_type"] == "bearer"
    current = await AuthService.get_current_user(tokens["access_token"], db)
    assert current.id == user.id


@pytest.mark.parametrize(
    "email, password",
    [("jane@example.com", "Wrongpass1"), ("nobody@example.com", "Secretpass1")],
)
async def test_login_rejects_bad_credentials(db, email, password):
    await AuthService(db).register(REGISTRATION)

    with pytest.raises(AuthenticationRequiredError) as exc_info:
        await AuthService(db).login(email, password)
    assert exc_info.value.message == "Invalid email or password"


async def test_refresh_token_cannot_authenticate_requests(db):
    service = AuthService(db)
    await service.register(REGISTRATION)
    tokens = await service.login("jane@example.com", "Secretpass1")

    with pytest.raises(AuthenticationRequiredError):
        await AuthService.get_current_user(tokens["refresh_token"], db)

    renewed = await service.refresh(tokens["refresh_token"])
    assert renewed["access_token"]


async def test_logout_blocks_token(db):
    service = AuthService(db)
    await service.register(REGISTRATION)
    tokens = await service.login("jane@example.com", "Secretpass1")

    service.logout(tokens["access_token"])
    try:
        with pytest.raises(AuthenticationRequiredError):
            await AuthService.get_current_user(tokens["access_token"], db)
    finally:
        blocklist.clear()


async def test_logout_of_one_session_keeps_other_session(db, monkeypatch):
    service = AuthService(db)
    await service.register(REGISTRATION)

    # 같은 시각에 두 번 로그인해도 토큰 식별자(jti)는 서로 달라야 함
    frozen_now = datetime.now(timezone.utc)

    class _FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return frozen_now

    monkeypatch.setattr(auth_service, "datetime", _FrozenDatetime)
    first = await service.login("jane@example.com", "Secretpass1")
    second = await service.login("jane@example.com", "Secretpass1")

    service.logout(first["access_token"])
    try:
        with pytest.raises(AuthenticationRequiredError):
            await AuthService.get_current_user(first["access_token"], db)
        current = await AuthService.get_current_user(second["access_token"], db)
        assert current.email == "jane@example.com"
    finally:
        blocklist.clear()
