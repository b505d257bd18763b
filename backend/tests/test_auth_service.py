"""
SIA API: Auth Service Tests
===========================

What:  register / login / refresh against a real (SQLite) session.

What we test:
    ✅ Registration stores a hashed password and returns a usable token
    ✅ Duplicate email → ConflictError with HTTP 400
    ✅ Unknown email and wrong password fail identically
    ✅ Refresh error mapping: missing, expired, wrong type, deleted account
    ✅ Optional rotation rejects a reused refresh token
"""

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from sia_api.exceptions import (
    AccountNotFoundError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
)
from sia_api.models import Account
from sia_api.schemas.account import AccountCreate
from sia_api.security import ACCESS, REFRESH, PasswordHasher
from sia_api.services.auth_service import AuthService

from conftest import TEST_PASSWORD


def _service(db_session, hasher, issuer, settings) -> AuthService:
    return AuthService(db_session, hasher, issuer, settings)


def _payload(email: str = "alice@example.com") -> AccountCreate:
    return AccountCreate(email=email, password=TEST_PASSWORD, firstName="Alice")


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_token_for_new_account(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)

        result = await service.register(_payload())

        assert result.message == "User created successfully"
        assert result.user.email == "alice@example.com"
        claims = issuer.verify(result.token, expected_type=ACCESS)
        assert claims.subject_id == str(result.user.id)
        ttl = claims.expires_at - claims.issued_at
        assert ttl == timedelta(seconds=test_settings.registration_token_ttl_seconds)

    @pytest.mark.asyncio
    async def test_password_stored_as_digest(self, db_session, hasher, issuer, test_settings):
        service = _service(db_session, hasher, issuer, test_settings)
        result = await service.register(_payload())

        account = await db_session.get(Account, result.user.id)
        assert account.password_hash != TEST_PASSWORD
        assert hasher.verify(TEST_PASSWORD, account.password_hash)
        assert account.first_name == "Alice"

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts_with_400(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)
        await service.register(_payload())

        with pytest.raises(ConflictError) as exc_info:
            await service.register(_payload("ALICE@example.com "))

        assert exc_info.value.message == "User already exists"
        assert exc_info.value.status_code == 400


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_access_and_refresh(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)
        registered = await service.register(_payload())

        result = await service.login("alice@example.com", TEST_PASSWORD)

        assert result.message == "Login successful"
        assert result.user.id == registered.user.id
        assert result.access_token != result.refresh_token
        assert issuer.verify(result.access_token, expected_type=ACCESS)
        assert issuer.verify(result.refresh_token, expected_type=REFRESH)

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_match(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)
        await service.register(_payload())

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.login("alice@example.com", "not-the-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await service.login("nobody@example.com", TEST_PASSWORD)

        assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_a_verification(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)

        with patch.object(hasher, "verify_dummy_async", AsyncMock(return_value=False)) as dummy:
            with pytest.raises(InvalidCredentialsError):
                await service.login("ghost@example.com", "whatever")

        dummy.assert_awaited_once_with("whatever")

    @pytest.mark.asyncio
    async def test_login_upgrades_outdated_hash_cost(
        self, db_session, hasher, issuer, test_settings
    ):
        registered = await _service(db_session, hasher, issuer, test_settings).register(_payload())
        stronger = PasswordHasher(rounds=5)

        await _service(db_session, stronger, issuer, test_settings).login(
            "alice@example.com", TEST_PASSWORD
        )

        account = await db_session.get(Account, registered.user.id)
        assert account.password_hash.startswith("$2b$05$")
        assert stronger.verify(TEST_PASSWORD, account.password_hash)


class TestRefresh:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "   "])
    async def test_missing_token(self, db_session, hasher, issuer, test_settings, token):
        service = _service(db_session, hasher, issuer, test_settings)
        with pytest.raises(MissingTokenError) as exc_info:
            await service.refresh(token)
        assert exc_info.value.message == "Refresh token is required"

    @pytest.mark.asyncio
    async def test_expired_token(self, db_session, hasher, issuer, test_settings):
        service = _service(db_session, hasher, issuer, test_settings)
        expired = issuer.issue(uuid.uuid4(), timedelta(seconds=-1), token_type=REFRESH)
        with pytest.raises(TokenExpiredError) as exc_info:
            await service.refresh(expired)
        assert exc_info.value.message == "Refresh token has expired"

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_refresh_token(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)
        registered = await service.register(_payload())
        with pytest.raises(InvalidTokenError) as exc_info:
            await service.refresh(registered.token)
        assert exc_info.value.message == "Invalid refresh token"

    @pytest.mark.asyncio
    async def test_garbage_token(self, db_session, hasher, issuer, test_settings):
        service = _service(db_session, hasher, issuer, test_settings)
        with pytest.raises(InvalidTokenError):
            await service.refresh("definitely.not.valid")

    @pytest.mark.asyncio
    async def test_deleted_account(self, db_session, hasher, issuer, test_settings):
        service = _service(db_session, hasher, issuer, test_settings)
        orphan = issuer.issue(uuid.uuid4(), timedelta(hours=1), token_type=REFRESH)
        with pytest.raises(AccountNotFoundError) as exc_info:
            await service.refresh(orphan)
        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_refresh_issues_new_pair(self, db_session, hasher, issuer, test_settings):
        service = _service(db_session, hasher, issuer, test_settings)
        await service.register(_payload())
        login = await service.login("alice@example.com", TEST_PASSWORD)

        pair = await service.refresh(login.refresh_token)

        assert pair.refresh_token != login.refresh_token
        assert issuer.verify(pair.access_token, expected_type=ACCESS).subject_id == str(login.user.id)
        assert issuer.verify(pair.refresh_token, expected_type=REFRESH)

    @pytest.mark.asyncio
    async def test_without_rotation_old_token_keeps_working(
        self, db_session, hasher, issuer, test_settings
    ):
        service = _service(db_session, hasher, issuer, test_settings)
        await service.register(_payload())
        login = await service.login("alice@example.com", TEST_PASSWORD)

        await service.refresh(login.refresh_token)
        again = await service.refresh(login.refresh_token)

        assert again.access_token

    @pytest.mark.asyncio
    async def test_rotation_rejects_reuse(self, db_session, hasher, issuer, test_settings):
        settings = test_settings.model_copy(update={"refresh_token_rotation": True})
        service = _service(db_session, hasher, issuer, settings)
        await service.register(_payload())
        login = await service.login("alice@example.com", TEST_PASSWORD)

        rotated = await service.refresh(login.refresh_token)
        with pytest.raises(InvalidTokenError):
            await service.refresh(login.refresh_token)

        # The replacement token is still good.
        assert (await service.refresh(rotated.refresh_token)).access_token

