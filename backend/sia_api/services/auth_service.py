"""
SIA API: Auth Service
=====================

What:  Registration, login and refresh-token exchange.
How:   Composes the account repository, the password hasher and the token
       issuer. Built per request (it holds the request's DB session) by the
       `get_auth_service` dependency.
Who:   Called by the /api/auth route handlers.

Flows:
    register:  email free? → hash password → store account → issue one
               access token with the registration TTL
    login:     look up email → verify password → issue access + refresh
    refresh:   verify refresh token → account still exists? → issue a
               fresh access + refresh pair

Enumeration resistance:
    An unknown email and a wrong password raise the same
    InvalidCredentialsError, and the unknown-email path still runs one
    bcrypt verification so both take the same time.

Refresh tokens:
    By default a refresh token stays usable until it expires, even after it
    has been exchanged. With REFRESH_TOKEN_ROTATION enabled, each exchange
    records the token's `jti` in `revoked_tokens` and a second exchange of
    the same token is rejected as invalid.
"""

import logging
import uuid
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sia_api.config import Settings
from sia_api.database import get_db_session
from sia_api.exceptions import (
    AccountNotFoundError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
)
from sia_api.models import Account, RevokedToken
from sia_api.repositories import Repository
from sia_api.schemas.account import AccountCreate
from sia_api.schemas.auth import (
    LoginResponse,
    RegisterResponse,
    TokenPairResponse,
    UserSummary,
)
from sia_api.security import ACCESS, REFRESH, PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless apart from the injected, request-scoped DB session."""

    def __init__(
        self,
        session: AsyncSession,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        settings: Settings,
    ):
        self.accounts: Repository[Account] = Repository(
            session, Account, timeout=settings.db_timeout_seconds, resource_name="User"
        )
        self.revoked_tokens: Repository[RevokedToken] = Repository(
            session, RevokedToken, timeout=settings.db_timeout_seconds
        )
        self.hasher = hasher
        self.issuer = issuer
        self.settings = settings

    async def register(self, payload: AccountCreate) -> RegisterResponse:
        """
        Creates an account and returns a short-lived access token for it.

        Raises:
            ConflictError: the email is already registered (HTTP 400)
        """
        if await self.accounts.get_by(email=payload.email) is not None:
            logger.info("Registration rejected, email already registered: %s", payload.email)
            raise ConflictError("User already exists", status_code=400)

        password_hash = await self.hasher.hash_async(payload.password)
        try:
            account = await self.accounts.add(
                email=payload.email,
                password_hash=password_hash,
                first_name=payload.first_name,
                last_name=payload.last_name,
            )
        except ConflictError as e:
            # Lost a race with a concurrent registration of the same email.
            raise ConflictError("User already exists", status_code=400) from e

        token = self.issuer.issue(
            account.id, self.settings.registration_token_ttl, token_type=ACCESS
        )
        logger.info("Registered account %s (%s)", account.id, account.email)
        return RegisterResponse(
            message="User created successfully",
            token=token,
            user=UserSummary.model_validate(account),
        )

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Exchanges credentials for an access + refresh token pair.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        account = await self.accounts.get_by(email=email)
        if account is None:
            await self.hasher.verify_dummy_async(password)
            logger.warning("Login failed for %s", email)
            raise InvalidCredentialsError()

        if not await self.hasher.verify_async(password, account.password_hash):
            logger.warning("Login failed for %s", email)
            raise InvalidCredentialsError()

        if self.hasher.needs_rehash(account.password_hash):
            new_hash = await self.hasher.hash_async(password)
            await self.accounts.update(account, password_hash=new_hash)
            logger.info("Upgraded password hash cost for account %s", account.id)

        pair = self._issue_pair(account.id)
        logger.info("Login succeeded for account %s", account.id)
        return LoginResponse(
            message="Login successful",
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserSummary.model_validate(account),
        )

    async def refresh(self, refresh_token: Optional[str]) -> TokenPairResponse:
        """
        Exchanges a valid refresh token for a new access + refresh pair.

        Raises:
            MissingTokenError: no token supplied
            TokenExpiredError: token signature valid but expired
            InvalidTokenError: bad signature, wrong token type, or already
                exchanged (rotation enabled)
            AccountNotFoundError: the token's account was deleted
        """
        if not refresh_token or not refresh_token.strip():
            raise MissingTokenError("Refresh token is required")

        try:
            claims = self.issuer.verify(refresh_token.strip(), expected_type=REFRESH)
        except TokenExpiredError as e:
            raise TokenExpiredError("Refresh token has expired") from e
        except InvalidTokenError as e:
            raise InvalidTokenError("Invalid refresh token") from e

        rotation = self.settings.refresh_token_rotation
        if rotation and await self.revoked_tokens.get(claims.jti) is not None:
            logger.warning(
                "Reuse of exchanged refresh token %s for subject %s",
                claims.jti, claims.subject_id,
            )
            raise InvalidTokenError("Invalid refresh token")

        account = await self._find_account(claims.subject_id)
        if account is None:
            raise AccountNotFoundError(claims.subject_id)

        if rotation:
            try:
                await self.revoked_tokens.add(
                    jti=claims.jti,
                    subject_id=claims.subject_id,
                    expires_at=claims.expires_at,
                )
            except ConflictError as e:
                # A concurrent exchange of the same token got there first.
                raise InvalidTokenError("Invalid refresh token") from e

        logger.info("Refreshed tokens for account %s", account.id)
        return self._issue_pair(account.id)

    async def _find_account(self, subject_id: str) -> Optional[Account]:
        try:
            account_id = uuid.UUID(subject_id)
        except ValueError:
            return None
        return await self.accounts.get(account_id)

    def _issue_pair(self, subject_id: uuid.UUID) -> TokenPairResponse:
        return TokenPairResponse(
            access_token=self.issuer.issue(
                subject_id, self.settings.access_token_ttl, token_type=ACCESS
            ),
            refresh_token=self.issuer.issue(
                subject_id, self.settings.refresh_token_ttl, token_type=REFRESH
            ),
        )


# ── Dependency ────────────────────────────────────────────────────────────
def get_auth_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> AuthService:
    state = request.app.state
    return AuthService(
        session=session,
        hasher=state.password_hasher,
        issuer=state.token_issuer,
        settings=state.settings,
    )
