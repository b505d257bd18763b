"""
SIA API: Token Issuer
=====================

What:  Creates and verifies the signed bearer tokens (JWT, HMAC).
How:   PyJWT encodes a small claim set and signs it with the configured
       secret. Verification checks signature, expiry, required claims and,
       when asked, the token type.

Claims:
    sub: account id (string)
    typ: "access" or "refresh"; an access token is never accepted where a
         refresh token is expected, and vice versa
    iat / exp: issue and expiry instants (seconds since epoch)
    jti: random id, so two tokens issued in the same second still differ
         and a refresh token can be individually revoked

Tokens are stateless: nothing is stored at issue time.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt

from sia_api.exceptions import InvalidTokenError, TokenExpiredError

ACCESS = "access"
REFRESH = "refresh"

REQUIRED_CLAIMS = ["sub", "typ", "iat", "exp", "jti"]


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, verified token contents."""

    subject_id: str
    token_type: str
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenIssuer:
    """
    Signs and verifies tokens with one shared secret.

    The secret comes from `Settings.jwt_secret_key` via `create_app()`;
    nothing in this class reads configuration on its own.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        if not secret_key:
            raise ValueError("Token signing secret cannot be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm

    def issue(
        self,
        subject_id: Union[str, uuid.UUID],
        ttl: timedelta,
        token_type: str = ACCESS,
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "typ": token_type,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str, expected_type: Optional[str] = None) -> TokenClaims:
        """
        Decodes `token` and returns its claims.

        Raises:
            TokenExpiredError: the signature is valid but `exp` has passed
            InvalidTokenError: bad signature, corrupt structure, missing
                claims, or `typ` differs from `expected_type`
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError() from e

        if expected_type is not None and payload["typ"] != expected_type:
            raise InvalidTokenError()

        try:
            return TokenClaims(
                subject_id=str(payload["sub"]),
                token_type=str(payload["typ"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                jti=str(payload["jti"]),
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidTokenError() from e
