"""
SIA API: Access Guard Middleware
================================

What:  Rejects any request to a protected route that does not carry a valid
       access token.
How:   For paths under `/api/` (except the public auth endpoints), reads
       `Authorization: Bearer <token>` and verifies it with the app's
       TokenIssuer, requiring `typ == "access"`. On success the token's
       subject is stored on `request.state.subject_id` and the request
       continues; on any failure a 401 error body is returned and the route
       handler never runs.

Rejected with 401:
    - no Authorization header, or a scheme other than Bearer
    - empty, malformed or wrongly signed token
    - expired token
    - a refresh token presented as a bearer token

The guard never touches the database. A token whose account has since been
deleted is still accepted until it expires.
"""

import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from sia_api.exceptions import MissingTokenError, TokenError, UnauthorizedError
from sia_api.responses import error_response
from sia_api.security import ACCESS, TokenIssuer

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "/api/"
PUBLIC_PATHS = frozenset({
    "/api/auth/register",
    "/api/auth/login",
    "/api/auth/refresh-token",
})


def is_protected(path: str) -> bool:
    normalized = path.rstrip("/") or "/"
    if normalized in PUBLIC_PATHS:
        return False
    return path.startswith(PROTECTED_PREFIX)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Returns the token from an `Authorization` header value.

    Raises:
        MissingTokenError: header absent, not Bearer, or token empty
    """
    if not authorization:
        raise MissingTokenError("Authorization token is required")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingTokenError("Authorization header must be 'Bearer <token>'")
    return token.strip()


class AccessGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" or not is_protected(request.url.path):
            return await call_next(request)

        issuer: TokenIssuer = request.app.state.token_issuer
        try:
            token = extract_bearer_token(request.headers.get("Authorization"))
            claims = issuer.verify(token, expected_type=ACCESS)
        except (MissingTokenError, TokenError) as e:
            logger.warning(
                "Rejected %s %s: %s", request.method, request.url.path, e.message
            )
            return error_response(401, "unauthorized", e.message)

        request.state.subject_id = claims.subject_id
        return await call_next(request)


# ── Dependency ────────────────────────────────────────────────────────────
def get_current_subject(request: Request) -> str:
    """
    Account id of the authenticated caller.

    Only meaningful on guarded routes; raises UnauthorizedError (401) if the
    guard did not run for this request.
    """
    subject_id = getattr(request.state, "subject_id", None)
    if subject_id is None:
        raise UnauthorizedError("Authentication required")
    return subject_id
