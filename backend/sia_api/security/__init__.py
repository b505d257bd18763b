"""Password hashing and signed-token primitives."""

from sia_api.security.passwords import PasswordHasher
from sia_api.security.tokens import ACCESS, REFRESH, TokenClaims, TokenIssuer

__all__ = ["ACCESS", "REFRESH", "PasswordHasher", "TokenClaims", "TokenIssuer"]
