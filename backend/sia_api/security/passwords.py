"""
SIA API: Password Hasher
========================

What:  One-way bcrypt hashing and verification of account passwords.
How:   `bcrypt.gensalt(rounds)` gives every hash its own random salt, so two
       hashes of the same password never match textually. `bcrypt.checkpw`
       compares in constant time.
Who:   AuthService (register/login) and the users resource (create/replace).

Threading:
    bcrypt is CPU-bound (~50-250ms per call at production cost).
    Request handlers use `hash_async` / `verify_async`, which run the call
    in Starlette's worker thread pool so the event loop keeps serving other
    requests meanwhile.
"""

import logging
from typing import Optional

import bcrypt
from starlette.concurrency import run_in_threadpool

from sia_api.exceptions import ValidationError

logger = logging.getLogger(__name__)

# bcrypt ignores (or, in recent releases, rejects) input past this length.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Hashes and verifies passwords with a fixed bcrypt cost factor.

    Example:
        hasher = PasswordHasher(rounds=10)
        digest = hasher.hash("hunter22")
        hasher.verify("hunter22", digest)   # True
        hasher.verify("hunter23", digest)   # False
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._dummy_digest: Optional[str] = None

    def hash(self, plaintext: str) -> str:
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        True iff `plaintext` hashes to `digest`.

        Never raises: a malformed digest, non-string input or an oversized
        password all count as a mismatch.
        """
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            logger.debug("Password verification rejected malformed input")
            return False

    def verify_dummy(self, plaintext: str) -> bool:
        """
        Spends one full verification against a throwaway digest.

        Login calls this when the email is unknown so that path costs the
        same as a wrong password. Always returns False.
        """
        if self._dummy_digest is None:
            self._dummy_digest = self.hash("sia-dummy-password")
        self.verify(plaintext, self._dummy_digest)
        return False

    def needs_rehash(self, digest: str) -> bool:
        """True when `digest` was produced with a different cost factor."""
        # bcrypt format: $2b$<cost>$<salt+hash>
        parts = digest.split("$")
        try:
            return int(parts[2]) != self.rounds
        except (ValueError, IndexError):
            return True

    async def hash_async(self, plaintext: str) -> str:
        return await run_in_threadpool(self.hash, plaintext)

    async def verify_async(self, plaintext: str, digest: str) -> bool:
        return await run_in_threadpool(self.verify, plaintext, digest)

    async def verify_dummy_async(self, plaintext: str) -> bool:
        return await run_in_threadpool(self.verify_dummy, plaintext)
