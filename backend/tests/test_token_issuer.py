"""
SIA API: Token Issuer Unit Tests
================================

What we test:
    ✅ issue → verify returns the subject
    ✅ Expired tokens raise TokenExpiredError
    ✅ Wrong secret, tampering, garbage and missing claims raise InvalidTokenError
    ✅ Token type is enforced when requested
"""

import uuid
from datetime import timedelta

import jwt
import pytest

from sia_api.exceptions import InvalidTokenError, TokenError, TokenExpiredError
from sia_api.security import ACCESS, REFRESH, TokenIssuer

from conftest import TEST_SECRET


class TestIssueAndVerify:
    def test_round_trip_returns_subject(self, issuer):
        subject = uuid.uuid4()
        claims = issuer.verify(issuer.issue(subject, timedelta(minutes=5)))
        assert claims.subject_id == str(subject)
        assert claims.token_type == ACCESS
        assert claims.expires_at > claims.issued_at

    def test_token_type_is_recorded(self, issuer):
        token = issuer.issue("user-1", timedelta(hours=1), token_type=REFRESH)
        assert issuer.verify(token, expected_type=REFRESH).token_type == REFRESH

    def test_tokens_issued_together_differ(self, issuer):
        first = issuer.issue("user-1", timedelta(minutes=5))
        second = issuer.issue("user-1", timedelta(minutes=5))
        assert first != second
        assert issuer.verify(first).jti != issuer.verify(second).jti

    def test_expiry_matches_ttl(self, issuer):
        claims = issuer.verify(issuer.issue("user-1", timedelta(seconds=300)))
        assert (claims.expires_at - claims.issued_at) == timedelta(seconds=300)


class TestRejection:
    def test_expired_token(self, issuer):
        token = issuer.issue("user-1", timedelta(seconds=-1))
        with pytest.raises(TokenExpiredError):
            issuer.verify(token)

    def test_wrong_secret(self, issuer):
        other = TokenIssuer("another-secret-0123456789abcdefghijklmnop")
        with pytest.raises(InvalidTokenError):
            issuer.verify(other.issue("user-1", timedelta(minutes=5)))

    def test_tampered_signature(self, issuer):
        token = issuer.issue("user-1", timedelta(minutes=5))
        head, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        with pytest.raises(InvalidTokenError):
            issuer.verify(f"{head}.{payload}.{flipped}")

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "Bearer xyz"])
    def test_garbage(self, issuer, garbage):
        with pytest.raises(InvalidTokenError):
            issuer.verify(garbage)

    def test_missing_claims(self, issuer):
        token = jwt.encode({"sub": "user-1"}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_wrong_token_type(self, issuer):
        access = issuer.issue("user-1", timedelta(minutes=5), token_type=ACCESS)
        with pytest.raises(InvalidTokenError):
            issuer.verify(access, expected_type=REFRESH)

    def test_errors_share_a_base(self, issuer):
        with pytest.raises(TokenError):
            issuer.verify(issuer.issue("user-1", timedelta(seconds=-1)))
        with pytest.raises(TokenError):
            issuer.verify("junk")


def test_empty_secret_refused():
    with pytest.raises(ValueError):
        TokenIssuer("")
