"""Tests for password hashing and the bearer token service."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.exceptions import (ConfigurationError, InternalError,
                                 TokenExpired, TokenMalformed,
                                 TokenNotYetValid)
from app.core.security import TokenService, get_password_hash, verify_password
from app.models.role import RoleId

SECRET = "unit-test-secret"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(SECRET)


# ── Passwords ───────────────────────────────────────────────────────
def test_hash_is_salted_bcrypt_with_ten_rounds():
    h1 = get_password_hash("p1")
    h2 = get_password_hash("p1")
    assert h1 != h2
    assert h1.startswith("$2b$10$")


def test_verify_password_match_and_mismatch():
    hashed = get_password_hash("correct horse")
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False


def test_verify_password_malformed_hash_raises_internal_error():
    with pytest.raises(InternalError):
        verify_password("anything", "not-a-bcrypt-hash")


# ── Tokens ──────────────────────────────────────────────────────────
def test_missing_secret_fails_fast():
    with pytest.raises(ConfigurationError):
        TokenService(None)
    with pytest.raises(ConfigurationError):
        TokenService("")


def test_issue_then_verify_returns_identity(tokens: TokenService):
    token = tokens.issue(42, RoleId.SUPERVISOR)
    identity = tokens.verify(token)
    assert identity.user_id == 42
    assert identity.role_id is RoleId.SUPERVISOR


def test_token_expires_after_one_day(tokens: TokenService):
    token = tokens.issue(1, RoleId.MANAGER)
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60
    assert claims["sub"] == "1"
    assert claims["rol"] == 1


def test_expired_token_rejected(tokens: TokenService):
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    token = tokens.issue(1, RoleId.MANAGER, now=issued)
    with pytest.raises(TokenExpired):
        tokens.verify(token)


def test_expired_token_with_bad_signature_still_reported_expired(tokens: TokenService):
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    token = TokenService("some-other-secret").issue(1, RoleId.MANAGER, now=issued)
    with pytest.raises(TokenExpired):
        tokens.verify(token)


def test_tampered_token_is_malformed(tokens: TokenService):
    token = tokens.issue(1, RoleId.WAREHOUSE_OPERATOR)
    header, payload, signature = token.split(".")
    forged = jwt.encode(
        {"sub": "1", "rol": int(RoleId.MANAGER), "exp": jwt.get_unverified_claims(token)["exp"]},
        "attacker-secret",
        algorithm="HS256",
    )
    # Forged claims with the original signature
    spliced = ".".join([header, forged.split(".")[1], signature])
    with pytest.raises(TokenMalformed):
        tokens.verify(spliced)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_structurally_broken_token_is_malformed(tokens: TokenService, token: str):
    with pytest.raises(TokenMalformed):
        tokens.verify(token)


def test_not_before_in_future_is_not_yet_valid(tokens: TokenService):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "5", "rol": 1, "iat": now, "nbf": now + timedelta(hours=1), "exp": now + timedelta(days=1)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(TokenNotYetValid):
        tokens.verify(token)


def test_not_before_in_past_is_accepted(tokens: TokenService):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "5", "rol": 4, "nbf": now - timedelta(minutes=1), "exp": now + timedelta(days=1)},
        SECRET,
        algorithm="HS256",
    )
    assert tokens.verify(token).role_id is RoleId.OPERATIONS_LEAD


@pytest.mark.parametrize(
    "claims",
    [
        {"rol": 1},
        {"sub": "1"},
        {"sub": "abc", "rol": 1},
        {"sub": "1", "rol": 99},
    ],
)
def test_missing_or_invalid_identity_claims_are_malformed(tokens: TokenService, claims: dict):
    claims["exp"] = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode(claims, SECRET, algorithm="HS256")
    with pytest.raises(TokenMalformed):
        tokens.verify(token)
