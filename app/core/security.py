"""
Password hashing (bcrypt) and bearer token issuance / verification (JWT).

The signing secret is handed to ``TokenService`` once at startup; nothing
else in the code base reads it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import (ConfigurationError, InternalError,
                                 TokenExpired, TokenMalformed,
                                 TokenNotYetValid)
from app.models.role import RoleId
from app.schemas.token import TokenIdentity

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    """Return True if *plain* matches *hashed*.

    A mismatch is a plain ``False``; only a stored hash that cannot be parsed
    raises (as ``InternalError``).
    """
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError) as exc:
        logger.error("Stored password hash is malformed: %s", exc)
        raise InternalError("Error interno del servidor.") from exc


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
class TokenService:
    """Signs and verifies the stateless bearer credential.

    Claims: ``sub`` (user id, as string), ``rol`` (role id), ``iat`` and
    ``exp``. Tokens are never revoked early; a valid token is trusted until
    it expires.
    """

    def __init__(
        self,
        secret: str | None,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=1),
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET is not set; refusing to issue tokens")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls) -> TokenService:
        return cls(
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    def issue(self, user_id: int, role_id: int, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": str(user_id),
                "rol": int(role_id),
                "iat": issued_at,
                "exp": issued_at + self.ttl,
            },
            self._secret,
            algorithm=self._algorithm,
        )

    def verify(self, token: str) -> TokenIdentity:
        """Return the identity carried by *token*.

        Raises ``TokenExpired``, ``TokenNotYetValid`` or ``TokenMalformed``.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_nbf": False},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpired("token expired") from exc
        except JWTError as exc:
            # An expired token is reported as such even if it was also tampered with
            if _is_past_expiry(token):
                raise TokenExpired("token expired") from exc
            raise TokenMalformed(str(exc)) from exc

        nbf = payload.get("nbf")
        if nbf is not None:
            if not isinstance(nbf, (int, float)):
                raise TokenMalformed("nbf claim must be numeric")
            if datetime.now(timezone.utc).timestamp() < nbf:
                raise TokenNotYetValid("token not active yet")

        try:
            return TokenIdentity(
                user_id=int(payload["sub"]),
                role_id=RoleId(payload["rol"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenMalformed("token is missing identity claims") from exc


def _is_past_expiry(token: str) -> bool:
    try:
        exp = jwt.get_unverified_claims(token).get("exp")
    except JWTError:
        return False
    return isinstance(exp, (int, float)) and datetime.now(timezone.utc).timestamp() > exp
