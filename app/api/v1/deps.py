"""
FastAPI dependencies — database session and the access-control gate.

Gate outcomes for a protected route:

- no ``Authorization`` header, a non-Bearer scheme or an empty token: 401
- a token that fails verification (expired, tampered, not yet valid): 403
- a valid token: the ``TokenIdentity`` is attached to ``request.state`` and
  returned to the handler

``require_roles`` composes on top of that with a per-route allow-list.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (Forbidden, TokenError, TokenExpired,
                                 TokenMalformed, TokenNotYetValid,
                                 Unauthorized)
from app.core.security import TokenService
from app.db.session import async_session_factory
from app.models.role import RoleId
from app.schemas.token import TokenIdentity

logger = logging.getLogger(__name__)

_BEARER = "Bearer "

_TOKEN_ERROR_MESSAGES: dict[type[TokenError], str] = {
    TokenExpired: "Token expirado. Por favor, inicie sesión nuevamente.",
    TokenMalformed: "Token inválido.",
    TokenNotYetValid: "Token no activo.",
}


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _extract_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER):
        raise Unauthorized(
            "Acceso denegado. No se proporcionó token o formato incorrecto.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = authorization[len(_BEARER):].strip()
    if not token:
        raise Unauthorized(
            "Acceso denegado. No se proporcionó token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> TokenIdentity:
    """Verify the bearer token and attach the caller's identity to the request."""
    token = _extract_token(authorization)
    try:
        identity = tokens.verify(token)
    except TokenError as exc:
        message = _TOKEN_ERROR_MESSAGES.get(type(exc), "Token inválido o expirado.")
        logger.warning("JWT verification failed: %s (%s)", type(exc).__name__, exc)
        raise Forbidden(message) from exc

    request.state.identity = identity
    return identity


async def get_optional_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> TokenIdentity | None:
    """Like ``get_current_identity`` but never rejects; ``None`` for anonymous callers."""
    request.state.identity = None
    if not authorization or not authorization.startswith(_BEARER):
        return None
    token = authorization[len(_BEARER):].strip()
    if not token:
        return None
    try:
        identity = tokens.verify(token)
    except TokenError as exc:
        logger.warning("Ignoring invalid optional token: %s", type(exc).__name__)
        return None
    request.state.identity = identity
    return identity


def require_roles(*roles: RoleId) -> Callable[..., Coroutine[Any, Any, TokenIdentity]]:
    """Build a dependency that admits only callers whose role is in *roles*.

    Use as route metadata::

        @router.delete("/{id}", dependencies=[Depends(require_roles(RoleId.MANAGER))])
    """
    allowed = frozenset(roles)

    async def _check_role(
        identity: TokenIdentity = Depends(get_current_identity),
    ) -> TokenIdentity:
        if identity.role_id not in allowed:
            logger.info(
                "User %d with role %s denied (requires one of %s)",
                identity.user_id,
                identity.role_id.name,
                sorted(r.name for r in allowed),
            )
            raise Forbidden("Acceso denegado. Permisos insuficientes.")
        return identity

    return _check_role
