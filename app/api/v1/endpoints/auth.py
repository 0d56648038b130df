"""
Auth endpoints — registration, login (bearer token) & current profile.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_identity, get_db, get_token_service
from app.core.config import settings
from app.core.exceptions import Conflict, NotFound, Unauthorized
from app.core.limiter import limiter
from app.core.security import TokenService, get_password_hash, verify_password
from app.models.user import User
from app.schemas.token import TokenIdentity
from app.schemas.user import (LoginRequest, LoginResponse, PublicUser,
                              RegisterRequest, RegisterResponse, UserRead)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "El correo electrónico ya está registrado."
INVALID_CREDENTIALS = "Credenciales inválidas."


@router.post("/registro", response_model=RegisterResponse, status_code=201)
async def register_user(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """Create a user account with a bcrypt-hashed password."""
    # Fast path only; the unique constraint on users.email is authoritative
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        raise Conflict(EMAIL_TAKEN)

    user = User(
        first_name=body.first_name,
        last_name=body.last_name,
        national_id=body.national_id,
        email=body.email,
        hashed_password=await run_in_threadpool(get_password_hash, body.password),
        role_id=int(body.role_id),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.info("Concurrent registration for %s rejected by unique constraint", body.email)
        raise Conflict(EMAIL_TAKEN) from exc

    logger.info("Registered user %d with role %s", user.id, body.role_id.name)
    return RegisterResponse(message="Usuario registrado exitosamente.", userId=user.id)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    """Exchange email + password for a bearer token valid for one day.

    Unknown email and wrong password get the same 401 so callers cannot
    probe which accounts exist.
    """
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()

    if (
        user is None
        or user.role is None
        or not await run_in_threadpool(verify_password, body.password, user.hashed_password)
    ):
        logger.warning("Failed login attempt")
        raise Unauthorized(INVALID_CREDENTIALS, headers={"WWW-Authenticate": "Bearer"})

    token = tokens.issue(user.id, user.role_id)
    logger.info("User %d logged in", user.id)
    return LoginResponse(
        message="Login exitoso.",
        token=token,
        usuario=PublicUser(id=user.id, rol=user.role.name),
    )


@router.get("/me", response_model=UserRead)
async def read_current_user(
    identity: TokenIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    """Return profile of the currently authenticated user."""
    result = await db.execute(select(User).where(User.id == identity.user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("Usuario no encontrado")
    return UserRead(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role_id=user.role_id,
        role_name=user.role.name,
    )
