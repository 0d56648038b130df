"""
Schema creation and reference-data seeding, run from the app lifespan.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.config import settings
from app.core.security import get_password_hash
from app.db.base import Base
# Ensure all models are imported so metadata.create_all can see them
from app.models.product import Product, StockEntry  # noqa: F401
from app.models.role import ROLE_NAMES, Role, RoleId
from app.models.user import User

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def seed_roles(session: AsyncSession) -> None:
    """Insert any role from ``ROLE_NAMES`` that is not stored yet."""
    result = await session.execute(select(Role.id))
    existing = set(result.scalars().all())
    missing = [Role(id=int(rid), name=name) for rid, name in ROLE_NAMES.items() if rid not in existing]
    if missing:
        session.add_all(missing)
        await session.commit()
        logger.info("Seeded %d role(s)", len(missing))


async def seed_first_manager(session: AsyncSession) -> None:
    if not (settings.FIRST_MANAGER_EMAIL and settings.FIRST_MANAGER_PASSWORD):
        return

    result = await session.execute(
        select(User).where(User.email == settings.FIRST_MANAGER_EMAIL)
    )
    if result.scalar_one_or_none() is not None:
        return

    session.add(
        User(
            email=settings.FIRST_MANAGER_EMAIL,
            hashed_password=get_password_hash(settings.FIRST_MANAGER_PASSWORD),
            first_name="Gerente",
            role_id=int(RoleId.MANAGER),
        )
    )
    await session.commit()
    logger.info(
        "Default manager created: %s (password: <redacted>)",
        settings.FIRST_MANAGER_EMAIL,
    )
