"""
Shared test fixtures for the inventory backend test suite.

Each test gets its own SQLite file (aiosqlite) with roles seeded, and the
app's ``get_db`` dependency is pointed at it.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-the-inventory-suite"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ORIGINS"] = "*"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.v1.deps import get_db
from app.core.security import TokenService, get_password_hash
from app.db.init_db import create_tables, seed_roles
from app.db.session import enable_sqlite_foreign_keys
from app.main import app
from app.models.product import Product
from app.models.role import RoleId
from app.models.user import User

TEST_PASSWORD = "secret123"
# Hash once; bcrypt is deliberately slow
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test, tables created and roles seeded."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine)
    await create_tables(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_roles(session)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def token_service() -> TokenService:
    return app.state.token_service


# ── Helpers ─────────────────────────────────────────────────────────
@pytest.fixture
def create_user(db_session: AsyncSession):
    """Factory: insert a user with the given role and return it."""
    counter = {"n": 0}

    async def _create(role: RoleId = RoleId.MANAGER, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}-{role.name.lower()}@test.com",
            hashed_password=_TEST_PASSWORD_HASH,
            role_id=int(role),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def auth_headers(create_user, token_service: TokenService):
    """Factory: create a user with *role* and return a Bearer header for it."""

    async def _headers(role: RoleId = RoleId.MANAGER) -> dict[str, str]:
        user = await create_user(role)
        return {"Authorization": f"Bearer {token_service.issue(user.id, user.role_id)}"}

    return _headers


@pytest.fixture
def create_product(db_session: AsyncSession):
    """Factory: insert a product directly and return it."""
    counter = {"n": 0}

    async def _create(stock: int = 0, status: str = "ACTIVO") -> Product:
        counter["n"] += 1
        product = Product(
            name=f"Producto {counter['n']}",
            barcode=f"BC-{counter['n']:05d}",
            current_stock=stock,
            status=status,
        )
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _create
