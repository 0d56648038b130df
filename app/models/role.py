"""
Role model — read-only reference data for role-based access control.

``RoleId`` is the closed set of roles known to the application. The
``roles`` table is seeded from ``ROLE_NAMES`` on startup so the ids stored
on users always have a matching row.
"""

from __future__ import annotations

import enum

from sqlalchemy import Column, Integer, String

from app.db.base import Base


class RoleId(enum.IntEnum):
    MANAGER = 1
    SUPERVISOR = 2
    WAREHOUSE_OPERATOR = 3
    OPERATIONS_LEAD = 4


ROLE_NAMES: dict[RoleId, str] = {
    RoleId.MANAGER: "Gerente",
    RoleId.SUPERVISOR: "Jefe Administrativo",
    RoleId.WAREHOUSE_OPERATOR: "Operario de Bodega",
    RoleId.OPERATIONS_LEAD: "Jefe de Operaciones",
}


class Role(Base):
    __tablename__ = "roles"

    id: int = Column(Integer, primary_key=True, autoincrement=False)  # type: ignore[assignment]
    name: str = Column(String(50), unique=True, nullable=False)  # type: ignore[assignment]
