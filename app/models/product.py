"""
Product & StockEntry models — inventory domain.

``Product.current_stock`` is the running balance; ``StockEntry`` is the
append-only goods-receipt log that explains how the balance grew.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Integer,
                        String)
from sqlalchemy.orm import relationship

from app.db.base import Base


class ProductStatus(str, enum.Enum):
    ACTIVE = "ACTIVO"
    INACTIVE = "INACTIVO"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_products_stock_non_negative"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    brand: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    model: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    color: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    barcode: str = Column(String(64), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    current_stock: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    min_stock: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    max_stock: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    warehouse_location: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(10),
        nullable=False,
        default=ProductStatus.ACTIVE.value,
        server_default=ProductStatus.ACTIVE.value,
    )  # ACTIVO | INACTIVO
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    entries = relationship("StockEntry", back_populates="product")


class StockEntry(Base):
    __tablename__ = "stock_entries"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_entries_quantity_positive"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    product_id: int = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    vehicle_plate: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    driver_name: str | None = Column(String(150), nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    recorded_by: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    product = relationship("Product", back_populates="entries")
