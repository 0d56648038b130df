"""Pydantic schemas for products, stock entries and plain acknowledgements.

Wire names are Spanish (``nombre_producto``, ``stock_actual``...); Python
attribute names match the ORM models.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.models.product import ProductStatus

# Largest value an INTEGER column holds on every supported backend
INT_MAX = 2_147_483_647


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ── Product ─────────────────────────────────────────────────────────
class ProductCreate(BaseModel):
    name: str = Field(alias="nombre_producto", min_length=1, max_length=200)
    brand: str | None = Field(default=None, alias="marca", max_length=100)
    model: str | None = Field(default=None, alias="modelo", max_length=100)
    color: str | None = Field(default=None, alias="color", max_length=50)
    barcode: str = Field(alias="codigo_barras", min_length=1, max_length=64)
    current_stock: int = Field(default=0, alias="stock_actual", ge=0, le=INT_MAX)
    min_stock: int = Field(default=0, alias="stock_minimo", ge=0, le=INT_MAX)
    max_stock: int = Field(default=0, alias="stock_maximo", ge=0, le=INT_MAX)
    warehouse_location: str | None = Field(default=None, alias="ubicacion_bodega", max_length=100)

    model_config = {"populate_by_name": True, "protected_namespaces": ()}

    @model_validator(mode="after")
    def _check_thresholds(self) -> ProductCreate:
        if self.min_stock > self.max_stock:
            raise ValueError("stock_minimo cannot exceed stock_maximo")
        return self


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, alias="nombre_producto", min_length=1, max_length=200)
    brand: str | None = Field(default=None, alias="marca", max_length=100)
    model: str | None = Field(default=None, alias="modelo", max_length=100)
    color: str | None = Field(default=None, alias="color", max_length=50)
    current_stock: int | None = Field(default=None, alias="stock_actual", ge=0, le=INT_MAX)
    min_stock: int | None = Field(default=None, alias="stock_minimo", ge=0, le=INT_MAX)
    max_stock: int | None = Field(default=None, alias="stock_maximo", ge=0, le=INT_MAX)
    warehouse_location: str | None = Field(default=None, alias="ubicacion_bodega", max_length=100)
    status: ProductStatus | None = Field(default=None, alias="estado")

    model_config = {"populate_by_name": True, "protected_namespaces": ()}


class ProductRead(BaseModel):
    id: int = Field(serialization_alias="id_producto")
    name: str = Field(serialization_alias="nombre_producto")
    brand: str | None = Field(serialization_alias="marca")
    model: str | None = Field(serialization_alias="modelo")
    color: str | None
    barcode: str = Field(serialization_alias="codigo_barras")
    current_stock: int = Field(serialization_alias="stock_actual")
    min_stock: int = Field(serialization_alias="stock_minimo")
    max_stock: int = Field(serialization_alias="stock_maximo")
    warehouse_location: str | None = Field(serialization_alias="ubicacion_bodega")
    status: str = Field(serialization_alias="estado")
    created_at: datetime | None = Field(default=None, serialization_alias="fecha_creacion")

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class ProductCreated(BaseModel):
    message: str
    id: int


# ── Stock entries (goods receipt) ───────────────────────────────────
class StockEntryCreate(BaseModel):
    product_id: int = Field(alias="id_producto", gt=0, le=INT_MAX)
    quantity: int = Field(alias="cantidad", gt=0, le=INT_MAX)
    vehicle_plate: str | None = Field(default=None, alias="placa_vehiculo", max_length=20)
    driver_name: str | None = Field(default=None, alias="nombre_chofer", max_length=150)
    notes: str | None = Field(default=None, alias="observaciones", max_length=500)

    model_config = {"populate_by_name": True}


class StockEntryRead(BaseModel):
    id: int = Field(serialization_alias="id_ingreso")
    product_id: int = Field(serialization_alias="id_producto")
    quantity: int = Field(serialization_alias="cantidad")
    vehicle_plate: str | None = Field(serialization_alias="placa_vehiculo")
    driver_name: str | None = Field(serialization_alias="nombre_chofer")
    notes: str | None = Field(serialization_alias="observaciones")
    recorded_by: int = Field(serialization_alias="id_usuario")
    created_at: datetime | None = Field(default=None, serialization_alias="fecha")

    model_config = {"from_attributes": True}


class StockEntryResult(BaseModel):
    message: str
    entry_id: int = Field(serialization_alias="id_ingreso")
    current_stock: int = Field(serialization_alias="stock_actual")
