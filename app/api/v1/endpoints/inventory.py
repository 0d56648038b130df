"""
Inventory endpoints — product CRUD, soft delete and goods receipt.

- GET operations require any authenticated user.
- Create / update require MANAGER or SUPERVISOR.
- Archive (DELETE) requires MANAGER.
- Goods receipt (POST /ingreso) requires MANAGER, SUPERVISOR or OPERATIONS_LEAD.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_identity, get_db, require_roles
from app.core.exceptions import Conflict, NotFound
from app.models.product import Product, ProductStatus, StockEntry
from app.models.role import RoleId
from app.schemas.product import (MessageResponse, ProductCreate,
                                 ProductCreated, ProductRead, ProductUpdate,
                                 StockEntryCreate, StockEntryRead,
                                 StockEntryResult)
from app.schemas.token import TokenIdentity
from app.services import inventory as inventory_service

router = APIRouter(
    prefix="/inventario",
    tags=["inventory"],
    dependencies=[Depends(get_current_identity)],
)
logger = logging.getLogger(__name__)

# ── Route allow-lists ───────────────────────────────────────────────
PRODUCT_EDITORS = (RoleId.MANAGER, RoleId.SUPERVISOR)
PRODUCT_ARCHIVERS = (RoleId.MANAGER,)
STOCK_RECEIVERS = (RoleId.MANAGER, RoleId.SUPERVISOR, RoleId.OPERATIONS_LEAD)

ProductId = Annotated[int, Path(ge=1, le=2_147_483_647)]


@router.get("", response_model=list[ProductRead])
async def list_products(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    estado: ProductStatus | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[Product]:
    """Full catalogue, archived products included, newest first."""
    query = select(Product).order_by(Product.id.desc()).offset(skip).limit(limit)
    if estado is not None:
        query = query.where(Product.status == estado.value)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post(
    "",
    response_model=ProductCreated,
    status_code=201,
    dependencies=[Depends(require_roles(*PRODUCT_EDITORS))],
)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db),
) -> ProductCreated:
    product = Product(**body.model_dump())
    db.add(product)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("El Código de Barras ya existe.") from exc

    logger.info("Created product %d (barcode %s)", product.id, product.barcode)
    return ProductCreated(message="Producto creado", id=product.id)


@router.post("/ingreso", response_model=StockEntryResult, status_code=201)
async def record_stock_entry(
    body: StockEntryCreate,
    db: AsyncSession = Depends(get_db),
    identity: TokenIdentity = Depends(require_roles(*STOCK_RECEIVERS)),
) -> StockEntryResult:
    """Record a goods receipt and add its quantity to the product's stock.

    The recording user is taken from the token, never from the body.
    """
    entry, new_stock = await inventory_service.record_entry(db, body, identity.user_id)
    return StockEntryResult(
        message="Ingreso registrado y Stock actualizado.",
        entry_id=entry.id,
        current_stock=new_stock,
    )


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: ProductId,
    db: AsyncSession = Depends(get_db),
) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFound(inventory_service.PRODUCT_NOT_FOUND)
    return product


@router.get("/{product_id}/ingresos", response_model=list[StockEntryRead])
async def list_stock_entries(
    product_id: ProductId,
    db: AsyncSession = Depends(get_db),
) -> list[StockEntry]:
    """Goods-receipt history of one product, newest first."""
    product = await db.execute(select(Product.id).where(Product.id == product_id))
    if product.scalar_one_or_none() is None:
        raise NotFound(inventory_service.PRODUCT_NOT_FOUND)

    result = await db.execute(
        select(StockEntry)
        .where(StockEntry.product_id == product_id)
        .order_by(StockEntry.id.desc())
    )
    return list(result.scalars().all())


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_roles(*PRODUCT_EDITORS))],
)
async def update_product(
    product_id: ProductId,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> Product:
    """Edit product fields; setting ``estado`` to ACTIVO reactivates an archived product."""
    return await inventory_service.update_product(db, product_id, body)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_roles(*PRODUCT_ARCHIVERS))],
)
async def archive_product(
    product_id: ProductId,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Soft-delete (archive) a product. Stock-entry history is preserved."""
    await inventory_service.archive_product(db, product_id)
    return MessageResponse(message="Producto archivado (Historial preservado)")
