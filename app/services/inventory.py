"""
Inventory write paths that carry business rules.

``record_entry`` is the goods-receipt transaction: the audit row and the
stock increment commit together or not at all. ``archive_product`` is the
soft-delete guard that refuses to retire a product still holding stock.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, InternalError, NotFound, ValidationError
from app.models.product import Product, ProductStatus, StockEntry
from app.schemas.product import ProductUpdate, StockEntryCreate

logger = logging.getLogger(__name__)

ACTIVE_STOCK_MESSAGE = "No se puede descontinuar un producto con Stock físico activo."
PRODUCT_NOT_FOUND = "Producto no encontrado"

# Columns that may not be set to NULL through an update
_NOT_NULL_FIELDS = {"name", "current_stock", "min_stock", "max_stock", "status"}


async def _get_product(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFound(PRODUCT_NOT_FOUND)
    return product


async def _product_exists(db: AsyncSession, product_id: int) -> bool:
    result = await db.execute(select(Product.id).where(Product.id == product_id))
    return result.scalar_one_or_none() is not None


async def _increment_stock(db: AsyncSession, product_id: int, quantity: int) -> int:
    """Add *quantity* to the product's balance in a single UPDATE.

    Returns the number of rows matched (0 when the product does not exist).
    """
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(current_stock=Product.current_stock + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def record_entry(
    db: AsyncSession,
    body: StockEntryCreate,
    recorded_by: int,
) -> tuple[StockEntry, int]:
    """Append a goods-receipt record and raise the product's stock.

    Returns the stored entry and the product's new balance. Any failure rolls
    back both writes; no partial update is ever committed.
    """
    entry = StockEntry(
        product_id=body.product_id,
        quantity=body.quantity,
        vehicle_plate=body.vehicle_plate,
        driver_name=body.driver_name,
        notes=body.notes,
        recorded_by=recorded_by,
    )
    try:
        db.add(entry)
        await db.flush()

        if await _increment_stock(db, body.product_id, body.quantity) == 0:
            raise NotFound(PRODUCT_NOT_FOUND)

        new_stock = (
            await db.execute(select(Product.current_stock).where(Product.id == body.product_id))
        ).scalar_one()
        await db.commit()
    except NotFound:
        await db.rollback()
        raise
    except IntegrityError as exc:
        await db.rollback()
        if not await _product_exists(db, body.product_id):
            logger.warning("Stock entry rejected, product %d does not exist", body.product_id)
            raise NotFound(PRODUCT_NOT_FOUND) from exc
        logger.error("Stock entry for product %d violated a constraint: %s", body.product_id, exc.orig)
        raise InternalError("Error al procesar el ingreso.") from exc
    except Exception as exc:
        await db.rollback()
        logger.exception("Stock entry for product %d rolled back", body.product_id)
        raise InternalError("Error al procesar el ingreso.") from exc

    logger.info(
        "Stock entry %d: +%d on product %d by user %d (balance %d)",
        entry.id, body.quantity, body.product_id, recorded_by, new_stock,
    )
    return entry, new_stock


async def archive_product(db: AsyncSession, product_id: int) -> Product:
    """Soft-delete a product. History rows are never touched.

    The status flips in one conditional UPDATE, so a stock entry committed
    after any earlier read still blocks the archive.
    """
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.current_stock == 0)
        .values(status=ProductStatus.INACTIVE.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        await _get_product(db, product_id)
        raise Conflict(ACTIVE_STOCK_MESSAGE)

    await db.commit()
    product = await _get_product(db, product_id)
    await db.refresh(product)
    logger.info("Archived product %d (%s)", product_id, product.name)
    return product


async def update_product(db: AsyncSession, product_id: int, body: ProductUpdate) -> Product:
    product = await _get_product(db, product_id)

    changes = {
        field: value
        for field, value in body.model_dump(exclude_unset=True, mode="json").items()
        if value is not None or field not in _NOT_NULL_FIELDS
    }
    if not changes:
        return product

    min_stock = changes.get("min_stock", product.min_stock)
    max_stock = changes.get("max_stock", product.max_stock)
    if min_stock > max_stock:
        raise ValidationError("stock_minimo no puede superar stock_maximo.")

    stock = changes.get("current_stock", product.current_stock)
    status = changes.get("status", product.status)
    if status == ProductStatus.INACTIVE.value and stock > 0:
        raise Conflict(ACTIVE_STOCK_MESSAGE)

    stmt = update(Product).where(Product.id == product_id).values(**changes)
    if status == ProductStatus.INACTIVE.value and "current_stock" not in changes:
        # Stock may have been received since the read above
        stmt = stmt.where(Product.current_stock == 0)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        await db.rollback()
        raise Conflict(ACTIVE_STOCK_MESSAGE)

    await db.commit()
    await db.refresh(product)
    logger.info("Updated product %d: %s", product_id, sorted(changes))
    return product
