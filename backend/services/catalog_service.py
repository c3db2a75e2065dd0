"""
Catalog service: candle lookups, stock adjustment, and catalog management.

The order engine only depends on find_by_ids() and decrement_stock(); the
management helpers back the admin catalog endpoints and the seed script.
"""

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Product, utcnow
from domain.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "title", "description", "price", "stock", "active", "category", "fragrance",
    "color", "burn_time", "material", "weight", "height", "width", "photo_url",
}

# NOT NULL columns
_REQUIRED_FIELDS = ("title", "description", "price", "active")


async def find_by_ids(db: AsyncSession, ids: Iterable[int]) -> list[Product]:
    """Fetch every product whose id is in `ids` in one query. Missing ids are simply absent."""
    ids = list(set(ids))
    if not ids:
        return []
    res = await db.execute(
        select(Product)
        .where(Product.id.in_(ids))
        .execution_options(populate_existing=True)
    )
    return list(res.scalars().all())


async def current_stock(db: AsyncSession, product_id: int) -> int | None:
    res = await db.execute(select(Product.stock).where(Product.id == product_id))
    return res.scalar_one_or_none()


async def decrement_stock(db: AsyncSession, product_id: int, amount: int) -> bool:
    """
    Atomically take `amount` units of stock.

    Issues a single conditional UPDATE (stock = stock - amount WHERE stock >= amount),
    so concurrent orders cannot both pass a stale check and drive stock negative.
    Products with unlimited stock (NULL) always succeed and stay NULL.

    Returns False, without changing anything, when the guard rejects the decrement.
    """
    res = await db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.stock.is_not(None),
            Product.stock >= amount,
        )
        .values(stock=Product.stock - amount, updated_at=utcnow())
        .returning(Product.stock)
        .execution_options(synchronize_session=False)
    )
    remaining = res.scalar_one_or_none()
    if remaining is not None:
        logger.debug(f"Stock for product {product_id} decremented by {amount} (now {remaining})")
        return True

    exists = await db.execute(select(Product.id, Product.stock).where(Product.id == product_id))
    row = exists.one_or_none()
    if row is not None and row.stock is None:
        return True

    logger.warning(
        f"Stock decrement rejected for product {product_id}: requested {amount}, "
        f"available {row.stock if row is not None else 'n/a (missing)'}"
    )
    return False


async def get_product(db: AsyncSession, *, product_id: int) -> Product | None:
    res = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def list_products(db: AsyncSession, *, active_only: bool = True) -> list[Product]:
    query = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
    if active_only:
        query = query.where(Product.active.is_(True))
    res = await db.execute(query)
    return list(res.scalars().all())


async def create_product(
    db: AsyncSession,
    *,
    title: str,
    price: Decimal | float | int,
    stock: int | None = 0,
    active: bool = True,
    description: str = "",
    **attributes,
) -> Product:
    unknown = set(attributes) - _UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Unknown product fields: {', '.join(sorted(unknown))}")
    product = Product(
        title=title,
        description=description,
        price=Decimal(str(price)),
        stock=stock,
        active=active,
        **attributes,
    )
    db.add(product)
    await db.flush()
    return product


async def update_product(db: AsyncSession, *, product_id: int, changes: dict) -> Product:
    """
    Apply a partial update. Keys are product attribute names.

    None is accepted only for optional attributes; stock=None means unlimited.
    """
    for field in _REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise ValidationError("may not be null", field=field)

    product = await get_product(db, product_id=product_id)
    if not product:
        raise NotFoundError("Candle", str(product_id))

    for field, value in changes.items():
        if field not in _UPDATABLE_FIELDS:
            continue
        setattr(product, field, value)

    product.updated_at = utcnow()
    await db.flush()
    return product
