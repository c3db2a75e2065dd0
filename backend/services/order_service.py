"""
Order service: order placement, retrieval, admin listing and status changes.

place_order() is the only writer of orders. It validates the cart against the
live catalog, prices every line from the catalog (client prices are never
read), then inserts the order and takes the stock in one transaction. Emails
are scheduled only after the commit, so a notifier problem can never undo or
block an order.
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import Order, OrderItem, utcnow
from domain.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, STATUS_FILTER_ALL
from domain.enums import OrderStatus
from domain.errors import (
    DomainError,
    InsufficientStockError,
    InvalidStatusError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ProductUnavailableError,
    ProductsNotFoundError,
    ValidationError,
)
from services import catalog_service

logger = logging.getLogger(__name__)


def _normalize_items(items: list[dict]) -> list[tuple[int, int]]:
    if not items:
        raise ValidationError("Order must have at least one item", field="items")
    normalized = []
    for i in items:
        qty = i.get("quantity")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError("Quantity must be a positive integer", field="quantity")
        normalized.append((int(i["product_id"]), qty))
    return normalized


async def place_order(
    db: AsyncSession,
    *,
    user_id: int,
    user_email: str,
    items: list[dict],
    shipping_address: dict,
    notifier=None,
) -> Order:
    """
    items: [{product_id:int, quantity:int}] in cart order.

    Raises ProductsNotFoundError, ProductUnavailableError or InsufficientStockError
    before anything is written, and PersistenceError if the store fails. On any
    error no order exists and no stock has moved.
    """
    cart = _normalize_items(items)

    products = {p.id: p for p in await catalog_service.find_by_ids(db, [pid for pid, _ in cart])}
    missing = [pid for pid in dict.fromkeys(pid for pid, _ in cart) if pid not in products]
    if missing:
        raise ProductsNotFoundError(missing)

    requested: dict[int, int] = {}
    lines: list[OrderItem] = []
    total = Decimal("0")
    for pid, qty in cart:
        p = products[pid]
        if not p.active:
            raise ProductUnavailableError(p.title, p.id)

        # Repeated ids in one cart draw from the same stock.
        requested[pid] = requested.get(pid, 0) + qty
        if p.stock is not None and p.stock < requested[pid]:
            raise InsufficientStockError(p.title, p.stock, p.id)

        unit_price = Decimal(p.price)
        total += unit_price * qty
        lines.append(
            OrderItem(
                position=len(lines),
                product_id=p.id,
                title=p.title,
                unit_price=unit_price,
                quantity=qty,
            )
        )

    titles = {pid: products[pid].title for pid in requested}
    order = Order(
        user_id=user_id,
        user_email=user_email,
        shipping_address=shipping_address,
        total_amount=total,
        status=OrderStatus.PENDING.value,
        payment_method=settings.default_payment_method,
        items=lines,
    )

    try:
        db.add(order)
        await db.flush()

        for pid, qty in requested.items():
            if not await catalog_service.decrement_stock(db, pid, qty):
                # Another order took the stock between our check and this write.
                available = await catalog_service.current_stock(db, pid)
                await db.rollback()
                raise InsufficientStockError(titles[pid], available or 0, pid)

        await db.commit()
    except DomainError:
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error placing order for user {user_id}: {e}", exc_info=True)
        raise PersistenceError("Failed to place order")

    logger.info(
        f"Order {order.id} placed by user {user_id}: "
        f"{len(lines)} item(s), total {total:.2f}"
    )

    if notifier is not None:
        try:
            notifier.notify_order_placed(order)
        except Exception as e:
            logger.error(f"Could not schedule notifications for order {order.id}: {e}", exc_info=True)

    return order


async def get_order(db: AsyncSession, *, order_id: int) -> Order:
    """Admin view: any order, with its user loaded."""
    res = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = res.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", str(order_id))
    return order


async def get_owned_order(db: AsyncSession, *, order_id: int, requester_id: int) -> Order:
    order = await get_order(db, order_id=order_id)
    if order.user_id != requester_id:
        logger.warning(f"User {requester_id} denied access to order {order_id}")
        raise PermissionDeniedError("Access denied")
    return order


async def list_user_orders(db: AsyncSession, *, user_id: int) -> list[Order]:
    res = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(res.scalars().all())


async def list_orders(
    db: AsyncSession,
    *,
    status: str | None = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[Order], int]:
    """Newest-first page of all orders, optionally filtered by status. Returns (orders, total)."""
    page = max(1, page or DEFAULT_PAGE)
    page_size = min(max(1, page_size or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    filters = []
    if status and status != STATUS_FILTER_ALL:
        if status not in OrderStatus.values():
            raise InvalidStatusError(status, OrderStatus.values())
        filters.append(Order.status == status)

    total_res = await db.execute(select(func.count(Order.id)).where(*filters))
    total = total_res.scalar_one()

    res = await db.execute(
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(res.scalars().all()), total


async def update_status(db: AsyncSession, *, order_id: int, status: str | None) -> Order:
    """
    Admin status change. Any listed status may follow any other; stock is not
    restored when an order is cancelled.
    """
    allowed = OrderStatus.values()
    if not status or status not in allowed:
        raise InvalidStatusError(status, allowed)

    order = await get_order(db, order_id=order_id)
    previous = order.status
    order.status = status
    order.updated_at = utcnow()
    await db.flush()

    logger.info(f"Order {order_id} status {previous} -> {status}")
    return order
