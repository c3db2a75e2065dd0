"""
Order endpoints: customer placement/history and the admin order panel.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import Order, User
from deps import Pagination, pagination_params, require_admin, require_user
from domain.responses import paginated_response, success_response
from middleware.rate_limit import rate_limit
from models import OrderCreateRequest, StatusUpdateRequest
from services import order_service
from services.notification_service import OrderNotifier, get_notifier

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])


def _iso(dt) -> str | None:
    return dt.isoformat() if dt else None


def serialize_order(order: Order, *, include_user: bool = False) -> dict:
    data = {
        "id": order.id,
        "userId": order.user_id,
        "email": order.user_email,
        "items": [
            {
                "candleId": item.product_id,
                "title": item.title,
                "price": float(item.unit_price),
                "quantity": item.quantity,
            }
            for item in order.items
        ],
        "shippingAddress": order.shipping_address,
        "totalAmount": float(order.total_amount),
        "status": order.status,
        "paymentMethod": order.payment_method,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }
    if include_user:
        user = order.user
        data["user"] = (
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "phoneNumber": user.phone_number,
            }
            if user
            else None
        )
    return data


# ── Admin routes ────────────────────────────────────────────────────

@router.get("/admin/all")
async def list_all_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Pagination = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    orders, total = await order_service.list_orders(
        db,
        status=status_filter,
        page=pagination["page"],
        page_size=pagination["page_size"],
    )
    return paginated_response(
        "orders",
        [serialize_order(o, include_user=True) for o in orders],
        page=pagination["page"],
        page_size=pagination["page_size"],
        total=total,
    )


@router.get("/admin/{order_id}")
async def get_order_admin(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    order = await order_service.get_order(db, order_id=order_id)
    return success_response(order=serialize_order(order, include_user=True))


@router.put("/admin/{order_id}/status")
async def update_order_status(
    order_id: int,
    request: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    order = await order_service.update_status(db, order_id=order_id, status=request.status)
    await db.commit()
    return success_response(message="Status updated", order=serialize_order(order, include_user=True))


# ── Customer routes ─────────────────────────────────────────────────

@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(
    request: OrderCreateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
    notifier: OrderNotifier = Depends(get_notifier),
    _rate=Depends(rate_limit(max_requests=settings.orders_rate_limit_per_minute, window_seconds=60)),
):
    order = await order_service.place_order(
        db,
        user_id=user.id,
        user_email=user.email,
        items=[{"product_id": i.candle_id, "quantity": i.quantity} for i in request.items],
        shipping_address=request.shipping_address.to_document(),
        notifier=notifier,
    )
    return success_response(
        message="Order placed successfully",
        order={
            "id": order.id,
            "totalAmount": float(order.total_amount),
            "status": order.status,
            "createdAt": _iso(order.created_at),
        },
    )


@router.get("")
async def list_my_orders(
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    orders = await order_service.list_user_orders(db, user_id=user.id)
    return success_response(orders=[serialize_order(o) for o in orders])


@router.get("/{order_id}")
async def get_my_order(
    order_id: int,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.get_owned_order(db, order_id=order_id, requester_id=user.id)
    return success_response(order=serialize_order(order))
