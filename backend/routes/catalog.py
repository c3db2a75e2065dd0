"""
Catalog endpoints: public candle listing plus admin create/update.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import Product, User
from deps import require_admin
from domain.errors import NotFoundError
from domain.responses import success_response
from models import ProductCreateRequest, ProductUpdateRequest
from services import catalog_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/candles", tags=["catalog"])


def _num(value) -> float | None:
    return float(value) if value is not None else None


def serialize_product(p: Product) -> dict:
    return {
        "id": p.id,
        "title": p.title,
        "description": p.description,
        "price": float(p.price),
        "stock": p.stock,
        "active": p.active,
        "category": p.category,
        "fragrance": p.fragrance,
        "color": p.color,
        "burnTime": p.burn_time,
        "material": p.material,
        "weight": _num(p.weight),
        "height": _num(p.height),
        "width": _num(p.width),
        "photoUrl": p.photo_url,
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
    }


@router.get("")
async def list_candles(db: AsyncSession = Depends(get_db)):
    products = await catalog_service.list_products(db, active_only=True)
    return success_response(candles=[serialize_product(p) for p in products])


@router.get("/admin/all")
async def list_all_candles(
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    products = await catalog_service.list_products(db, active_only=False)
    return success_response(candles=[serialize_product(p) for p in products])


@router.get("/{candle_id}")
async def get_candle(candle_id: int, db: AsyncSession = Depends(get_db)):
    product = await catalog_service.get_product(db, product_id=candle_id)
    if not product or not product.active:
        raise NotFoundError("Candle", str(candle_id))
    return success_response(candle=serialize_product(product))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_candle(
    request: ProductCreateRequest,
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    fields = request.model_dump(exclude={"title", "price", "stock", "active", "description"})
    product = await catalog_service.create_product(
        db,
        title=request.title,
        description=request.description,
        price=request.price,
        stock=request.stock,
        active=request.active,
        **fields,
    )
    await db.commit()
    await db.refresh(product)
    logger.info(f"Candle {product.id} created: {product.title}")
    return success_response(message="Candle created successfully", candle=serialize_product(product))


@router.patch("/{candle_id}")
async def update_candle(
    candle_id: int,
    request: ProductUpdateRequest,
    db: AsyncSession = Depends(get_db),
    _admin: Optional[User] = Depends(require_admin),
):
    product = await catalog_service.update_product(
        db,
        product_id=candle_id,
        changes=request.model_dump(exclude_unset=True),
    )
    await db.commit()
    await db.refresh(product)
    return success_response(message="Candle updated successfully", candle=serialize_product(product))
