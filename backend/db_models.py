"""
SQLAlchemy ORM models for the Candle Shop backend.

Tables:
    users       customer and admin accounts (issued by the identity provider)
    products    candle catalog with price, stock and active flag
    orders      placed orders with embedded shipping address
    order_items immutable per-order line snapshots (title, unit price, quantity)
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, Text, ForeignKey, JSON,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from database import Base
from domain.enums import OrderStatus, UserRole


def utcnow() -> datetime:
    """Naive UTC timestamp, consistent across SQLite and other backends."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Accounts known to the identity provider."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)  # "customer" | "admin"
    created_at = Column(DateTime, default=utcnow)

    orders = relationship("Order", back_populates="user", lazy="select")


class Product(Base):
    """A candle in the catalog."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=True)  # null => unlimited
    active = Column(Boolean, nullable=False, default=True)

    category = Column(String(100), nullable=True)
    fragrance = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)
    burn_time = Column(String(50), nullable=True)  # e.g. "40-50 hours"
    material = Column(String(100), nullable=True)  # e.g. "Soy Wax"
    weight = Column(Numeric(8, 2), nullable=True)  # grams
    height = Column(Numeric(8, 2), nullable=True)  # cm
    width = Column(Numeric(8, 2), nullable=True)  # cm
    photo_url = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("stock IS NULL OR stock >= 0", name="ck_product_stock_non_negative"),
    )


class Order(Base):
    """A placed order. Only `status` (and `updated_at`) change after creation."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    shipping_address = Column(JSON, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_method = Column(String(50), nullable=False, default="pay-on-delivery")
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="orders", lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_order_total_non_negative"),
        Index("ix_orders_user_created", "user_id", "created_at"),
    )


class OrderItem(Base):
    """
    Line item snapshot. product_id is a weak reference: the candle may later be
    deactivated or removed, the snapshot keeps the order accurate.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(Integer, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_item_price_non_negative"),
    )
