"""
Pydantic models for request validation.

OrderCreateRequest is the structural validation collaborator for order
placement: it runs before any store access, and anything it rejects is
answered with a 400 validation_error by main.py.
"""
import re
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.constants import PHONE_PATTERN, PHONE_STRIP_CHARS, ZIP_CODE_PATTERN


class ApiBase(BaseModel):
    """Shared base: allows construction by Python name or camelCase alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True, str_strip_whitespace=True)


# ── Orders ──────────────────────────────────────────────────────────

class CartItem(ApiBase):
    """One cart line. Any client-supplied price is ignored."""
    candle_id: int = Field(..., alias="candleId", gt=0)
    quantity: int = Field(..., ge=1)


class ShippingAddress(ApiBase):
    first_name: str = Field(..., alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., alias="zipCode", pattern=ZIP_CODE_PATTERN)
    phone: str = Field(..., min_length=1, max_length=30)

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, v: str) -> str:
        digits = v.translate({ord(c): None for c in PHONE_STRIP_CHARS})
        if not re.fullmatch(PHONE_PATTERN, digits):
            raise ValueError("Please enter a valid phone number (10-15 digits)")
        return digits

    def to_document(self) -> dict:
        """camelCase dict stored on the order row."""
        return self.model_dump(by_alias=True)


class OrderCreateRequest(ApiBase):
    items: List[CartItem] = Field(..., min_length=1)
    shipping_address: ShippingAddress = Field(..., alias="shippingAddress")


class StatusUpdateRequest(ApiBase):
    # Checked against OrderStatus by the service so bad values surface as invalid_status.
    status: Optional[str] = None


# ── Catalog ─────────────────────────────────────────────────────────

class ProductCreateRequest(ApiBase):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(default=0, ge=0)
    active: bool = True
    category: Optional[str] = Field(default=None, max_length=100)
    fragrance: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, max_length=50)
    burn_time: Optional[str] = Field(default=None, alias="burnTime", max_length=50)
    material: Optional[str] = Field(default=None, max_length=100)
    weight: Optional[Decimal] = Field(default=None, ge=0)
    height: Optional[Decimal] = Field(default=None, ge=0)
    width: Optional[Decimal] = Field(default=None, ge=0)
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")


class ProductUpdateRequest(ApiBase):
    """Partial update. Only fields present in the request body are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None
    category: Optional[str] = Field(default=None, max_length=100)
    fragrance: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, max_length=50)
    burn_time: Optional[str] = Field(default=None, alias="burnTime", max_length=50)
    material: Optional[str] = Field(default=None, max_length=100)
    weight: Optional[Decimal] = Field(default=None, ge=0)
    height: Optional[Decimal] = Field(default=None, ge=0)
    width: Optional[Decimal] = Field(default=None, ge=0)
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
