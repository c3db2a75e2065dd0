"""
Tests for request models.

Tests: cart items, shipping address normalization and order payloads.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest
from pydantic import ValidationError

from models import CartItem, OrderCreateRequest, ProductUpdateRequest, ShippingAddress


def _address(**overrides) -> dict:
    data = {
        "firstName": "Alice",
        "lastName": "Smith",
        "address": "12 Wick Lane",
        "city": "Pune",
        "state": "Maharashtra",
        "zipCode": "411001",
        "phone": "9876543210",
    }
    data.update(overrides)
    return data


class TestShippingAddress:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,normalized",
        [
            ("9876543210", "9876543210"),
            ("98765 43210", "9876543210"),
            ("(987) 654-3210", "9876543210"),
            ("919876543210123", "919876543210123"),
        ],
    )
    def test_phone_normalized(self, raw, normalized):
        assert ShippingAddress(**_address(phone=raw)).phone == normalized

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["12345", "98765-4321a", "+91 98765 43210", "1234567890123456"])
    def test_phone_rejected(self, raw):
        with pytest.raises(ValidationError):
            ShippingAddress(**_address(phone=raw))

    @pytest.mark.unit
    @pytest.mark.parametrize("zip_code", ["1234", "1234567", "41100A"])
    def test_zip_rejected(self, zip_code):
        with pytest.raises(ValidationError):
            ShippingAddress(**_address(zipCode=zip_code))

    @pytest.mark.unit
    def test_missing_field_rejected(self):
        data = _address()
        del data["city"]
        with pytest.raises(ValidationError):
            ShippingAddress(**data)

    @pytest.mark.unit
    def test_whitespace_only_field_rejected(self):
        with pytest.raises(ValidationError):
            ShippingAddress(**_address(firstName="   "))

    @pytest.mark.unit
    def test_document_uses_camel_case(self):
        doc = ShippingAddress(**_address(phone="98765 43210")).to_document()
        assert doc == _address()


class TestOrderCreateRequest:

    @pytest.mark.unit
    def test_valid_payload(self):
        req = OrderCreateRequest(
            items=[{"candleId": 3, "quantity": 2, "price": 0.01}],
            shippingAddress=_address(),
        )
        assert req.items[0].candle_id == 3
        assert req.items[0].quantity == 2
        assert not hasattr(req.items[0], "price")

    @pytest.mark.unit
    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreateRequest(items=[], shippingAddress=_address())

    @pytest.mark.unit
    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError):
            CartItem(candleId=1, quantity=quantity)

    @pytest.mark.unit
    def test_missing_address_rejected(self):
        with pytest.raises(ValidationError):
            OrderCreateRequest(items=[{"candleId": 1, "quantity": 1}])

    @pytest.mark.unit
    def test_large_cart_accepted(self):
        req = OrderCreateRequest(
            items=[{"candleId": i, "quantity": 5000} for i in range(1, 151)],
            shippingAddress=_address(),
        )
        assert len(req.items) == 150
        assert req.items[0].quantity == 5000


class TestProductUpdateRequest:

    @pytest.mark.unit
    def test_only_sent_fields_are_set(self):
        req = ProductUpdateRequest(burnTime="45 hours", stock=None)
        assert req.model_dump(exclude_unset=True) == {"burn_time": "45 hours", "stock": None}
