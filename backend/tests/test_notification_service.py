"""
Tests for order notifications.

Tests: email templates, OrderNotifier fan-out, failure isolation and the
settings-driven sender selection.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import asyncio
import logging
from datetime import datetime
from decimal import Decimal

import pytest

from db_models import Order, OrderItem
from services import notification_service
from services.notification_service import (
    LoggingEmailSender,
    OrderNotifier,
    SmtpEmailSender,
    render_admin_alert,
    render_customer_confirmation,
)


def _order(order_id: int = 42) -> Order:
    """Unsaved order with two lines; enough for rendering."""
    return Order(
        id=order_id,
        user_id=1,
        user_email="alice@example.com",
        shipping_address={
            "firstName": "Alice",
            "lastName": "Smith",
            "address": "12 Wick Lane",
            "city": "Pune",
            "state": "Maharashtra",
            "zipCode": "411001",
            "phone": "9876543210",
        },
        total_amount=Decimal("1650.00"),
        status="pending",
        payment_method="pay-on-delivery",
        created_at=datetime(2026, 1, 1, 12, 0, 0),
        items=[
            OrderItem(position=0, product_id=1, title="Lavender Dream", unit_price=Decimal("500"), quantity=2),
            OrderItem(position=1, product_id=2, title="Vanilla Bean Jar", unit_price=Decimal("650"), quantity=1),
        ],
    )


class TestTemplates:

    @pytest.mark.unit
    def test_admin_alert(self):
        subject, body = render_admin_alert(_order())

        assert subject == "New order #42 (1650.00)"
        assert "alice@example.com" in body
        assert "Lavender Dream x 2 @ 500.00" in body
        assert "Vanilla Bean Jar x 1 @ 650.00" in body
        assert "Pune, Maharashtra 411001" in body
        assert "pay-on-delivery" in body

    @pytest.mark.unit
    def test_customer_confirmation(self):
        subject, body = render_customer_confirmation(_order())

        assert subject == "Your order #42 has been received"
        assert body.startswith("Hi Alice,")
        assert "Total: 1650.00" in body


class TestOrderNotifier:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_admin_and_customer(self):
        sender = LoggingEmailSender()
        notifier = OrderNotifier(sender, admin_email="owner@candleshop.test")

        notifier.notify_order_placed(_order())
        await notifier.drain()

        assert sorted(m["to"] for m in sender.sent) == ["alice@example.com", "owner@candleshop.test"]
        assert notifier.pending == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_admin_email_skips_alert(self):
        sender = LoggingEmailSender()
        notifier = OrderNotifier(sender, admin_email="")

        notifier.notify_order_placed(_order())
        await notifier.drain()

        assert [m["to"] for m in sender.sent] == ["alice@example.com"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_other(self, caplog):
        delivered = []

        class AdminInboxDown:
            async def send(self, to, subject, body):
                if to == "owner@candleshop.test":
                    raise OSError("mailbox unavailable")
                delivered.append(to)

        notifier = OrderNotifier(AdminInboxDown(), admin_email="owner@candleshop.test")

        with caplog.at_level(logging.ERROR, logger="services.notification_service"):
            notifier.notify_order_placed(_order(7))
            await notifier.drain()

        assert delivered == ["alice@example.com"]
        assert "Order 7 admin alert failed (non-blocking)" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_notify_returns_before_delivery(self):
        gate = asyncio.Event()
        delivered = []

        class Gated:
            async def send(self, to, subject, body):
                await gate.wait()
                delivered.append(to)

        notifier = OrderNotifier(Gated(), admin_email="owner@candleshop.test")
        notifier.notify_order_placed(_order())

        assert notifier.pending == 2
        assert delivered == []

        gate.set()
        await notifier.drain()
        assert len(delivered) == 2


    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_drain_waits_for_emails_queued_while_draining(self):
        delivered = []
        notifier = None

        class Chained:
            async def send(self, to, subject, body):
                await asyncio.sleep(0)
                delivered.append(subject)
                if subject.startswith("Your order #1 "):
                    notifier.notify_order_placed(_order(2))

        notifier = OrderNotifier(Chained(), admin_email="")
        notifier.notify_order_placed(_order(1))
        await notifier.drain()

        assert notifier.pending == 0
        assert delivered == ["Your order #1 has been received", "Your order #2 has been received"]


class TestSmtpSender:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_builds_message_and_calls_aiosmtplib(self, monkeypatch):
        calls = []

        async def fake_send(message, **kwargs):
            calls.append((message, kwargs))

        monkeypatch.setattr(notification_service.aiosmtplib, "send", fake_send)

        sender = SmtpEmailSender(
            host="smtp.example.com",
            port=587,
            username="mailer",
            password="secret",
            sender="orders@candleshop.test",
        )
        await sender.send("alice@example.com", "Hello", "Body text")

        assert len(calls) == 1
        message, kwargs = calls[0]
        assert message["To"] == "alice@example.com"
        assert message["From"] == "orders@candleshop.test"
        assert message["Subject"] == "Hello"
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["start_tls"] is True
        assert kwargs["username"] == "mailer"


class TestBuildNotifier:

    @pytest.mark.unit
    def test_logging_sender_without_smtp_host(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "smtp_host", "")
        monkeypatch.setattr(notification_service.settings, "admin_email", "owner@candleshop.test")

        notifier = notification_service.build_notifier()

        assert isinstance(notifier.sender, LoggingEmailSender)
        assert notifier.admin_email == "owner@candleshop.test"

    @pytest.mark.unit
    def test_smtp_sender_with_host(self, monkeypatch):
        monkeypatch.setattr(notification_service.settings, "smtp_host", "smtp.example.com")

        notifier = notification_service.build_notifier()

        assert isinstance(notifier.sender, SmtpEmailSender)
        assert notifier.sender.host == "smtp.example.com"
