"""
Order notification service: best-effort emails after an order is committed.

Two independent messages go out per placed order: an alert to the shop
administrator and a confirmation to the customer. Each one is dispatched as
its own asyncio task; the request never waits on delivery. A failed send is
logged with the order id and dropped: no retry, no effect on the order.
"""
import asyncio
import logging
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

from config import settings
from db_models import Order

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    async def send(self, to: str, subject: str, body: str) -> None:
        ...


class SmtpEmailSender:
    """Delivers mail through the SMTP server configured in settings."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout

    async def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
            timeout=self.timeout,
        )


class LoggingEmailSender:
    """Writes messages to the log and keeps them in memory (development, tests)."""

    def __init__(self):
        self.sent: list[dict] = []

    async def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body})
        logger.info(f"[email] to={to} subject={subject!r}")


# ── Templates ───────────────────────────────────────────────────────

def _money(amount) -> str:
    return f"{amount:.2f}"


def _item_lines(order: Order) -> str:
    return "\n".join(
        f"  - {item.title} x {item.quantity} @ {_money(item.unit_price)}"
        for item in order.items
    )


def _address_block(order: Order) -> str:
    a = order.shipping_address or {}
    return (
        f"  {a.get('firstName', '')} {a.get('lastName', '')}\n"
        f"  {a.get('address', '')}\n"
        f"  {a.get('city', '')}, {a.get('state', '')} {a.get('zipCode', '')}\n"
        f"  Phone: {a.get('phone', '')}"
    )


def render_admin_alert(order: Order) -> tuple[str, str]:
    subject = f"New order #{order.id} ({_money(order.total_amount)})"
    body = (
        f"A new order was placed by {order.user_email}.\n\n"
        f"Items:\n{_item_lines(order)}\n\n"
        f"Total: {_money(order.total_amount)}\n"
        f"Payment: {order.payment_method}\n\n"
        f"Ship to:\n{_address_block(order)}\n"
    )
    return subject, body


def render_customer_confirmation(order: Order) -> tuple[str, str]:
    first_name = (order.shipping_address or {}).get("firstName", "")
    subject = f"Your order #{order.id} has been received"
    body = (
        f"Hi {first_name},\n\n"
        f"Thank you for your order. We'll let you know when it ships.\n\n"
        f"Items:\n{_item_lines(order)}\n\n"
        f"Total: {_money(order.total_amount)}\n"
        f"Payment: {order.payment_method}\n\n"
        f"Shipping to:\n{_address_block(order)}\n"
    )
    return subject, body


# ── Notifier ────────────────────────────────────────────────────────

class OrderNotifier:
    """Fire-and-forget order emails. Never raises into the caller."""

    def __init__(self, sender: EmailSender, admin_email: str = ""):
        self.sender = sender
        self.admin_email = admin_email
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def notify_order_placed(self, order: Order) -> None:
        """Schedule the admin alert and the customer confirmation for a committed order."""
        messages = []
        if self.admin_email:
            messages.append(("admin alert", self.admin_email, *render_admin_alert(order)))
        else:
            logger.debug(f"No admin email configured; skipping alert for order {order.id}")
        messages.append(("customer confirmation", order.user_email, *render_customer_confirmation(order)))

        for kind, to, subject, body in messages:
            self._spawn(self._deliver(kind, order.id, to, subject, body))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, kind: str, order_id: int, to: str, subject: str, body: str) -> None:
        try:
            await self.sender.send(to, subject, body)
            logger.info(f"Order {order_id} {kind} sent to {to}")
        except asyncio.CancelledError:
            logger.warning(f"Order {order_id} {kind} cancelled before delivery")
            raise
        except Exception as e:
            logger.error(f"Order {order_id} {kind} failed (non-blocking): {e}", exc_info=True)

    async def drain(self) -> None:
        """Wait until no notification is in flight, including ones queued meanwhile."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def build_notifier() -> OrderNotifier:
    if settings.smtp_enabled:
        sender: EmailSender = SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            sender=settings.email_from,
            timeout=settings.smtp_timeout_seconds,
        )
    else:
        sender = LoggingEmailSender()
    return OrderNotifier(sender, admin_email=settings.admin_email)


_notifier: OrderNotifier | None = None


def get_notifier() -> OrderNotifier:
    """FastAPI dependency: process-wide notifier, built lazily from settings."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier


async def shutdown() -> None:
    """Let queued emails finish on app shutdown."""
    global _notifier
    if _notifier is not None:
        await _notifier.drain()
        _notifier = None
