"""
Identity provider helpers.

Customers and admins authenticate with short-lived JWT access tokens
(Authorization: Bearer <jwt>). A verified token yields a TokenIdentity with a
stable subject id, the account email and its role.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Optional

import jwt

from config import settings
from domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenIdentity:
    subject_id: int
    email: str
    role: str


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_secret() -> str:
    if not settings.jwt_secret:
        raise RuntimeError("Server auth misconfigured (JWT secret missing).")
    return settings.jwt_secret


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            _require_secret(),
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Session expired. Please log in again.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token. Please log in again.")


def verify_token(token: str) -> TokenIdentity:
    """Verify a bearer token and return the identity it carries."""
    payload = decode_access_token(token)
    try:
        subject_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.warning("Access token with non-numeric subject rejected")
        raise UnauthorizedError("Invalid token. Please log in again.")
    return TokenIdentity(
        subject_id=subject_id,
        email=payload.get("email", ""),
        role=payload.get("role", "customer"),
    )


def issue_access_token(*, user_id: int, email: str, role: str) -> str:
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, _require_secret(), algorithm="HS256")
