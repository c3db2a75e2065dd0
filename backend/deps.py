"""
Shared FastAPI dependencies.

Centralizes common dependencies so routers can import from a single place
(DB session, auth guards, pagination).
"""

from __future__ import annotations

import logging
from typing import Optional, TypedDict

from fastapi import Depends, Header, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import User
from domain.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from domain.enums import UserRole
from domain.errors import PermissionDeniedError, UnauthorizedError
from middleware.auth import parse_bearer_token, verify_token

logger = logging.getLogger(__name__)


class Pagination(TypedDict):
    page: int
    page_size: int


def pagination_params(
    page: int = Query(DEFAULT_PAGE, ge=1, le=100_000),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> Pagination:
    return {"page": page, "page_size": limit}


async def require_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Require a valid bearer token whose account still exists.

    Raises 401 when the token is missing, invalid, expired, or its user is gone.
    """
    token = parse_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Authentication required. Please log in.")

    identity = verify_token(token)
    q = await db.execute(select(User).where(User.id == identity.subject_id))
    user = q.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("User not found. Please log in again.")
    return user


async def require_admin(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Require an authenticated admin account.

    With ADMIN_AUTH_ENABLED=false the check is skipped and None is returned.
    """
    if not settings.admin_auth_enabled:
        return None
    user = await require_user(authorization=authorization, db=db)
    if user.role != UserRole.ADMIN.value:
        logger.warning(f"Non-admin user {user.id} attempted an admin action")
        raise PermissionDeniedError("Admin role required for this endpoint.")
    return user
