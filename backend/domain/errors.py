"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handlers
in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    code = "domain_error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    code = "not_found"

    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class PermissionDeniedError(DomainError):
    """Permission denied (403)."""
    code = "forbidden"

    def __init__(self, message: str = "Access denied", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    code = "unauthorized"

    def __init__(self, message: str = "Authentication required. Please log in.", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class RateLimitError(DomainError):
    """Rate limit exceeded (429)."""
    code = "rate_limited"

    def __init__(self, message: str = "Rate limit exceeded", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, details=details)


# ── Order placement ─────────────────────────────────────────────────

class ProductsNotFoundError(DomainError):
    """One or more cart products do not exist (400). Lists every missing id."""
    code = "products_not_found"

    def __init__(self, missing_ids: list[int]):
        self.missing_ids = list(missing_ids)
        message = f"Some products were not found: {', '.join(str(i) for i in self.missing_ids)}"
        super().__init__(message, details={"missingIds": self.missing_ids})


class ProductUnavailableError(DomainError):
    """Cart product is deactivated (400)."""
    code = "product_unavailable"

    def __init__(self, title: str, product_id: int | None = None):
        self.title = title
        super().__init__(
            f'"{title}" is no longer available',
            details={"title": title, "candleId": product_id},
        )


class InsufficientStockError(DomainError):
    """Requested quantity exceeds remaining stock (400)."""
    code = "insufficient_stock"

    def __init__(self, title: str, available: int, product_id: int | None = None):
        self.title = title
        self.available = available
        super().__init__(
            f'Insufficient stock for "{title}". Only {available} left.',
            details={"title": title, "available": available, "candleId": product_id},
        )


class InvalidStatusError(DomainError):
    """Order status outside the allowed set (400)."""
    code = "invalid_status"

    def __init__(self, value: str | None, allowed: list[str]):
        super().__init__(
            f"Invalid status. Allowed: {', '.join(allowed)}",
            details={"status": value, "allowed": allowed},
        )


class PersistenceError(DomainError):
    """Datastore unreachable or write failed (500). Never retried automatically."""
    code = "persistence_error"

    def __init__(self, message: str = "Failed to save changes", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
