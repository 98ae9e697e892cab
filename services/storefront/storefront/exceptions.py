"""
Exceptions for the storefront service layer.

Every service error is a StorefrontError with a structured code so routers
can translate it into an HTTP response without string matching.

Usage:
    try:
        inventory.set_stock(product_id, 5)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base error carrying a code, a human-readable message and context data"""

    status_code = 500
    default_code = "STOREFRONT_ERROR"
    default_message = "Storefront error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        **data: Any
    ):
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.data: Dict[str, Any] = data
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        """Serialize to dict (useful for APIs)"""
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class NotFoundError(StorefrontError):
    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class UnauthorizedError(StorefrontError):
    status_code = 401
    default_code = "UNAUTHORIZED"
    default_message = "Invalid credentials"


class ConflictError(StorefrontError):
    """Raised on duplicates, out-of-stock requests and lock timeouts (caller may retry)"""
    status_code = 409
    default_code = "CONFLICT"
    default_message = "Conflicting state"


class ValidationError(StorefrontError):
    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class StorageFailureError(StorefrontError):
    status_code = 503
    default_code = "STORAGE_FAILURE"
    default_message = "Storage is unavailable"
