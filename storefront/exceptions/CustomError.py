"""Domain exceptions raised inside the service layer.

Services convert these into failed envelopes; brokers convert failed
envelopes into ``https_fn.HttpsError``.
"""

from typing import Optional, Dict, Any, List


class ProjectError(Exception):
    """Base exception class for storefront errors."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize ProjectError.

        Args:
            message: Error message
            code: Optional error code
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.code = code or "PROJECT_ERROR"
        self.details = details or {}


class ValidationError(ProjectError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        if field:
            details = details or {}
            details["field"] = field

        super().__init__(message, code="VALIDATION_ERROR", details=details)


class PermissionError(ProjectError):
    """Raised when the caller may not act on a resource."""

    def __init__(self, message: str = "Permission denied", resource: Optional[str] = None):
        details = {"resource": resource} if resource else {}
        super().__init__(message, code="PERMISSION_DENIED", details=details)


class NotFoundError(ProjectError):
    """Raised when a document does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} not found"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, code="NOT_FOUND", details=details)


class PreconditionError(ProjectError):
    """Raised when a document is not in a state that allows the operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="FAILED_PRECONDITION", details=details)


class InsufficientStockError(ProjectError):
    """Raised when a checkout asks for more units than a product has."""

    def __init__(self, out_of_stock_items: List[Dict[str, Any]]):
        names = ", ".join(item.get("name") or item["id"] for item in out_of_stock_items)
        super().__init__(
            f"Insufficient stock for: {names}",
            code="INSUFFICIENT_STOCK",
            details={"outOfStockItems": out_of_stock_items},
        )
        self.out_of_stock_items = out_of_stock_items


class ExternalServiceError(ProjectError):
    """Raised when Stripe, SendGrid or another remote service fails."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR",
                         details={"service": service, "status_code": status_code})
