"""
Standard response envelope for storefront services.

Every public service operation returns the same shape:
{
    "ok": bool,
    "data": any,
    "error": {"code": str, "message": str, "details": dict} | None
}

Callers branch on ``ok`` instead of catching exceptions.
"""

import functools
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from storefront.exceptions.CustomError import ProjectError
from storefront.util.logger import get_logger

logger = get_logger(__name__)

Envelope = Dict[str, Any]


def ok(data: Any = None) -> Envelope:
    """
    Create a successful response.

    Example:
        >>> ok({"id": "abc123"})
        {'ok': True, 'data': {'id': 'abc123'}, 'error': None}
    """
    return {
        "ok": True,
        "data": data,
        "error": None
    }


def fail(message: str, code: str = "ERROR", details: Optional[Dict[str, Any]] = None) -> Envelope:
    """
    Create an error response.

    Args:
        message: Human-readable error description
        code: Error code identifier (default: "ERROR")
        details: Optional additional error context

    Example:
        >>> fail("Product not found", code="NOT_FOUND")
        {'ok': False, 'data': None, 'error': {'code': 'NOT_FOUND', 'message': 'Product not found'}}
    """
    error = {
        "code": code,
        "message": message
    }

    if details:
        error["details"] = details

    return {
        "ok": False,
        "data": None,
        "error": error
    }


def is_ok(response: Any) -> bool:
    """True when ``response`` is an envelope with ok=True."""
    if not isinstance(response, dict):
        return False
    return bool(response.get("ok", False))


def get_data(response: Any) -> Any:
    """Data payload of an envelope, None if absent."""
    if not isinstance(response, dict):
        return None
    return response.get("data")


def get_error(response: Any) -> Optional[Dict[str, Any]]:
    """Error object of an envelope, None if absent."""
    if not isinstance(response, dict):
        return None
    return response.get("error")


def jsonable(value: Any) -> Any:
    """Convert Firestore values (datetimes, pydantic models) into JSON-safe data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def service_result(func: Callable[..., Any]) -> Callable[..., Envelope]:
    """Wrap a service method so it always returns an envelope.

    ProjectError subclasses keep their code and details. Anything else is
    logged with its traceback and reported as INTERNAL.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Envelope:
        try:
            return ok(func(*args, **kwargs))
        except ProjectError as e:
            logger.warning(f"{func.__qualname__} failed: [{e.code}] {e.message}")
            return fail(e.message, code=e.code, details=e.details)
        except Exception as e:
            logger.exception(f"{func.__qualname__} raised an unexpected error: {e}")
            return fail(str(e), code="INTERNAL")

    return wrapper
