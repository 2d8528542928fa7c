"""Turn service envelopes into callable results or HttpsErrors."""

from typing import Any, Callable, Dict, Mapping, Optional
from firebase_functions import https_fn
from storefront.util.json_response import jsonable
from storefront.util.logger import get_logger

logger = get_logger(__name__)

ERROR_CODE_MAP = {
    "VALIDATION_ERROR": https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    "NOT_FOUND": https_fn.FunctionsErrorCode.NOT_FOUND,
    "PERMISSION_DENIED": https_fn.FunctionsErrorCode.PERMISSION_DENIED,
    "FAILED_PRECONDITION": https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
    "INSUFFICIENT_STOCK": https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
}


def to_https_error(error: Optional[Mapping[str, Any]]) -> https_fn.HttpsError:
    error = error or {}
    code = ERROR_CODE_MAP.get(error.get("code"), https_fn.FunctionsErrorCode.INTERNAL)
    details = dict(error.get("details") or {})
    if error.get("code"):
        details["code"] = error["code"]
    return https_fn.HttpsError(code, error.get("message") or "Internal error", jsonable(details))


def unwrap(envelope: Mapping[str, Any]) -> Any:
    """JSON-safe data of a successful envelope.

    Raises:
        HttpsError: mapped from the envelope error
    """
    if not envelope.get("ok"):
        raise to_https_error(envelope.get("error"))
    return jsonable(envelope.get("data"))


def dispatch_action(data: Optional[Mapping[str, Any]],
                    handlers: Dict[str, Callable[[Dict[str, Any]], Mapping[str, Any]]]) -> Any:
    """Run ``handlers[data["action"]](data["params"])`` and unwrap its envelope."""
    data = data or {}
    action = data.get("action")
    if not action:
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "action is required")

    handler = handlers.get(action)
    if handler is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"Unknown action '{action}'. Expected one of: {', '.join(sorted(handlers))}",
        )

    params = data.get("params") or {}
    if not isinstance(params, dict):
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "params must be an object")

    logger.info(f"Dispatching action {action}")
    return unwrap(handler(params))
