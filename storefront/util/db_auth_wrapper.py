"""Authentication and role checks for callable functions."""

from firebase_functions import https_fn
from storefront.apis.Db import Db
from storefront.util.logger import get_logger

logger = get_logger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)


def db_auth_wrapper(req: https_fn.CallableRequest) -> str:
    """Wrapper for authenticating Firebase callable requests.

    Args:
        req: Firebase callable request object

    Returns:
        Authenticated user ID

    Raises:
        HttpsError: If authentication fails (not in emulator/dev mode)
    """
    # Development callers identify themselves with a User-Id header
    if Db.is_development():
        if getattr(req, "raw_request", None) is not None and req.raw_request.headers:
            user_id = req.raw_request.headers.get("User-Id")
            if user_id:
                return user_id
        return "test-user-id"

    if not req.auth:
        logger.warning("Unauthenticated request")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.UNAUTHENTICATED,
            "The function must be called while authenticated."
        )

    return req.auth.uid


def get_caller_role(req: https_fn.CallableRequest) -> str:
    """Role custom claim of the caller, ``user`` when the token has none."""
    if Db.is_development():
        if getattr(req, "raw_request", None) is not None and req.raw_request.headers:
            role = req.raw_request.headers.get("User-Role")
            if role:
                return role

    token = req.auth.token if req.auth and req.auth.token else {}
    return token.get("role") or ROLE_USER


def require_role(req: https_fn.CallableRequest, *roles: str) -> str:
    """Authenticate the caller and check their role claim.

    Returns:
        Authenticated user ID

    Raises:
        HttpsError: UNAUTHENTICATED without auth, PERMISSION_DENIED for other roles
    """
    uid = db_auth_wrapper(req)
    role = get_caller_role(req)

    if role not in roles:
        logger.warning(f"User {uid} with role '{role}' denied, needs one of {list(roles)}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.PERMISSION_DENIED,
            f"This operation requires one of the roles: {', '.join(roles)}"
        )

    return uid
