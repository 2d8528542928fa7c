"""User account callables for the admin dashboard."""

from firebase_functions import https_fn, options
from storefront.models.function_types import SuccessResponse
from storefront.services.user_service import UserService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import require_role, ADMIN_ROLES, ROLE_SUPERADMIN
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def delete_user_account(req: https_fn.CallableRequest) -> SuccessResponse:
    """Delete a user's Auth account and profile. Superadmin only."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        caller = require_role(req, ROLE_SUPERADMIN)

        uid = (req.data or {}).get("uid")
        if not uid:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "uid is required"
            )
        if uid == caller:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
                "You cannot delete your own account"
            )

        result = unwrap(UserService().delete_user(uid))
        logger.info(f"User {uid} deleted by {caller}")

        return SuccessResponse(success=True, message="User deleted", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete user: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to delete user. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def get_users_detail(req: https_fn.CallableRequest) -> SuccessResponse:
    """Auth accounts merged with their profiles. Admins only."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        require_role(req, *ADMIN_ROLES)
        users = unwrap(UserService().get_users_detail())
        return SuccessResponse(success=True, data=users)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to list users: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to list users. Please try again later."
        )
