"""Set the role custom claim of a user."""

from firebase_functions import https_fn, options
from storefront.models.function_types import SetCustomClaimsResponse
from storefront.services.user_service import UserService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import require_role, ROLE_SUPERADMIN
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def set_custom_claims(req: https_fn.CallableRequest) -> SetCustomClaimsResponse:
    """Give a user a role. Superadmin only.

    The role is stored on the profile and in the Auth custom claims; the
    user's refresh tokens are revoked so their next token carries it.

    Args:
        req: Firebase callable request containing SetCustomClaimsRequest data

    Returns:
        SetCustomClaimsResponse
    """
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        caller = require_role(req, ROLE_SUPERADMIN)

        uid = (req.data or {}).get("uid")
        role = (req.data or {}).get("role")
        if not uid or not role:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "uid and role are required"
            )

        service = UserService()
        if role not in service.valid_roles:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                f"Invalid role. Must be one of: {', '.join(service.valid_roles)}"
            )

        unwrap(service.update_user_role(uid, role))
        logger.info(f"User {caller} set role of {uid} to {role}")

        return SetCustomClaimsResponse(
            success=True,
            message=f"Role '{role}' assigned to user {uid}"
        )

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to set custom claims: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to set custom claims. Please try again later."
        )
