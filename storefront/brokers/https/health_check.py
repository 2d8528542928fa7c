"""Health check HTTP endpoint."""

from firebase_functions import https_fn, options
from storefront.apis.Db import Db
from storefront.config.env_loader import EnvironmentError, validate_environment
from storefront.util.cors_response import handle_cors_preflight, create_cors_response
from storefront.util.logger import get_logger

logger = get_logger(__name__)

PROVIDERS = {
    "payments": {"require_payments": True, "require_email": False},
    "email": {"require_payments": False, "require_email": True},
}


def _database_status(db: Db) -> str:
    try:
        db.collections["products"].limit(1).get()
        return "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return "unhealthy"


def _provider_status(requirements) -> str:
    try:
        validate_environment(**requirements)
        return "configured"
    except EnvironmentError as e:
        logger.warning(str(e))
        return "missing"


@https_fn.on_request(
    ingress=options.IngressSetting.ALLOW_ALL,
    timeout_sec=30,
)
def health_check(req: https_fn.Request):
    """Storefront status for uptime monitors.

    Only Firestore decides the status code. Missing Stripe or SendGrid keys are
    reported but the storefront still browses without them.

    Returns:
        200 when Firestore answers, 503 otherwise
    """
    preflight = handle_cors_preflight(req, ["GET", "OPTIONS"])
    if preflight is not None:
        return preflight

    try:
        db = Db.get_instance()
        services = {"database": _database_status(db), "functions": "healthy"}
        services.update({name: _provider_status(requirements) for name, requirements in PROVIDERS.items()})

        healthy = services["database"] == "healthy"
        body = {
            "status": "healthy" if healthy else "degraded",
            "timestamp": db.timestamp_now().isoformat(),
            "environment": "production" if db.is_production() else "development",
            "services": services,
        }
        logger.info(f"Health check: {body['status']}")
        return create_cors_response(body, 200 if healthy else 503)

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return create_cors_response({"status": "unhealthy", "error": str(e)}, status=503)
