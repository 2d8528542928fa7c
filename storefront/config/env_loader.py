"""
Environment variable loader for the storefront functions.
Loads .env files and reads required/optional variables.
"""

import os
from pathlib import Path
from typing import Dict, Optional
from dotenv import load_dotenv

from storefront.util.logger import get_logger

logger = get_logger(__name__)


class EnvironmentError(Exception):
    """Raised when required environment variables are missing or invalid."""
    pass


def load_environment(env_file: Optional[str] = None) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        env_file: Optional path to .env file. If None, uses .env.local or .env
            at the project root.

    Returns:
        True if a file was loaded
    """
    if env_file is None:
        root = Path(__file__).resolve().parent.parent.parent
        local_path = root / ".env.local"
        env_path = local_path if local_path.exists() else root / ".env"
    else:
        env_path = Path(env_file)

    if env_path.exists():
        load_dotenv(env_path)
        return True

    # Deployed functions get their variables from the runtime
    logger.info(f".env file not found at {env_path}, using system environment")
    return False


def get_required_env_var(name: str, description: str = "") -> str:
    """
    Get a required environment variable.

    Raises:
        EnvironmentError: If the environment variable is not set or empty
    """
    value = os.getenv(name)
    if not value:
        desc_part = f" ({description})" if description else ""

        guidance = ""
        if name.startswith("STRIPE_"):
            guidance = "\n  Hint: Copy the key from the Stripe dashboard (Developers > API keys / Webhooks)"
        elif name.startswith("SENDGRID_"):
            guidance = "\n  Hint: Create an API key with Mail Send permission in SendGrid"
        elif "BUCKET" in name:
            guidance = "\n  Hint: Use the bucket name shown in Firebase Storage, e.g. my-project.appspot.com"

        raise EnvironmentError(f"Required environment variable {name}{desc_part} is not set{guidance}")
    return value


def get_optional_env_var(name: str, default: str = "", description: str = "") -> str:
    """Get an optional environment variable with a default value."""
    return os.getenv(name, default)


def validate_environment(require_payments: bool = True, require_email: bool = True) -> Dict[str, str]:
    """
    Validate that the variables needed by the deployed functions are present.

    Returns:
        Dictionary of environment variable names and values

    Raises:
        EnvironmentError: If any required environment variables are missing
    """
    load_environment()

    required_vars = {}
    if require_payments:
        required_vars["STRIPE_SECRET_KEY"] = "Stripe secret key for payment methods"
        required_vars["STRIPE_WEBHOOK_SECRET"] = "Signing secret of the Stripe webhook endpoint"
    if require_email:
        required_vars["SENDGRID_API_KEY"] = "SendGrid API key for order emails"
        required_vars["EMAIL_DEFAULT_SENDER"] = "From address for order emails"

    optional_vars = {
        "ENV": "development",
        "STORAGE_BUCKET": "",
        "LOG_LEVEL": "INFO",
        "CONTACT_RECIPIENT_EMAIL": "",
    }

    env_values = {}
    missing_vars = []

    for var_name, description in required_vars.items():
        try:
            env_values[var_name] = get_required_env_var(var_name, description)
        except EnvironmentError:
            missing_vars.append(f"  - {var_name}: {description}")

    if missing_vars:
        error_msg = "Missing required environment variables:\n" + "\n".join(missing_vars)
        error_msg += "\n\nCopy .env.example to .env and fill in the values."
        raise EnvironmentError(error_msg)

    for var_name, default_value in optional_vars.items():
        env_values[var_name] = get_optional_env_var(var_name, default_value)

    return env_values
