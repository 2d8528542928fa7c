"""Configuration package: .env loading and settings.yaml."""

from .env_loader import load_environment, get_required_env_var, get_optional_env_var, EnvironmentError
from .loader import load_app_config, get_settings, ConfigValidationError

__all__ = [
    "load_environment",
    "get_required_env_var",
    "get_optional_env_var",
    "EnvironmentError",
    "load_app_config",
    "get_settings",
    "ConfigValidationError",
]
