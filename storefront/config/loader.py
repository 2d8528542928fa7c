"""
Configuration loader for the storefront functions.
Loads and validates settings from settings.yaml.
"""

import yaml
from typing import TypedDict, List, Optional
from pathlib import Path


class CacheConfig(TypedDict, total=False):
    shop_page_minutes: float
    site_config_minutes: float
    published_page_minutes: float
    stock_validation_seconds: float


class ProductsConfig(TypedDict, total=False):
    search_max_results: int
    search_min_length: int


class OrdersConfig(TypedDict, total=False):
    page_size: int
    amount_filter_multiplier: int


class UsersConfig(TypedDict, total=False):
    list_limit: int
    valid_roles: List[str]


class MediaConfig(TypedDict, total=False):
    folder: str
    default_category: str
    count_workers: int


class InvoicesConfig(TypedDict, total=False):
    folder: str


class EmailConfig(TypedDict, total=False):
    store_name: str
    sendgrid_url: str
    timeout_sec: int


class AppConfig(TypedDict, total=False):
    cache: CacheConfig
    products: ProductsConfig
    orders: OrdersConfig
    users: UsersConfig
    media: MediaConfig
    invoices: InvoicesConfig
    email: EmailConfig


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


_settings: Optional[AppConfig] = None


def _require_non_negative(section: dict, key: str, path: str) -> None:
    if key in section:
        value = section[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigValidationError(f"{path}.{key} must be a number >= 0")


def _validate_config(config: dict) -> None:
    """
    Validate configuration values.

    Raises:
        ConfigValidationError: If validation fails
    """
    cache = config.get("cache", {})
    for key in ("shop_page_minutes", "site_config_minutes", "published_page_minutes", "stock_validation_seconds"):
        _require_non_negative(cache, key, "cache")

    products = config.get("products", {})
    if "search_max_results" in products:
        value = products["search_max_results"]
        if not isinstance(value, int) or value < 1:
            raise ConfigValidationError("products.search_max_results must be int >= 1")
    _require_non_negative(products, "search_min_length", "products")

    orders = config.get("orders", {})
    for key in ("page_size", "amount_filter_multiplier"):
        if key in orders:
            value = orders[key]
            if not isinstance(value, int) or value < 1:
                raise ConfigValidationError(f"orders.{key} must be int >= 1")

    users = config.get("users", {})
    if "valid_roles" in users:
        roles = users["valid_roles"]
        if not isinstance(roles, list) or not roles or not all(isinstance(r, str) and r for r in roles):
            raise ConfigValidationError("users.valid_roles must be a non-empty list of strings")
        if "superadmin" not in roles:
            raise ConfigValidationError("users.valid_roles must include superadmin")

    media = config.get("media", {})
    if "folder" in media and (not isinstance(media["folder"], str) or not media["folder"].strip("/")):
        raise ConfigValidationError("media.folder must be a non-empty path")

    email = config.get("email", {})
    if "sendgrid_url" in email and not str(email["sendgrid_url"]).startswith("https://"):
        raise ConfigValidationError("email.sendgrid_url must be an https URL")


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load and validate application configuration from settings.yaml.

    Args:
        config_path: Optional path to configuration file

    Raises:
        FileNotFoundError: If the file does not exist
        yaml.YAMLError: If YAML parsing fails
        ConfigValidationError: If a value is out of range
    """
    if config_path is None:
        config_path = Path(__file__).parent / "settings.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML configuration: {e}")

    if not isinstance(config, dict):
        raise ConfigValidationError("settings.yaml must contain a mapping at the top level")

    _validate_config(config)
    return config  # type: ignore[return-value]


def get_settings() -> AppConfig:
    """Settings from the bundled settings.yaml, loaded once per process."""
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings


def get_cache_ttl_minutes(config: AppConfig, name: str) -> float:
    """TTL in minutes for a named cache (shop_page, site_config, published_page, stock_validation)."""
    cache = config.get("cache", {})
    if name == "stock_validation":
        return cache.get("stock_validation_seconds", 30) / 60
    defaults = {"shop_page": 5, "site_config": 360, "published_page": 5}
    return cache.get(f"{name}_minutes", defaults.get(name, 5))  # type: ignore[misc]


def get_search_max_results(config: AppConfig) -> int:
    return config.get("products", {}).get("search_max_results", 10)


def get_search_min_length(config: AppConfig) -> int:
    return config.get("products", {}).get("search_min_length", 2)


def get_orders_page_size(config: AppConfig) -> int:
    return config.get("orders", {}).get("page_size", 25)


def get_amount_filter_multiplier(config: AppConfig) -> int:
    return config.get("orders", {}).get("amount_filter_multiplier", 3)


def get_users_list_limit(config: AppConfig) -> int:
    return config.get("users", {}).get("list_limit", 1000)


def get_valid_roles(config: AppConfig) -> List[str]:
    return list(config.get("users", {}).get("valid_roles", ["user", "admin", "superadmin"]))


def get_media_folder(config: AppConfig) -> str:
    return config.get("media", {}).get("folder", "media").strip("/")


def get_media_default_category(config: AppConfig) -> str:
    return config.get("media", {}).get("default_category", "uncategorized")


def get_media_count_workers(config: AppConfig) -> int:
    return config.get("media", {}).get("count_workers", 8)


def get_invoices_folder(config: AppConfig) -> str:
    return config.get("invoices", {}).get("folder", "invoices").strip("/")


def get_email_config(config: AppConfig) -> EmailConfig:
    email = config.get("email", {})
    return {
        "store_name": email.get("store_name", "Storefront"),
        "sendgrid_url": email.get("sendgrid_url", "https://api.sendgrid.com/v3/mail/send"),
        "timeout_sec": email.get("timeout_sec", 10),
    }
