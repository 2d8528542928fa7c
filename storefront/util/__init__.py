"""Utility functions package.

Auth and CORS helpers depend on firebase modules and are imported from their
own modules (storefront.util.db_auth_wrapper, storefront.util.cors_response).
"""

from .logger import get_logger
from .json_response import ok, fail, is_ok, get_data, get_error, jsonable, service_result

__all__ = [
    "get_logger",
    "ok",
    "fail",
    "is_ok",
    "get_data",
    "get_error",
    "jsonable",
    "service_result",
]
