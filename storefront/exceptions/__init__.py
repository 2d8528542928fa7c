"""Exceptions package initialization."""

from .CustomError import (
    ProjectError,
    ValidationError,
    PermissionError,
    NotFoundError,
    PreconditionError,
    InsufficientStockError,
    ExternalServiceError,
)

__all__ = [
    "ProjectError",
    "ValidationError",
    "PermissionError",
    "NotFoundError",
    "PreconditionError",
    "InsufficientStockError",
    "ExternalServiceError",
]
