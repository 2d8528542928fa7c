"""Users document package."""

from .User import User

__all__ = ["User"]
