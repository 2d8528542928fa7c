"""Categories document package."""

from .Category import Category

__all__ = ["Category"]
