"""Products document package."""

from .Product import Product

__all__ = ["Product"]
