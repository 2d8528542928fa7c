"""Media document package."""

from .MediaItem import MediaItem, MediaCollection

__all__ = ["MediaItem", "MediaCollection"]
