"""Root module."""

from .root import BackgroundRoot, ImmediateRoot, IRoot

__all__ = ["BackgroundRoot", "ImmediateRoot", "IRoot"]
