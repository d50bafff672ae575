"""API route modules."""

from . import domains, health


__all__ = ["domains", "health"]
