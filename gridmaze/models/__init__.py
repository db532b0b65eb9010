"""Database models package."""

from gridmaze.models.level import Level

__all__ = ["Level"]
