"""
Coverage Services Layer

Business logic that orchestrates repository queries, scoring and the
score cache.
"""

from .coverage import CoverageService

__all__ = ["CoverageService"]
