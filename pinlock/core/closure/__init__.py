"""Dependency closure calculation."""

from pinlock.core.closure.calculator import ClosureCalculator, is_standard_library

__all__ = ["ClosureCalculator", "is_standard_library"]
