"""Presentation helpers for status output."""

from pinlock.core.presentation.status import StatusStyle

__all__ = ["StatusStyle"]
