"""Exception hierarchy shared across the capture pipeline and the store."""

from __future__ import annotations


class MindmarkError(Exception):
    """Base error for mindmark."""


class StoreError(MindmarkError):
    """Raised when the persistent snapshot store cannot be read or written."""


class InvalidRequestError(MindmarkError):
    """Raised for a protocol request that is missing required fields."""
