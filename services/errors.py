"""Errors raised by the service layer."""

from __future__ import annotations


class ValidationError(ValueError):
    """A required request field was missing."""
