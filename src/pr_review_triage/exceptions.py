"""
Custom exception classes for the pull request review triage tool.
"""

from __future__ import annotations


class TriageError(Exception):
    """Base exception for triage errors."""


class ConfigurationError(TriageError):
    """Raised when a required input is missing or malformed."""


class PaginationLimitError(TriageError):
    """Raised when a project keeps reporting further item pages past the page limit."""

