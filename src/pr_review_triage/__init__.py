"""
Pull Request Review Triage

Reassigns the issues a pull request links to and moves them between
"In Progress", "Review" and "Test" on an organization project board as
reviews are requested and submitted.
"""

from __future__ import annotations

from .cli import main
from .exceptions import ConfigurationError, PaginationLimitError, TriageError
from .models import IssueReference, ProjectItem, ProjectSchema, RunContext, Status, StatusAssignment
from .orchestrator import run_triage
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "IssueReference",
    "PaginationLimitError",
    "ProjectItem",
    "ProjectSchema",
    "RunContext",
    "Status",
    "StatusAssignment",
    "TriageError",
    "main",
    "run_triage",
    "setup_logging",
]
