"""Protocols defining the contracts for the issue store and the project store.

The triage flow separates concerns into three components:

1. IssueStore: Reads issues and updates their assignees (GitHub REST API)
2. ProjectStore: Reads a Projects V2 board and updates item fields (GitHub GraphQL API)
3. The orchestrator: Decides who gets assigned and which status applies

This separation allows:
- Testing the extraction, pagination and mutation logic with in-memory stores
- Keeping raw API payload handling at the edges (github_utils.py)
"""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .models import IssueReference, StatusAssignment


class IssueStore(Protocol):
    """Protocol for the repository's issues."""

    def get_issue(self, number: int) -> IssueReference:
        """Fetch an issue by number.

        Raises:
            github.GithubException: If the issue does not exist or cannot be read
        """
        ...

    def add_assignees(self, number: int, logins: Collection[str]) -> None:
        """Add assignees to an issue. Existing assignees are kept."""
        ...

    def remove_assignees(self, number: int, logins: Collection[str]) -> None:
        """Remove assignees from an issue. Logins not assigned are ignored."""
        ...


class ProjectStore(Protocol):
    """Protocol for an organization-level Projects V2 board.

    Methods return the raw ``projectV2`` GraphQL object (or None when the
    project cannot be found) so that parsing of the polymorphic field and
    content unions stays in one place.
    """

    def fetch_project(self, org: str, project_number: int) -> dict[str, Any] | None:
        """Return ``{"id": ..., "fields": {"nodes": [...]}}`` for the project."""
        ...

    def fetch_items_page(
        self,
        org: str,
        project_number: int,
        *,
        first: int,
        after: str | None,
    ) -> dict[str, Any] | None:
        """Return ``{"pageInfo": {...}, "nodes": [...]}`` for one page of items."""
        ...

    def update_item_field_value(self, assignment: StatusAssignment) -> None:
        """Set a single-select field on a project item.

        Raises:
            github.GithubException: If the mutation fails
        """
        ...
