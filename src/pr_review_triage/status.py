"""Set an issue's status on a project board."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import StatusAssignment
from .project_items import DEFAULT_MAX_PAGES, fetch_project_items, find_item_for_issue
from .project_schema import find_status_option, resolve_project_schema

if TYPE_CHECKING:
    from .models import ProjectItem, ProjectSchema, Status
    from .protocols import ProjectStore

logger: logging.Logger = logging.getLogger(__name__)


def build_status_assignment(
    schema: ProjectSchema | None,
    label: str,
    item: ProjectItem | None,
) -> StatusAssignment | None:
    """Combine project, field, option and item ids into one assignment.

    Returns:
        None if any of the four ids is unresolved. The missing pieces are
        logged as a warning; this is not an error for the run.
    """
    project_id = schema.project_id if schema else None
    field_id = schema.status_field_id if schema else None
    option_id = find_status_option(schema, label) if schema else None
    item_id = item.item_id if item else None

    if project_id and field_id and option_id and item_id:
        return StatusAssignment(field_id=field_id, option_id=option_id, project_id=project_id, item_id=item_id)

    missing = [
        name
        for name, value in (
            ("project", project_id),
            ("status field", field_id),
            (f"status option '{label}'", option_id),
            ("project item", item_id),
        )
        if not value
    ]
    logger.warning(f"Cannot set status to '{label}': unresolved {', '.join(missing)}")
    return None


def apply_status_assignment(project_store: ProjectStore, assignment: StatusAssignment) -> None:
    """Apply the assignment as a single field value update.

    Setting the same option twice leaves the board unchanged. Errors from the
    API propagate; nothing is rolled back.
    """
    logger.info(
        f"Setting field {assignment.field_id} in item {assignment.item_id} to value {assignment.option_id}"
    )
    project_store.update_item_field_value(assignment)
    logger.info("Successfully updated issue status")


def update_issue_status(
    project_store: ProjectStore,
    org: str,
    project_number: int,
    issue_number: int,
    status: Status,
    *,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> bool:
    """Move an issue to ``status`` on the project board.

    Returns:
        True if the status was set, False if it was skipped because the
        project, status field, option or item could not be resolved.
    """
    label = status.value
    logger.info(f"Updating status for issue #{issue_number} to {label}...")

    schema = resolve_project_schema(project_store, org, project_number)
    items = fetch_project_items(project_store, org, project_number, max_pages=max_pages) if schema else []
    item = find_item_for_issue(items, issue_number)
    if schema and item is None:
        logger.warning(f"Issue #{issue_number} is not on project {project_number}")
    elif item is not None:
        logger.info(f"Found project item with ID {item.item_id} for issue #{issue_number}")

    assignment = build_status_assignment(schema, label, item)
    if assignment is None:
        return False

    apply_status_assignment(project_store, assignment)
    return True
