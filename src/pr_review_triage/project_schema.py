"""Resolve a project's identity and its status field."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .models import PlainField, ProjectSchema, SingleSelectField, StatusOption

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import ProjectField
    from .protocols import ProjectStore

logger: logging.Logger = logging.getLogger(__name__)

STATUS_FIELD_NAME: Final[str] = "Status"


def parse_project_field(node: dict[str, Any] | None) -> ProjectField | None:
    """Turn a ``fields.nodes`` entry into a field variant.

    A node carrying an ``options`` list is a single-select field; a node with
    only id and name is a plain field. Field types matched by neither GraphQL
    fragment come back as ``{}`` and are dropped.
    """
    if not node or "id" not in node or "name" not in node:
        return None

    options = node.get("options")
    if isinstance(options, list):
        return SingleSelectField(
            id=node["id"],
            name=node["name"],
            options=tuple(StatusOption(id=option["id"], name=option["name"]) for option in options),
        )
    return PlainField(id=node["id"], name=node["name"])


def find_status_field(fields: Iterable[ProjectField], name: str = STATUS_FIELD_NAME) -> SingleSelectField | None:
    """Find the single-select field called ``name``, else the first one whose name contains it."""
    candidates = [f for f in fields if isinstance(f, SingleSelectField)]

    for candidate in candidates:
        if candidate.name == name:
            return candidate
    for candidate in candidates:
        if name in candidate.name:
            return candidate
    return None


def resolve_project_schema(project_store: ProjectStore, org: str, project_number: int) -> ProjectSchema | None:
    """Fetch the project's id and the options of its status field.

    Returns:
        None if the project cannot be found. If the project has no status
        field the schema is returned without a field id or options.
    """
    logger.info(f"Fetching project information for project {project_number}...")
    project = project_store.fetch_project(org, project_number)
    if not project or not project.get("id"):
        logger.warning(f"Project {project_number} not found for organization {org}")
        return None

    nodes = (project.get("fields") or {}).get("nodes") or []
    fields = [f for f in (parse_project_field(node) for node in nodes) if f is not None]

    status_field = find_status_field(fields)
    if status_field is None:
        logger.warning(f"Project {project_number} has no single-select field named '{STATUS_FIELD_NAME}'")
        return ProjectSchema(project_id=project["id"])

    logger.info(f"Found field ID {status_field.id} for status field '{status_field.name}'")
    options: dict[str, str] = {}
    for option in status_field.options:
        # setdefault keeps the first option when labels repeat
        options.setdefault(option.name, option.id)

    return ProjectSchema(project_id=project["id"], status_field_id=status_field.id, status_options=options)


def find_status_option(schema: ProjectSchema, label: str) -> str | None:
    """Return the id of the first status option whose name contains ``label``.

    Matching is substring-based and ordered by the board's option order, so
    "Review" selects "In Review". When several options contain the label
    (e.g. "Needs Review" and "In Review") the one listed first on the board wins.
    """
    for name, option_id in schema.status_options.items():
        if label in name:
            logger.debug(f"Status '{label}' matched option '{name}'")
            return option_id
    return None
