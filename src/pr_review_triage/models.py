"""Data models shared by the triage components.

These models represent the normalized data exchanged between the issue
store, the project store and the orchestrator. They carry only what the
status synchronization needs and are discarded at the end of each run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Status(str, Enum):
    """Board status labels the automation moves issues to."""

    REVIEW = "Review"
    IN_PROGRESS = "In Progress"
    TEST = "Test"


@dataclass(frozen=True)
class IssueReference:
    """An issue mentioned in a pull request body that exists in the repository."""

    number: int
    node_id: str  # GraphQL global id, distinct from the number and from any project item id
    url: str
    assignees: frozenset[str] = frozenset()


@dataclass(frozen=True)
class StatusOption:
    """One option of a single-select field."""

    id: str
    name: str


@dataclass(frozen=True)
class PlainField:
    """A project field without options (text, number, date, ...)."""

    id: str
    name: str


@dataclass(frozen=True)
class SingleSelectField:
    """A project field whose value is one of a fixed, ordered set of options."""

    id: str
    name: str
    options: tuple[StatusOption, ...] = ()


ProjectField = PlainField | SingleSelectField


@dataclass(frozen=True)
class ProjectSchema:
    """Identity of a project and of its status field.

    status_field_id is None when the project has no single-select field
    named or containing "Status"; status_options is then empty.
    """

    project_id: str
    status_field_id: str | None = None
    status_options: dict[str, str] = field(default_factory=dict)  # label -> option id, board order


@dataclass(frozen=True)
class IssueContent:
    """Project item content backed by an issue."""

    number: int
    node_id: str | None = None


@dataclass(frozen=True)
class OtherContent:
    """Project item content that is not an issue (draft issue, pull request, ...)."""

    typename: str


@dataclass(frozen=True)
class ProjectItem:
    """A row on a project board.

    content is None when GitHub redacts the item (e.g. no access to its repository).
    """

    item_id: str
    content: IssueContent | OtherContent | None = None

    @property
    def linked_issue_number(self) -> int | None:
        if isinstance(self.content, IssueContent):
            return self.content.number
        return None


@dataclass(frozen=True)
class StatusAssignment:
    """Everything needed to set the status field of one project item."""

    field_id: str
    option_id: str
    project_id: str
    item_id: str


@dataclass(frozen=True)
class RunContext:
    """Ambient GitHub Actions context, captured once per run."""

    owner: str
    repo: str
    actor: str
    event_name: str
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def repo_path(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def action(self) -> str | None:
        return self.payload.get("action")

    @property
    def pull_request(self) -> dict[str, Any]:
        return self.payload.get("pull_request") or {}


@dataclass(frozen=True)
class TriagePlan:
    """Who the linked issues go to and which status they move to."""

    assignees: tuple[str, ...]
    status: Status
    reason: str = ""


@dataclass
class TriageReport:
    """Statistics collected during one run."""

    issues_found: int = 0
    assignee_updates: int = 0
    status_updates: int = 0
    status_skipped: list[int] = field(default_factory=list)
