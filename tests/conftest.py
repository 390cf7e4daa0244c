"""
Pytest configuration and fixtures.

This module configures pytest behavior for different test types:
- Integration tests: Skipped unless the real-API environment variables are set,
  and failed on any warnings logged by the code under test
- Unit tests: Use the in-memory issue and project stores defined here
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, override

import pytest
from github import UnknownObjectException

from pr_review_triage.models import IssueReference

if TYPE_CHECKING:
    from collections.abc import Collection, Generator

    from pr_review_triage.models import StatusAssignment

INTEGRATION_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "TRIAGE_TEST_ORG", "TRIAGE_TEST_PROJECT_NUMBER")

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class FakeIssueStore:
    """In-memory issue store recording every call."""

    def __init__(self) -> None:
        self.issues: dict[int, IssueReference] = {}
        self.failures: dict[int, Exception] = {}
        self.calls: list[tuple[str, int, tuple[str, ...]]] = []

    def add_issue(self, number: int, assignees: Collection[str] = ()) -> IssueReference:
        issue = IssueReference(
            number=number,
            node_id=f"I_node{number}",
            url=f"https://github.com/acme/widgets/issues/{number}",
            assignees=frozenset(assignees),
        )
        self.issues[number] = issue
        return issue

    def get_issue(self, number: int) -> IssueReference:
        self.calls.append(("get", number, ()))
        if number in self.failures:
            raise self.failures[number]
        if number not in self.issues:
            raise UnknownObjectException(404, {"message": "Not Found"}, None)
        return self.issues[number]

    def add_assignees(self, number: int, logins: Collection[str]) -> None:
        self.calls.append(("add", number, tuple(logins)))
        issue = self.issues[number]
        self.issues[number] = IssueReference(issue.number, issue.node_id, issue.url, issue.assignees | set(logins))

    def remove_assignees(self, number: int, logins: Collection[str]) -> None:
        self.calls.append(("remove", number, tuple(logins)))
        issue = self.issues[number]
        self.issues[number] = IssueReference(issue.number, issue.node_id, issue.url, issue.assignees - set(logins))

    @property
    def assignee_calls(self) -> list[tuple[str, int, tuple[str, ...]]]:
        return [call for call in self.calls if call[0] != "get"]


def single_select_node(field_id: str, name: str, options: list[str]) -> dict[str, Any]:
    return {
        "id": field_id,
        "name": name,
        "options": [{"id": f"opt-{label.lower().replace(' ', '-')}", "name": label} for label in options],
    }


def issue_item_node(item_id: str, number: int) -> dict[str, Any]:
    return {"id": item_id, "content": {"__typename": "Issue", "id": f"I_node{number}", "number": number}}


def draft_item_node(item_id: str) -> dict[str, Any]:
    return {"id": item_id, "content": {"__typename": "DraftIssue"}}


class FakeProjectStore:
    """In-memory organization project with paginated items."""

    def __init__(self) -> None:
        self.project: dict[str, Any] | None = {"id": "PVT_project", "fields": {"nodes": []}}
        self.pages: list[list[dict[str, Any]]] = [[]]
        self.page_requests: list[str | None] = []
        self.updates: list[StatusAssignment] = []
        self.mutation_error: Exception | None = None
        self.statuses: dict[str, str] = {}

    def set_fields(self, *nodes: dict[str, Any]) -> None:
        assert self.project is not None
        self.project["fields"] = {"nodes": list(nodes)}

    def set_status_options(self, options: list[str]) -> None:
        self.set_fields(
            {"id": "PVTF_title", "name": "Title"},
            single_select_node("PVTSSF_status", "Status", options),
        )

    def set_items(self, nodes: list[dict[str, Any]], page_size: int = 100) -> None:
        self.pages = [nodes[i : i + page_size] for i in range(0, len(nodes), page_size)] or [[]]

    def fetch_project(self, org: str, project_number: int) -> dict[str, Any] | None:
        return self.project

    def fetch_items_page(
        self,
        org: str,
        project_number: int,
        *,
        first: int,
        after: str | None,
    ) -> dict[str, Any] | None:
        self.page_requests.append(after)
        if self.project is None:
            return None
        index = 0 if after is None else int(after.removeprefix("cursor-"))
        has_next = index + 1 < len(self.pages)
        return {
            "pageInfo": {"hasNextPage": has_next, "endCursor": f"cursor-{index + 1}" if has_next else None},
            "nodes": self.pages[index],
        }

    def update_item_field_value(self, assignment: StatusAssignment) -> None:
        if self.mutation_error is not None:
            raise self.mutation_error
        self.updates.append(assignment)
        self.statuses[assignment.item_id] = assignment.option_id


@pytest.fixture
def issue_store() -> FakeIssueStore:
    return FakeIssueStore()


@pytest.fixture
def project_store() -> FakeProjectStore:
    store = FakeProjectStore()
    store.set_status_options(["Backlog", "In Progress", "In Review", "Test", "Done"])
    return store


class IntegrationTestWarningHandler(logging.Handler):
    """Custom logging handler to capture warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        """Capture WARNING and above level logs."""
        if self.test_nodeid not in _integration_test_warnings:
            _integration_test_warnings[self.test_nodeid] = []
        _integration_test_warnings[self.test_nodeid].append(record)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests with a clear message when the real-API settings are missing.

    Done at collection time so module-scoped API fixtures are never created.
    """
    missing = [name for name in INTEGRATION_ENV_VARS if not os.environ.get(name)]
    if not missing:
        return

    skip = pytest.mark.skip(reason=f"Integration tests require environment variables: {', '.join(missing)}")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """
    Automatically fail integration tests if any WARNING level logs are emitted from the code under test.

    A warning from the triage code means a project, field, option or item could
    not be resolved, which a correctly prepared test project never causes.
    """
    is_integration_test = request.node.get_closest_marker("integration") is not None

    if not is_integration_test:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    # Add handler to root logger to capture all warnings
    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """
    Hook to check for warnings after test execution and mark test as failed if warnings were detected.

    This runs after the test completes but before pytest generates the final report.
    """
    outcome = yield
    report = outcome.get_result()

    # Only check during the test call phase (not setup or teardown)
    if call.when == "call" and report.outcome == "passed":
        test_nodeid = item.nodeid
        warning_records = _integration_test_warnings.get(test_nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]

            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(test_nodeid, None)
