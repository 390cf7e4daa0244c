"""Triage orchestrator that reacts to pull request review events.

A run proceeds in three steps:

Step 1: Plan
    Classify the triggering event:
    - ``pull_request`` / ``review_requested``: the linked issues go to the
      requested reviewers and move to "Review" (or "Test" when a requested
      reviewer is one of the configured testers)
    - ``pull_request_review`` / ``submitted`` with a "changes requested"
      verdict: the linked issues go back to the pull request author and move
      to "In Progress"
    - anything else: nothing to do

Step 2: Linked issues
    Resolve every ``#<number>`` mention in the pull request body.

Step 3: Per issue, in mention order
    a. Make the issue's assignees exactly the planned logins
    b. Set the issue's status on the project board

Every step is idempotent, so a re-run with the same payload, or an issue
mentioned twice, ends in the same state. Remote errors other than a missing
issue propagate and end the run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .issue_refs import extract_linked_issues
from .models import Status, TriagePlan, TriageReport
from .status import update_issue_status

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from .config import TriageConfig
    from .models import IssueReference, RunContext
    from .protocols import IssueStore, ProjectStore

logger: logging.Logger = logging.getLogger(__name__)

PULL_REQUEST_EVENT: Final[str] = "pull_request"
PULL_REQUEST_REVIEW_EVENT: Final[str] = "pull_request_review"
CHANGES_REQUESTED: Final[str] = "changes_requested"


def _logins(users: Iterable[dict[str, Any] | None]) -> list[str]:
    return [user["login"] for user in users if user and user.get("login")]


def requested_reviewers(payload: dict[str, Any]) -> list[str]:
    """Requested reviewer logins of a ``review_requested`` payload, in payload order.

    Team review requests carry no login and are ignored.
    """
    pull_request = payload.get("pull_request") or {}
    reviewers = _logins(pull_request.get("requested_reviewers") or [])
    for login in _logins([payload.get("requested_reviewer")]):
        if login not in reviewers:
            reviewers.append(login)
    return reviewers


def plan_triage(context: RunContext, testers: Collection[str] = ()) -> TriagePlan | None:
    """Decide who the linked issues are assigned to and which status they get.

    Returns:
        None if the event requires no change
    """
    if context.event_name == PULL_REQUEST_EVENT and context.action == "review_requested":
        reviewers = requested_reviewers(context.payload)
        logger.info(f"Pull request reviewers: {reviewers}")
        tester_logins = {login.casefold() for login in testers}
        testing = [login for login in reviewers if login.casefold() in tester_logins]
        if testing:
            return TriagePlan(tuple(reviewers), Status.TEST, f"review requested from tester(s) {testing}")
        return TriagePlan(tuple(reviewers), Status.REVIEW, "review requested")

    if context.event_name == PULL_REQUEST_REVIEW_EVENT and context.action == "submitted":
        review = context.payload.get("review") or {}
        verdict = str(review.get("state") or "").lower()
        if verdict != CHANGES_REQUESTED:
            logger.info(f"Review verdict '{verdict}' requires no triage")
            return None
        author = (context.pull_request.get("user") or {}).get("login")
        if not author:
            logger.warning("Pull request author unknown; cannot reassign linked issues")
            return None
        return TriagePlan((author,), Status.IN_PROGRESS, "changes requested")

    logger.info(f"Event '{context.event_name}' with action '{context.action}' requires no triage")
    return None


def sync_assignees(issue_store: IssueStore, issue: IssueReference, assignees: Collection[str]) -> bool:
    """Make the issue's assignees exactly ``assignees``.

    Returns:
        True if any assignee was added or removed
    """
    target = set(assignees)
    to_remove = issue.assignees - target
    to_add = target - issue.assignees

    if to_remove:
        logger.info(f"Unassigning {sorted(to_remove)} from #{issue.number}")
        issue_store.remove_assignees(issue.number, sorted(to_remove))
    if to_add:
        logger.info(f"Assigning {sorted(to_add)} to #{issue.number}")
        issue_store.add_assignees(issue.number, sorted(to_add))
    if not to_remove and not to_add:
        logger.debug(f"Issue #{issue.number} already assigned to {sorted(target)}")
    return bool(to_remove or to_add)


def run_triage(
    config: TriageConfig,
    context: RunContext,
    issue_store: IssueStore,
    project_store: ProjectStore,
) -> TriageReport:
    """Execute one triage run for the triggering event."""
    report = TriageReport()

    plan = plan_triage(context, config.testers)
    if plan is None:
        return report
    logger.info(f"Triage plan ({plan.reason}): assign {list(plan.assignees)}, status '{plan.status.value}'")

    issues = extract_linked_issues(issue_store, context.pull_request.get("body"))
    report.issues_found = len(issues)

    org = config.project_owner or context.owner
    for issue in issues:
        if not plan.assignees:
            logger.warning(f"No individual assignees for #{issue.number}; leaving assignees unchanged")
        elif sync_assignees(issue_store, issue, plan.assignees):
            report.assignee_updates += 1

        if update_issue_status(
            project_store,
            org,
            config.project_number,
            issue.number,
            plan.status,
            max_pages=config.max_pages,
        ):
            report.status_updates += 1
        else:
            report.status_skipped.append(issue.number)

    logger.info(
        f"Triage finished: {report.issues_found} issue(s), {report.assignee_updates} assignee update(s), "
        f"{report.status_updates} status update(s), {len(report.status_skipped)} skipped"
    )
    return report
