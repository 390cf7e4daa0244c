"""Find the issues a pull request body refers to."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Final

from github import GithubException

if TYPE_CHECKING:
    from .models import IssueReference
    from .protocols import IssueStore

logger: logging.Logger = logging.getLogger(__name__)

ISSUE_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"#\d+")


def find_issue_numbers(text: str | None) -> list[int]:
    """Return the numbers of all ``#<digits>`` tokens in order of appearance.

    Duplicates are kept. ``#abc7`` is not a token; ``#7x`` yields 7.
    """
    if not text:
        return []

    numbers: list[int] = []
    for token in ISSUE_TOKEN_PATTERN.findall(text):
        digits = re.sub(r"\D", "", token)
        if digits:
            numbers.append(int(digits))
    return numbers


def extract_linked_issues(issue_store: IssueStore, text: str | None) -> list[IssueReference]:
    """Resolve every issue mentioned in a pull request body.

    A mention that cannot be fetched (missing issue, no access, transient API
    error) is logged and skipped; the remaining mentions are still resolved.

    Args:
        issue_store: Store used to look up each issue by number
        text: Pull request body, may be None

    Returns:
        Issues in order of first appearance, one entry per mention
    """
    numbers = find_issue_numbers(text)
    if not numbers:
        logger.info("No linked issues found in pull request body")
        return []

    logger.info(f"Found {len(numbers)} issue mention(s) in pull request body: {numbers}")

    issues: list[IssueReference] = []
    for number in numbers:
        logger.debug(f"Fetching issue #{number}")
        try:
            issue = issue_store.get_issue(number)
        except GithubException as e:
            logger.error(f"No valid issue found for #{number}: {e}")  # noqa: TRY400
            continue
        logger.info(f"Found valid issue #{issue.number}")
        issues.append(issue)

    return issues
