"""
Command-line interface for the pull request review triage tool.
"""

from __future__ import annotations

import argparse
import logging
import sys

from github import GithubException

from . import github_utils as ghu
from .config import build_config, load_run_context
from .exceptions import TriageError
from .orchestrator import run_triage
from .utils import running_in_actions, setup_logging

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=(
            "Reassign the issues linked from a pull request and move them on the project board "
            "when a review is requested or changes are requested."
        )
    )

    _ = parser.add_argument("--token", help="GitHub token (default: INPUT_TOKEN or GITHUB_TOKEN)")
    _ = parser.add_argument(
        "--project-number", help="Number of the organization project (default: INPUT_PROJECTNUMBER)"
    )
    _ = parser.add_argument(
        "--testers",
        help="Comma-separated reviewer logins that route issues to 'Test' instead of 'Review' (default: INPUT_TESTERS)",
    )
    _ = parser.add_argument(
        "--project-owner", help="Organization owning the project (default: INPUT_PROJECTOWNER or repository owner)"
    )
    _ = parser.add_argument("--max-pages", type=int, help="Maximum number of project item pages to read")

    _ = parser.add_argument("--repo", help="Repository path owner/repo (default: GITHUB_REPOSITORY)")
    _ = parser.add_argument("--event-name", help="Triggering event name (default: GITHUB_EVENT_NAME)")
    _ = parser.add_argument("--event-path", help="Path to the event payload JSON (default: GITHUB_EVENT_PATH)")

    _ = parser.add_argument("--log-file", help="Also write debug logs to this file")
    _ = parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=None,
        help="Increase console verbosity (-v info, -vv debug). Defaults to info inside GitHub Actions.",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    in_actions = running_in_actions()
    verbosity: int = args.verbose if args.verbose is not None else (1 if in_actions else 0)
    setup_logging(verbosity=verbosity, log_file=args.log_file, annotate=in_actions)

    try:
        config = build_config(
            token=args.token,
            project_number=args.project_number,
            testers=args.testers,
            project_owner=args.project_owner,
            max_pages=args.max_pages,
        )
        context = load_run_context(repo_path=args.repo, event_name=args.event_name, event_path=args.event_path)

        client = ghu.get_client(config.token)
        report = run_triage(
            config,
            context,
            ghu.GithubIssueStore(client, context.repo_path),
            ghu.GithubProjectStore(client),
        )
    except (TriageError, GithubException):
        logger.exception("Triage failed")
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error during triage")
        sys.exit(1)

    if report.status_skipped:
        logger.warning(f"Status not updated for issue(s): {', '.join(f'#{n}' for n in report.status_skipped)}")
    sys.exit(0)
