"""
Inputs and run context for the triage automation.

Values come from command-line flags first, then from the environment the
GitHub Actions runner provides (``INPUT_<NAME>`` for action inputs and the
``GITHUB_*`` default variables).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from . import github_utils as ghu
from .exceptions import ConfigurationError
from .models import RunContext
from .project_items import DEFAULT_MAX_PAGES

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

_PROJECT_NUMBER_ENV_VAR: Final[str] = "INPUT_PROJECTNUMBER"
_TESTERS_ENV_VAR: Final[str] = "INPUT_TESTERS"
_PROJECT_OWNER_ENV_VAR: Final[str] = "INPUT_PROJECTOWNER"


@dataclass(frozen=True)
class TriageConfig:
    """Runtime configuration for one triage run."""

    token: str
    project_number: int
    testers: frozenset[str] = frozenset()
    project_owner: str | None = None  # defaults to the repository owner
    max_pages: int = DEFAULT_MAX_PAGES


def parse_testers(value: str | None) -> frozenset[str]:
    """Parse a comma-separated list of logins, dropping blanks.

    Logins are case-folded since GitHub treats them case-insensitively.
    """
    if not value:
        return frozenset()
    return frozenset(login.strip().casefold() for login in value.split(",") if login.strip())


def parse_project_number(value: str | int | None) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        msg = f"No project number specified. Pass --project-number or set {_PROJECT_NUMBER_ENV_VAR}."
        raise ConfigurationError(msg)
    try:
        number = int(value)
    except ValueError as e:
        msg = f"Invalid project number: {value!r}"
        raise ConfigurationError(msg) from e
    if number <= 0:
        msg = f"Invalid project number: {value!r}"
        raise ConfigurationError(msg)
    return number


def build_config(
    *,
    token: str | None = None,
    project_number: str | int | None = None,
    testers: str | None = None,
    project_owner: str | None = None,
    max_pages: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> TriageConfig:
    """Build the configuration from explicit values, falling back to action inputs.

    Raises:
        ConfigurationError: If the token or project number is missing or invalid
    """
    env = os.environ if environ is None else environ

    resolved_max_pages = DEFAULT_MAX_PAGES if max_pages is None else max_pages
    if resolved_max_pages <= 0:
        msg = f"max_pages must be positive, got {resolved_max_pages}"
        raise ConfigurationError(msg)

    if project_number is None:
        project_number = env.get(_PROJECT_NUMBER_ENV_VAR)

    return TriageConfig(
        token=ghu.get_token(token, env),
        project_number=parse_project_number(project_number),
        testers=parse_testers(testers if testers is not None else env.get(_TESTERS_ENV_VAR)),
        project_owner=project_owner or env.get(_PROJECT_OWNER_ENV_VAR) or None,
        max_pages=resolved_max_pages,
    )


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        msg = f"Missing environment variable {name}. Is this running inside GitHub Actions?"
        raise ConfigurationError(msg)
    return value


def load_event_payload(event_path: str | Path) -> dict[str, Any]:
    """Read the webhook payload of the triggering event."""
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        msg = f"Could not read event payload from {event_path}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(payload, dict):
        msg = f"Event payload in {event_path} is not a JSON object"
        raise ConfigurationError(msg)
    return payload


def load_run_context(
    *,
    repo_path: str | None = None,
    event_name: str | None = None,
    event_path: str | None = None,
    actor: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunContext:
    """Capture repository, actor, event name and payload for this run."""
    env = os.environ if environ is None else environ

    owner, repo = ghu.split_repo_path(repo_path or _require(env, "GITHUB_REPOSITORY"))
    payload = load_event_payload(event_path or _require(env, "GITHUB_EVENT_PATH"))

    context = RunContext(
        owner=owner,
        repo=repo,
        actor=actor or env.get("GITHUB_ACTOR", ""),
        event_name=event_name or _require(env, "GITHUB_EVENT_NAME"),
        payload=payload,
    )
    logger.debug(f"Run context: {context.repo_path} event={context.event_name} action={context.action}")
    return context
