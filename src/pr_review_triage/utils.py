"""
Utility functions for the pull request review triage tool.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final, override

if TYPE_CHECKING:
    from collections.abc import Mapping

LOG_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(message)s"

_CONSOLE_LEVELS: Final[dict[int, int]] = {0: logging.WARNING, 1: logging.INFO}


class ActionsFormatter(logging.Formatter):
    """Prefix warnings and errors with GitHub Actions workflow commands.

    The runner turns ``::warning::`` and ``::error::`` lines into annotations
    on the workflow run.
    """

    @override
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"::error::{message}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{message}"
        return message


def running_in_actions(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("GITHUB_ACTIONS") == "true"


def setup_logging(*, verbosity: int = 0, log_file: str | None = None, annotate: bool = False) -> None:
    """Configure logging for the triage run.

    Args:
        verbosity: 0 shows warnings on the console, 1 adds info, 2 or more adds debug
        log_file: Optional file receiving all records at DEBUG level
        annotate: Emit warnings and errors as GitHub Actions annotations
    """
    console_handler = logging.StreamHandler()
    console_handler.setLevel(_CONSOLE_LEVELS.get(verbosity, logging.DEBUG))
    console_handler.setFormatter(ActionsFormatter(LOG_FORMAT) if annotate else logging.Formatter(LOG_FORMAT))

    handlers: list[logging.Handler] = [console_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    # PyGithub logs every request at DEBUG
    logging.getLogger("github").setLevel(logging.INFO if verbosity < 3 else logging.DEBUG)  # noqa: PLR2004
