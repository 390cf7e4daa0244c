"""Page through a project's items and locate the item for an issue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from .exceptions import PaginationLimitError
from .models import IssueContent, OtherContent, ProjectItem

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .protocols import ProjectStore

logger: logging.Logger = logging.getLogger(__name__)

ITEMS_PAGE_SIZE: Final[int] = 100
# 20,000 items; a board reporting more pages than this is treated as misbehaving
DEFAULT_MAX_PAGES: Final[int] = 200


def parse_project_item(node: dict[str, Any]) -> ProjectItem:
    """Turn an ``items.nodes`` entry into a ProjectItem.

    Only ``Issue`` content carries a number; drafts, pull requests and
    redacted content are kept as non-issue items.
    """
    content = node.get("content")
    parsed: IssueContent | OtherContent | None
    if content is None:
        parsed = None
    elif content.get("__typename") == "Issue" and content.get("number") is not None:
        parsed = IssueContent(number=int(content["number"]), node_id=content.get("id"))
    else:
        parsed = OtherContent(typename=content.get("__typename") or "Unknown")
    return ProjectItem(item_id=node["id"], content=parsed)


def iter_item_pages(
    project_store: ProjectStore,
    org: str,
    project_number: int,
    *,
    page_size: int = ITEMS_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> Iterator[list[ProjectItem]]:
    """Yield the project's items one page at a time.

    Pages are requested lazily, following ``endCursor`` until ``hasNextPage``
    is false. Each call starts again from the first page.

    Raises:
        PaginationLimitError: If the project still reports more pages after max_pages
    """
    cursor: str | None = None
    for page_number in range(1, max_pages + 1):
        page = project_store.fetch_items_page(org, project_number, first=page_size, after=cursor)
        if page is None:
            logger.warning(f"Project {project_number} not found for organization {org}")
            return

        items = [parse_project_item(node) for node in page.get("nodes") or [] if node]
        logger.debug(f"Fetched page {page_number} with {len(items)} items")
        yield items

        page_info = page.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            return
        cursor = page_info.get("endCursor")

    msg = (
        f"Project {project_number} still reports more items after {max_pages} pages "
        f"of {page_size}; refusing to continue"
    )
    raise PaginationLimitError(msg)


def fetch_project_items(
    project_store: ProjectStore,
    org: str,
    project_number: int,
    *,
    page_size: int = ITEMS_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[ProjectItem]:
    """Return every item of the project, resolving pagination."""
    logger.info(f"Fetching items in project {project_number}...")
    items: list[ProjectItem] = []
    for page in iter_item_pages(project_store, org, project_number, page_size=page_size, max_pages=max_pages):
        items.extend(page)
    logger.info(f"Fetched {len(items)} total items")
    return items


def find_item_for_issue(items: Iterable[ProjectItem], issue_number: int) -> ProjectItem | None:
    """Return the first item whose content is the issue with this number."""
    for item in items:
        if item.linked_issue_number == issue_number:
            return item
    return None
