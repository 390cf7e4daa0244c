from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Final

from github import Auth, Github, UnknownObjectException

from .exceptions import ConfigurationError
from .models import IssueReference

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from github.Issue import Issue
    from github.Repository import Repository

    from .models import StatusAssignment

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VARS: Final[tuple[str, ...]] = ("INPUT_TOKEN", "GITHUB_TOKEN")

PROJECT_FIELDS_PAGE_SIZE: Final[int] = 50

PROJECT_QUERY: Final[str] = """
query getProjectInformation($org: String!, $projectNumber: Int!, $fieldCount: Int!) {
  organization(login: $org) {
    projectV2(number: $projectNumber) {
      id
      fields(first: $fieldCount) {
        nodes {
          ... on ProjectV2Field {
            id
            name
          }
          ... on ProjectV2SingleSelectField {
            id
            name
            options {
              id
              name
            }
          }
        }
      }
    }
  }
}
"""

PROJECT_ITEMS_QUERY: Final[str] = """
query getProjectItems($org: String!, $projectNumber: Int!, $first: Int!, $after: String) {
  organization(login: $org) {
    projectV2(number: $projectNumber) {
      items(first: $first, after: $after) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          id
          content {
            __typename
            ... on Issue {
              id
              number
            }
          }
        }
      }
    }
  }
}
"""

UPDATE_ITEM_FIELD_MUTATION: Final[str] = """
mutation updateItemStatus($input: UpdateProjectV2ItemFieldValueInput!) {
  updateProjectV2ItemFieldValue(input: $input) {
    projectV2Item {
      id
    }
  }
}
"""


def get_token(token: str | None = None, environ: Mapping[str, str] | None = None) -> str:
    """Get GitHub token from the explicit value, the action input, or GITHUB_TOKEN."""
    if token:
        return token

    env = os.environ if environ is None else environ
    for var in _TOKEN_ENV_VARS:
        value = env.get(var)
        if value:
            return value

    msg = f"No GitHub token specified. Pass --token or set one of {', '.join(_TOKEN_ENV_VARS)}."
    raise ConfigurationError(msg)


def get_client(token: str) -> Github:
    """Get a GitHub client using the token."""
    return Github(auth=Auth.Token(token))


def split_repo_path(repo_path: str) -> tuple[str, str]:
    """Split an ``owner/repository`` path, validating both parts."""
    repo_path = repo_path.strip()
    if repo_path.count("/") != 1:
        msg = f"Invalid GitHub repository path '{repo_path}'. Expected format: 'owner/repository'"
        raise ConfigurationError(msg)

    owner, repo_name = repo_path.split("/")
    if not owner or not repo_name:
        msg = f"Invalid GitHub repository path '{repo_path}'. Both owner and repository name must be non-empty"
        raise ConfigurationError(msg)
    return owner, repo_name


def graphql(client: Github, query: str, variables: dict[str, Any]) -> dict[str, Any]:
    """Run a GraphQL query through PyGithub's requester and return its ``data`` object.

    Using the requester keeps authentication, base URL (GitHub Enterprise) and
    retry handling consistent with the REST calls. A response carrying errors is
    raised by the requester itself: a single NOT_FOUND error as
    ``UnknownObjectException``, anything else as ``GithubException``.
    """
    _, response = client.requester.graphql_query(query, variables)
    return response.get("data") or {}


class GithubIssueStore:
    """Issue store backed by the GitHub REST API."""

    def __init__(self, client: Github, repo_path: str) -> None:
        self.repo_path: str = repo_path
        self._repo: Repository = client.get_repo(repo_path, lazy=True)
        # Issues fetched during this run, reused for assignee updates
        self._issues: dict[int, Issue] = {}

    def _get(self, number: int) -> Issue:
        issue = self._issues.get(number)
        if issue is None:
            issue = self._repo.get_issue(number)
            self._issues[number] = issue
        return issue

    def get_issue(self, number: int) -> IssueReference:
        issue = self._get(number)
        return IssueReference(
            number=issue.number,
            node_id=issue.node_id,
            url=issue.html_url,
            assignees=frozenset(user.login for user in issue.assignees),
        )

    def add_assignees(self, number: int, logins: Collection[str]) -> None:
        self._get(number).add_to_assignees(*logins)
        logger.debug(f"Added assignees {sorted(logins)} to #{number}")

    def remove_assignees(self, number: int, logins: Collection[str]) -> None:
        self._get(number).remove_from_assignees(*logins)
        logger.debug(f"Removed assignees {sorted(logins)} from #{number}")


class GithubProjectStore:
    """Project store for organization-level Projects V2 boards, backed by the GraphQL API."""

    def __init__(self, client: Github) -> None:
        self._client: Github = client

    def _project(self, query: str, variables: dict[str, Any]) -> dict[str, Any] | None:
        try:
            data = graphql(self._client, query, variables)
        except UnknownObjectException as e:
            logger.debug(f"Project lookup returned not found: {e}")
            return None

        organization = data.get("organization") or {}
        return organization.get("projectV2")

    def fetch_project(self, org: str, project_number: int) -> dict[str, Any] | None:
        variables = {"org": org, "projectNumber": project_number, "fieldCount": PROJECT_FIELDS_PAGE_SIZE}
        return self._project(PROJECT_QUERY, variables)

    def fetch_items_page(
        self,
        org: str,
        project_number: int,
        *,
        first: int,
        after: str | None,
    ) -> dict[str, Any] | None:
        variables = {"org": org, "projectNumber": project_number, "first": first, "after": after}
        project = self._project(PROJECT_ITEMS_QUERY, variables)
        if project is None:
            return None
        return project.get("items")

    def update_item_field_value(self, assignment: StatusAssignment) -> None:
        variables = {
            "input": {
                "projectId": assignment.project_id,
                "itemId": assignment.item_id,
                "fieldId": assignment.field_id,
                "value": {"singleSelectOptionId": assignment.option_id},
            }
        }
        _ = graphql(self._client, UPDATE_ITEM_FIELD_MUTATION, variables)
