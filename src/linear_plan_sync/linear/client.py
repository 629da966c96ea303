"""Linear GraphQL API client.

Requests are built by one constructor per operation (`GraphQLRequest`) so that
values always travel as GraphQL variables and are never spliced into query
text. The client keeps Linear calls out of the sync logic and makes tests easy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

logger = logging.getLogger(__name__)

LINEAR_API_URL = "https://api.linear.app/graphql"

_ISSUES_BY_TITLE_QUERY = (
    "query IssuesByTitle($filter: IssueFilter) "
    "{ issues(filter: $filter) { nodes { id title identifier } } }"
)

_ISSUE_CREATE_MUTATION = (
    "mutation CreateIssue($title: String!, $teamId: String!) "
    "{ issueCreate(input: { title: $title, teamId: $teamId }) "
    "{ success issue { id identifier title } } }"
)

_COMMENT_CREATE_MUTATION = (
    "mutation CreateComment($issueId: String!, $body: String!) "
    "{ commentCreate(input: { issueId: $issueId, body: $body }) "
    "{ success comment { id url } } }"
)


class LinearAPIError(RuntimeError):
    """Raised when a Linear API call fails or returns an unexpected shape."""


@dataclass(frozen=True, slots=True)
class GraphQLRequest:
    """A GraphQL document with its variables."""

    query: str
    variables: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def issues_by_title(cls, fragment: str) -> GraphQLRequest:
        return cls(
            query=_ISSUES_BY_TITLE_QUERY,
            variables={"filter": {"title": {"contains": fragment}}},
        )

    @classmethod
    def issue_create(cls, *, title: str, team_id: str) -> GraphQLRequest:
        return cls(
            query=_ISSUE_CREATE_MUTATION,
            variables={"title": title, "teamId": team_id},
        )

    @classmethod
    def comment_create(cls, *, issue_id: str, body: str) -> GraphQLRequest:
        return cls(
            query=_COMMENT_CREATE_MUTATION,
            variables={"issueId": issue_id, "body": body},
        )

    def to_payload(self) -> dict[str, Any]:
        return {"query": self.query, "variables": self.variables}


@dataclass(frozen=True, slots=True)
class MirrorIssue:
    """Minimal issue metadata returned from Linear."""

    id: str
    identifier: str
    title: str


@dataclass(frozen=True, slots=True)
class CreatedComment:
    id: str
    url: str


def _first_error_message(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if not isinstance(errors, list) or not errors:
        return None
    first = errors[0]
    if isinstance(first, dict):
        message = first.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return "Unknown error"


def _get_path(payload: object, *keys: str) -> object:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _parse_issue(node: object) -> MirrorIssue | None:
    if not isinstance(node, dict):
        return None
    issue_id = node.get("id")
    if not isinstance(issue_id, str) or not issue_id.strip():
        return None
    identifier = node.get("identifier")
    title = node.get("title")
    return MirrorIssue(
        id=issue_id,
        identifier=identifier if isinstance(identifier, str) else "",
        title=title if isinstance(title, str) else "",
    )


class LinearClient:
    """Small wrapper around `requests` for the three calls plan syncing needs."""

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = LINEAR_API_URL,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Linear API key is required")

        self._api_url = api_url
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        # Personal API keys are sent as-is, without a "Bearer" prefix.
        self._session.headers.update(
            {
                "Authorization": api_key,
                "Content-Type": "application/json",
                "User-Agent": "linear-plan-sync",
            }
        )

    def __enter__(self) -> LinearClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def execute(self, request: GraphQLRequest) -> dict[str, Any]:
        """Send a single request and return the decoded response body.

        Raises:
            LinearAPIError: on transport errors, timeouts, non-2xx responses,
                undecodable bodies and GraphQL errors.
        """

        try:
            resp = self._session.post(
                self._api_url, json=request.to_payload(), timeout=self._timeout
            )
        except requests.Timeout as e:
            raise LinearAPIError(f"Request timed out after {self._timeout:g}s") from e
        except requests.RequestException as e:
            raise LinearAPIError(f"Request failed: {e}") from e

        try:
            payload: Any = resp.json()
        except ValueError:
            payload = None

        # Linear reports GraphQL errors with a 400 status, so look at the body first.
        message = _first_error_message(payload)
        if message is not None:
            raise LinearAPIError(message)

        if not resp.ok:
            raise LinearAPIError(f"HTTP {resp.status_code} from Linear API")

        if not isinstance(payload, dict):
            raise LinearAPIError("Malformed response from Linear API")

        return payload

    def find_issue_by_title(self, fragment: str) -> MirrorIssue | None:
        """Return the first issue whose title contains `fragment`, if any."""

        if not fragment.strip():
            raise ValueError("fragment must be non-empty")

        payload = self.execute(GraphQLRequest.issues_by_title(fragment))
        nodes = _get_path(payload, "data", "issues", "nodes")
        if not isinstance(nodes, list) or not nodes:
            return None
        return _parse_issue(nodes[0])

    def create_issue(self, *, title: str, team_id: str) -> MirrorIssue:
        if not title.strip():
            raise ValueError("Issue title is required")
        if not team_id.strip():
            raise ValueError("team_id is required")

        payload = self.execute(GraphQLRequest.issue_create(title=title, team_id=team_id))
        issue = _parse_issue(_get_path(payload, "data", "issueCreate", "issue"))
        if issue is None:
            raise LinearAPIError("Unknown error")

        logger.info(
            "Created Linear issue", extra={"issue_id": issue.id, "identifier": issue.identifier}
        )
        return issue

    def create_comment(self, *, issue_id: str, body: str) -> CreatedComment:
        if not issue_id.strip():
            raise ValueError("issue_id is required")

        payload = self.execute(GraphQLRequest.comment_create(issue_id=issue_id, body=body))
        result = _get_path(payload, "data", "commentCreate")
        if _get_path(result, "success") is not True:
            raise LinearAPIError(f"commentCreate did not succeed: {result!r}")

        comment_id = _get_path(result, "comment", "id")
        url = _get_path(result, "comment", "url")
        if not isinstance(url, str) or not url.strip():
            raise LinearAPIError("Invalid commentCreate response: missing comment url")

        return CreatedComment(id=comment_id if isinstance(comment_id, str) else "", url=url)

    def close(self) -> None:
        self._session.close()
