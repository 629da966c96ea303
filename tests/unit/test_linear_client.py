"""Unit tests for the Linear GraphQL client (no network)."""

from __future__ import annotations

import pytest
import requests
from conftest import FakeResponse, FakeSession

from linear_plan_sync.linear.client import (
    LINEAR_API_URL,
    CreatedComment,
    GraphQLRequest,
    LinearAPIError,
    LinearClient,
    MirrorIssue,
)


def _client(session: FakeSession, **kwargs: object) -> LinearClient:
    return LinearClient(api_key="lin_api_test", session=session, **kwargs)  # type: ignore[arg-type]


def test_request_builders_pass_values_as_variables() -> None:
    tricky = 'ENG-1" } mutation { x'

    lookup = GraphQLRequest.issues_by_title(tricky)
    create = GraphQLRequest.issue_create(title=tricky, team_id="team-1")
    comment = GraphQLRequest.comment_create(issue_id="issue-1", body=tricky)

    assert lookup.variables == {"filter": {"title": {"contains": tricky}}}
    assert create.variables == {"title": tricky, "teamId": "team-1"}
    assert comment.variables == {"issueId": "issue-1", "body": tricky}
    for request in (lookup, create, comment):
        assert tricky not in request.query
        assert request.to_payload() == {"query": request.query, "variables": request.variables}


def test_session_sends_raw_api_key() -> None:
    session = FakeSession()
    _client(session)

    assert session.headers["Authorization"] == "lin_api_test"
    assert session.headers["Content-Type"] == "application/json"


def test_api_key_is_required() -> None:
    with pytest.raises(ValueError):
        LinearClient(api_key="", session=FakeSession())  # type: ignore[arg-type]


def test_find_issue_by_title_returns_first_node() -> None:
    session = FakeSession(
        FakeResponse(
            {
                "data": {
                    "issues": {
                        "nodes": [
                            {"id": "uuid-1", "identifier": "DOC-1", "title": "ENG-5: Plan"},
                            {"id": "uuid-2", "identifier": "DOC-2", "title": "ENG-5 again"},
                        ]
                    }
                }
            }
        )
    )

    issue = _client(session, timeout_seconds=7.5).find_issue_by_title("ENG-5")

    assert issue == MirrorIssue(id="uuid-1", identifier="DOC-1", title="ENG-5: Plan")
    assert session.calls[0]["url"] == LINEAR_API_URL
    assert session.calls[0]["timeout"] == 7.5
    assert session.calls[0]["json"]["variables"] == {"filter": {"title": {"contains": "ENG-5"}}}


def test_find_issue_by_title_without_nodes_returns_none() -> None:
    session = FakeSession(FakeResponse({"data": {"issues": {"nodes": []}}}))

    assert _client(session).find_issue_by_title("ENG-5") is None


def test_create_issue_returns_new_issue() -> None:
    session = FakeSession(
        FakeResponse(
            {
                "data": {
                    "issueCreate": {
                        "success": True,
                        "issue": {"id": "uuid-9", "identifier": "DOC-9", "title": "ENG-5: Plan"},
                    }
                }
            }
        )
    )

    issue = _client(session).create_issue(title="ENG-5: Plan", team_id="team-1")

    assert issue.id == "uuid-9"
    assert issue.identifier == "DOC-9"
    assert session.calls[0]["json"]["variables"] == {"title": "ENG-5: Plan", "teamId": "team-1"}


def test_create_issue_without_id_raises() -> None:
    session = FakeSession(FakeResponse({"data": {"issueCreate": {"success": False, "issue": None}}}))

    with pytest.raises(LinearAPIError, match="Unknown error"):
        _client(session).create_issue(title="ENG-5: Plan", team_id="team-1")


def test_graphql_errors_surface_remote_message() -> None:
    session = FakeSession(
        FakeResponse(
            {"errors": [{"message": "Argument Validation Error"}], "data": None},
            status_code=400,
        )
    )

    with pytest.raises(LinearAPIError, match="Argument Validation Error"):
        _client(session).create_issue(title="ENG-5: Plan", team_id="bad-team")


def test_create_comment_returns_url() -> None:
    session = FakeSession(
        FakeResponse(
            {
                "data": {
                    "commentCreate": {
                        "success": True,
                        "comment": {"id": "c-1", "url": "https://linear.app/acme/issue/DOC-9#c-1"},
                    }
                }
            }
        )
    )

    comment = _client(session).create_comment(issue_id="uuid-9", body="## Plan")

    assert comment == CreatedComment(id="c-1", url="https://linear.app/acme/issue/DOC-9#c-1")
    assert session.calls[0]["json"]["variables"] == {"issueId": "uuid-9", "body": "## Plan"}


def test_create_comment_unsuccessful_raises() -> None:
    session = FakeSession(FakeResponse({"data": {"commentCreate": {"success": False}}}))

    with pytest.raises(LinearAPIError, match="did not succeed"):
        _client(session).create_comment(issue_id="uuid-9", body="## Plan")


def test_non_json_error_response_raises_http_status() -> None:
    session = FakeSession(FakeResponse(ValueError("no json"), status_code=502))

    with pytest.raises(LinearAPIError, match="HTTP 502"):
        _client(session).create_comment(issue_id="uuid-9", body="## Plan")


def test_malformed_success_body_raises() -> None:
    session = FakeSession(FakeResponse(["unexpected"]))

    with pytest.raises(LinearAPIError, match="Malformed"):
        _client(session).create_comment(issue_id="uuid-9", body="## Plan")


def test_timeout_is_reported_as_api_error() -> None:
    session = FakeSession(requests.Timeout("read timed out"))

    with pytest.raises(LinearAPIError, match="timed out after 10s"):
        _client(session).create_comment(issue_id="uuid-9", body="## Plan")


def test_transport_error_is_reported_as_api_error() -> None:
    session = FakeSession(requests.ConnectionError("connection refused"))

    with pytest.raises(LinearAPIError, match="Request failed"):
        _client(session).find_issue_by_title("ENG-5")


def test_context_manager_closes_session() -> None:
    session = FakeSession()

    with _client(session):
        pass

    assert session.closed is True
