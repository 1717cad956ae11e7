from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests

from .logging import get_logger

DEFAULT_GRAPHQL_URL = "https://api.linear.app/graphql"
USER_AGENT = "linear-cli/0.2.0"
HTTP_ERROR_STATUS = 400
AUTH_ERROR_STATUSES = (401, 403)

# Selections reused by several queries.
ISSUE_REF_FIELDS = "id identifier title url team { id key name }"
ISSUE_LIST_FIELDS = "id identifier title state { name } assignee { name email }"
ISSUE_MUTATION_FIELDS = (
    "id identifier title description url priority estimate dueDate createdAt updatedAt"
)
ISSUE_DETAIL_FIELDS = """
  id identifier title description priority estimate dueDate createdAt updatedAt
  state { name }
  assignee { name email }
  team { name key }
  parent { identifier title }
  project { id name }
  labels { nodes { name } }
  comments { nodes { body createdAt user { name } } }
"""


class LinearAPIError(RuntimeError):
    """Raised when the Linear GraphQL API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
        auth_failed: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text
        self.auth_failed = auth_failed


def _error_messages(errors: Any) -> tuple[str, bool]:
    messages: list[str] = []
    auth = False
    if isinstance(errors, list):
        for entry in errors:
            if not isinstance(entry, dict):
                continue
            messages.append(str(entry.get("message") or "unknown error"))
            ext = entry.get("extensions")
            if isinstance(ext, dict) and ext.get("code") == "AUTHENTICATION_ERROR":
                auth = True
    return "; ".join(messages) or "unknown error", auth


@dataclass
class LinearClient:
    """Lightweight GraphQL client for the Linear API.

    One HTTP round trip per call; no retries and no pagination beyond ``first``.
    """

    api_key: str
    api_url: str = DEFAULT_GRAPHQL_URL
    timeout: float = 30.0
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:  # pragma: no cover - simple wiring
        self._session = self.session or requests.Session()
        # Personal API keys are sent as-is, without a Bearer prefix.
        self._session.headers.setdefault("Authorization", self.api_key)
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- transport ----------------------------------------------------
    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a raw query and return its ``data`` object."""
        payload = {"query": query, "variables": variables or {}}
        get_logger().debug("graphql request", operation=_operation_name(query))
        response = self._session.request(
            "POST",
            self.api_url,
            json=payload,
            headers=self._session.headers,
            timeout=self.timeout,
        )
        body: Any = None
        if response.text:
            try:
                body = response.json()
            except ValueError:
                body = None
        errors = body.get("errors") if isinstance(body, dict) else None

        if response.status_code >= HTTP_ERROR_STATUS or errors:
            detail, auth = _error_messages(errors)
            if not errors:
                detail = f"Linear API request failed with {response.status_code}"
            auth = auth or response.status_code in AUTH_ERROR_STATUSES
            if auth:
                detail = f"Invalid API key: {detail}"
            raise LinearAPIError(
                detail,
                status=response.status_code,
                response_text=response.text,
                auth_failed=auth,
            )
        if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
            raise LinearAPIError(
                "Linear API returned an unexpected response",
                status=response.status_code,
                response_text=response.text,
            )
        return body["data"]

    def _nodes(self, query: str, key: str, variables: dict[str, Any]) -> list[dict[str, Any]]:
        data = self.graphql(query, variables)
        conn = data.get(key) or {}
        nodes = conn.get("nodes") if isinstance(conn, dict) else None
        return [n for n in nodes or [] if isinstance(n, dict)]

    # ---- reads --------------------------------------------------------
    def viewer(self) -> dict[str, Any]:
        data = self.graphql("query viewer { viewer { id name email } }")
        return data.get("viewer") or {}

    def users(self, *, first: int = 50) -> list[dict[str, Any]]:
        return self._nodes(
            "query users($first: Int) { users(first: $first) "
            "{ nodes { id name displayName email active } } }",
            "users",
            {"first": first},
        )

    def teams(self, *, first: int = 50) -> list[dict[str, Any]]:
        return self._nodes(
            "query teams($first: Int) { teams(first: $first) { nodes { id name key } } }",
            "teams",
            {"first": first},
        )

    def projects(self, *, first: int = 50) -> list[dict[str, Any]]:
        return self._nodes(
            "query projects($first: Int) { projects(first: $first) "
            "{ nodes { id name state } } }",
            "projects",
            {"first": first},
        )

    def issues(
        self,
        *,
        first: int = 50,
        issue_filter: dict[str, Any] | None = None,
        order_by: str = "updatedAt",
        fields: str = ISSUE_LIST_FIELDS,
    ) -> list[dict[str, Any]]:
        variables: dict[str, Any] = {"first": first, "orderBy": order_by}
        if issue_filter:
            variables["filter"] = issue_filter
        return self._nodes(
            "query listIssues($first: Int!, $filter: IssueFilter, "
            "$orderBy: PaginationOrderBy!) { issues(first: $first, filter: $filter, "
            f"orderBy: $orderBy) {{ nodes {{ {fields} }} }} }}",
            "issues",
            variables,
        )

    def issue(self, issue_id: str, *, fields: str = ISSUE_DETAIL_FIELDS) -> dict[str, Any] | None:
        data = self.graphql(
            f"query getIssueById($id: String!) {{ issue(id: $id) {{ {fields} }} }}",
            {"id": issue_id},
        )
        issue = data.get("issue")
        return issue if isinstance(issue, dict) else None

    def find_issue(
        self, team_key: str, number: int, *, fields: str = ISSUE_DETAIL_FIELDS
    ) -> dict[str, Any] | None:
        nodes = self._nodes(
            "query getIssueByIdentifier($teamKey: String!, $number: Float!) { "
            "issues(first: 1, filter: { team: { key: { eqIgnoreCase: $teamKey } }, "
            f"number: {{ eq: $number }} }}) {{ nodes {{ {fields} }} }} }}",
            "issues",
            {"teamKey": team_key, "number": number},
        )
        return nodes[0] if nodes else None

    def team_states(self, team_id: str) -> list[dict[str, Any]]:
        data = self.graphql(
            "query teamStates($teamId: String!) { team(id: $teamId) "
            "{ states { nodes { id name type } } } }",
            {"teamId": team_id},
        )
        return _team_connection(data, "states")

    def team_labels(self, team_id: str) -> list[dict[str, Any]]:
        data = self.graphql(
            "query getTeamLabels($teamId: String!) { team(id: $teamId) "
            "{ labels { nodes { id name } } } }",
            {"teamId": team_id},
        )
        return _team_connection(data, "labels")

    # ---- mutations ----------------------------------------------------
    def create_issue(self, issue_input: dict[str, Any]) -> dict[str, Any]:
        data = self.graphql(
            "mutation issueCreate($input: IssueCreateInput!) { issueCreate(input: $input) "
            f"{{ success issue {{ {ISSUE_MUTATION_FIELDS} }} }} }}",
            {"input": issue_input},
        )
        return data.get("issueCreate") or {}

    def update_issue(self, issue_id: str, issue_input: dict[str, Any]) -> dict[str, Any]:
        data = self.graphql(
            "mutation issueUpdate($id: String!, $input: IssueUpdateInput!) { "
            "issueUpdate(id: $id, input: $input) "
            f"{{ success issue {{ {ISSUE_MUTATION_FIELDS} }} }} }}",
            {"id": issue_id, "input": issue_input},
        )
        return data.get("issueUpdate") or {}

    def delete_issue(self, issue_id: str) -> dict[str, Any]:
        """Move an issue to the trash (recoverable; never a permanent delete)."""
        data = self.graphql(
            "mutation issueDelete($id: String!) { issueDelete(id: $id) { success } }",
            {"id": issue_id},
        )
        return data.get("issueDelete") or {}

    def create_comment(self, issue_id: str, body: str) -> dict[str, Any]:
        data = self.graphql(
            "mutation commentCreate($input: CommentCreateInput!) { commentCreate(input: $input) "
            "{ success comment { id body url createdAt user { id name } } } }",
            {"input": {"issueId": issue_id, "body": body}},
        )
        return data.get("commentCreate") or {}


def _team_connection(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    team = data.get("team")
    if not isinstance(team, dict):
        raise LinearAPIError("Team not found")
    conn = team.get(key) or {}
    return [n for n in conn.get("nodes") or [] if isinstance(n, dict)]


def _operation_name(query: str) -> str:
    head = query.strip().split("{", 1)[0].split("(", 1)[0].split()
    return head[1] if len(head) > 1 else (head[0] if head else "anonymous")


__all__ = [
    "ISSUE_DETAIL_FIELDS",
    "ISSUE_LIST_FIELDS",
    "ISSUE_REF_FIELDS",
    "LinearAPIError",
    "LinearClient",
]
