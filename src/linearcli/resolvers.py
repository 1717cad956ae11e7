"""Turn command-line flags into Linear filters and mutation payloads.

Everything here either is a pure function or performs the lookups needed to
translate human references (``@me``, ``ENG-123``, label and status names) into
Linear ids. Failures raise before any mutation is attempted.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from .argv import FlagValue
from .errors import InputValidationError, ResolutionError
from .linear_api import ISSUE_REF_FIELDS, LinearAPIError
from .logging import get_logger

ME = "@me"
DUE_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
COMPOUND_KEY_RE = re.compile(r"([^-]+)-([0-9]+)")


class IssueLookup(Protocol):
    def issue(self, issue_id: str, *, fields: str = ...) -> dict[str, Any] | None: ...

    def find_issue(
        self, team_key: str, number: int, *, fields: str = ...
    ) -> dict[str, Any] | None: ...


class TeamLookup(Protocol):
    def team_states(self, team_id: str) -> list[dict[str, Any]]: ...

    def team_labels(self, team_id: str) -> list[dict[str, Any]]: ...


class ViewerLookup(Protocol):
    def viewer(self) -> dict[str, Any]: ...


# ---- identifiers -------------------------------------------------------


def parse_identifier(identifier: str) -> tuple[str, int] | None:
    """Split a compound key (``ENG-123``) into (``ENG``, 123).

    Returns None for anything else, which is then treated as an opaque id.
    """
    match = COMPOUND_KEY_RE.fullmatch(identifier.strip())
    if not match:
        return None
    return match.group(1).upper(), int(match.group(2))


def resolve_issue(
    lookup: IssueLookup, identifier: str, *, fields: str = ISSUE_REF_FIELDS
) -> dict[str, Any] | None:
    """Find an issue by compound key or opaque id; None when it does not exist."""
    key = parse_identifier(identifier)
    try:
        if key is not None:
            team_key, number = key
            issue = lookup.find_issue(team_key, number, fields=fields)
        else:
            issue = lookup.issue(identifier.strip(), fields=fields)
    except LinearAPIError as exc:
        if exc.auth_failed:
            raise
        get_logger().debug("issue lookup failed", identifier=identifier, error=str(exc))
        return None
    if key is not None and issue is not None:
        # Guard against a filter that was not applied server side.
        team = issue.get("team") or {}
        team_key_found = str(team.get("key") or key[0]).upper()
        found = str(issue.get("identifier") or "").upper()
        if team_key_found != key[0] or (found and found != f"{key[0]}-{key[1]}"):
            return None
    return issue


def require_issue(
    lookup: IssueLookup,
    identifier: str,
    *,
    fields: str = ISSUE_REF_FIELDS,
    what: str = "Issue",
) -> dict[str, Any]:
    issue = resolve_issue(lookup, identifier, fields=fields)
    if issue is None:
        raise ResolutionError(f"{what} not found: {identifier}")
    return issue


# ---- labels ------------------------------------------------------------


def parse_label_names(value: FlagValue | Iterable[str] | None) -> list[str]:
    """Flatten ``--label`` values into unique names, first spelling wins."""
    if value is None or value is True or value is False:
        return []
    raw = [value] if isinstance(value, str) else list(value)
    names: list[str] = []
    seen: set[str] = set()
    for item in raw:
        for part in str(item).split(","):
            name = part.strip()
            if name and name.lower() not in seen:
                seen.add(name.lower())
                names.append(name)
    return names


def resolve_labels(client: TeamLookup, team_id: str, names: list[str]) -> list[str]:
    """Map label names to ids within a team; all-or-nothing."""
    if not names:
        return []
    available = client.team_labels(team_id)
    by_name = {str(label.get("name", "")).lower(): label for label in available}
    ids: list[str] = []
    missing: list[str] = []
    for name in names:
        label = by_name.get(name.lower())
        if label is None:
            missing.append(name)
        elif label["id"] not in ids:
            ids.append(label["id"])
    if missing:
        details = ["Available labels for this team:"]
        if available:
            details.extend(f"  - {label.get('name')}" for label in available)
        else:
            details.append("  (no labels available)")
        raise ResolutionError(f"Label(s) not found: {', '.join(missing)}", details=details)
    return ids


# ---- workflow states ---------------------------------------------------


def resolve_state(client: TeamLookup, team_id: str, name: str) -> str:
    states = client.team_states(team_id)
    for state in states:
        if str(state.get("name", "")).lower() == name.lower():
            return str(state["id"])
    details = ["Available statuses for this team:"]
    details.extend(f"  - {state.get('name')}" for state in states)
    raise ResolutionError(f"Status '{name}' not found", details=details)


# ---- assignee ----------------------------------------------------------


class AssigneeResolver:
    """Resolves ``@me`` at most once per invocation."""

    def __init__(self, client: ViewerLookup):
        self._client = client
        self._viewer_id: str | None = None

    def viewer_id(self) -> str:
        if self._viewer_id is None:
            viewer = self._client.viewer()
            self._viewer_id = str(viewer["id"])
        return self._viewer_id

    def resolve(self, value: str | None) -> str | None:
        if not value:
            return None
        if value.strip() == ME:
            return self.viewer_id()
        return value


# ---- scalar inputs -----------------------------------------------------


def validate_due_date(value: str) -> str:
    """Shape-only check (YYYY-MM-DD); calendar validity is left to Linear."""
    if not DUE_DATE_RE.fullmatch(value):
        raise InputValidationError("Invalid date format. Use YYYY-MM-DD (e.g., 2025-12-31)")
    return value


def parse_priority(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InputValidationError(f"Invalid priority: {value} (expected an integer)") from exc


def parse_estimate(value: str) -> float:
    try:
        return float(value.strip())
    except ValueError as exc:
        raise InputValidationError(f"Invalid estimate: {value} (expected a number)") from exc


def parse_limit(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        limit = int(value.strip())
    except ValueError as exc:
        raise InputValidationError(f"Invalid limit: {value} (expected an integer)") from exc
    if limit < 1:
        raise InputValidationError(f"Invalid limit: {value} (must be at least 1)")
    return limit


def read_body_file(path: str | bool) -> str:
    """Read a description from a file, or stdin for ``-`` / a bare flag."""
    if path is True or path == "-":
        try:
            return sys.stdin.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise InputValidationError("Could not read from stdin") from exc
    try:
        return Path(str(path)).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputValidationError(f"Could not read file: {path}") from exc


def build_issue_filter(
    *, team_id: str | None = None, assignee_id: str | None = None, status: str | None = None
) -> dict[str, Any]:
    """IssueFilter with only the supplied dimensions."""
    issue_filter: dict[str, Any] = {}
    if team_id:
        issue_filter["team"] = {"id": {"eq": team_id}}
    if assignee_id:
        issue_filter["assignee"] = {"id": {"eq": assignee_id}}
    if status:
        issue_filter["state"] = {"name": {"eqIgnoreCase": status}}
    return issue_filter


__all__ = [
    "AssigneeResolver",
    "IssueLookup",
    "build_issue_filter",
    "parse_estimate",
    "parse_identifier",
    "parse_label_names",
    "parse_limit",
    "parse_priority",
    "read_body_file",
    "require_issue",
    "resolve_issue",
    "resolve_labels",
    "resolve_state",
    "validate_due_date",
]
