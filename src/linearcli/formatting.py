"""Output rendering: raw JSON or condensed human-readable text."""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Iterable, Sequence
from typing import Any, TextIO

PRIORITY_LABELS = {
    0: "None",
    1: "Urgent (P0)",
    2: "High (P1)",
    3: "Medium (P2)",
    4: "Low (P3)",
}


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if terminal supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", Colors.GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(
    message: str, details: Sequence[str] = (), hint: str | None = None, stream: TextIO | None = None
) -> None:
    """``Error: <message>`` followed by remediation lines and a usage hint."""
    stream = stream or sys.stderr
    print(colorize("Error:", Colors.RED, bold=True, stream=stream) + " " + message, file=stream)
    if details:
        print("", file=stream)
        for line in details:
            print(line, file=stream)
    if hint:
        print(f"\n{hint}", file=stream)


def print_json(data: Any, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(json.dumps(data, indent=2, ensure_ascii=False), file=stream)


def _date(value: Any) -> str:
    # ISO timestamps from Linear; the date portion is all we show.
    return str(value or "").split("T", 1)[0]


def _nodes(conn: Any) -> list[dict[str, Any]]:
    if isinstance(conn, dict):
        return [n for n in conn.get("nodes") or [] if isinstance(n, dict)]
    return []


def format_table(title: str, rows: Iterable[Sequence[Any]]) -> list[str]:
    lines = [title, ""]
    for row in rows:
        first, *rest = ["" if cell is None else str(cell) for cell in row]
        lines.append("\t".join([f"#{first}", *rest]))
    return lines


def format_users(users: Iterable[dict[str, Any]]) -> list[str]:
    return format_table("Users", ((u.get("id"), u.get("name"), u.get("email")) for u in users))


def format_teams(teams: Iterable[dict[str, Any]]) -> list[str]:
    return format_table("Teams", ((t.get("id"), t.get("name"), t.get("key")) for t in teams))


def format_projects(projects: Iterable[dict[str, Any]]) -> list[str]:
    return format_table(
        "Projects", ((p.get("id"), p.get("name"), p.get("state")) for p in projects)
    )


def format_issue_rows(issues: Iterable[dict[str, Any]]) -> list[str]:
    rows = []
    for issue in issues:
        state = (issue.get("state") or {}).get("name")
        assignee = (issue.get("assignee") or {}).get("name") or "Unassigned"
        rows.append((issue.get("identifier"), issue.get("title"), state, assignee))
    return format_table("Issues", rows)


def format_issue_detail(issue: dict[str, Any]) -> list[str]:
    """Labeled multi-line view; optional lines only when the field is set."""
    state = issue.get("state") or {}
    assignee = issue.get("assignee")
    team = issue.get("team") or {}
    labels = ", ".join(str(label.get("name")) for label in _nodes(issue.get("labels")))

    lines = [
        f"Issue: #{issue.get('identifier')}",
        "",
        f"Title:\t\t{issue.get('title')}",
        f"Status:\t\t{state.get('name') or 'Unknown'}",
        "Assignee:\t"
        + (f"{assignee.get('name')} ({assignee.get('email')})" if assignee else "Unassigned"),
        f"Team:\t\t{team.get('name')} ({team.get('key')})",
        f"Priority:\t{PRIORITY_LABELS.get(issue.get('priority') or 0, 'None')}",
        f"Labels:\t\t{labels or 'None'}",
    ]
    parent = issue.get("parent")
    if parent:
        lines.append(f"Parent:\t\t#{parent.get('identifier')} - {parent.get('title')}")
    project = issue.get("project")
    if project:
        lines.append(f"Project:\t{project.get('name')}")
    if issue.get("estimate"):
        lines.append(f"Estimate:\t{issue['estimate']:g} points")
    if issue.get("dueDate"):
        lines.append(f"Due Date:\t{issue['dueDate']}")
    lines.append(f"Created:\t{_date(issue.get('createdAt'))}")
    lines.append(f"Updated:\t{_date(issue.get('updatedAt'))}")

    if issue.get("description"):
        lines.extend(["", "Description:", str(issue["description"])])

    comments = _nodes(issue.get("comments"))
    if comments:
        lines.extend(["", "Comments:"])
        for comment in comments:
            user = (comment.get("user") or {}).get("name")
            lines.append(f"  [{_date(comment.get('createdAt'))}] {user}: {comment.get('body')}")
    return lines


def print_lines(lines: Iterable[str], stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    for line in lines:
        print(line, file=stream)


__all__ = [
    "PRIORITY_LABELS",
    "Colors",
    "colorize",
    "format_issue_detail",
    "format_issue_rows",
    "format_projects",
    "format_table",
    "format_teams",
    "format_users",
    "print_error",
    "print_json",
    "print_lines",
    "print_success",
]
