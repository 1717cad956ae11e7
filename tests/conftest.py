"""Pytest configuration for linear-cli tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and provides an in-memory stand-in for
the Linear API client so command tests never touch the network.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocess tests run `python -m linearcli`; make the in-repo package importable there too.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

from linearcli.config import CliConfig  # noqa: E402
from linearcli.linear_api import LinearAPIError  # noqa: E402

TEAM_ENG = {"id": "team-eng", "name": "Engineering", "key": "ENG"}
TEAM_OPS = {"id": "team-ops", "name": "Operations", "key": "OPS"}


class FakeLinearClient:
    """Records every call; mutation results can be overridden per test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.viewer_data = {"id": "user-me", "name": "Me", "email": "me@example.com"}
        self.users_data = [
            {"id": "user-me", "name": "Me", "email": "me@example.com"},
            {"id": "user-2", "name": "Ada", "email": "ada@example.com"},
        ]
        self.teams_data = [TEAM_ENG, TEAM_OPS]
        self.projects_data = [{"id": "proj-1", "name": "Launch", "state": "started"}]
        self.labels = {
            "team-eng": [
                {"id": "lbl-bug", "name": "Bug"},
                {"id": "lbl-feat", "name": "Feature"},
                {"id": "lbl-p0", "name": "p0"},
            ],
            "team-ops": [],
        }
        self.states = {
            "team-eng": [
                {"id": "st-backlog", "name": "Backlog", "type": "backlog"},
                {"id": "st-progress", "name": "In Progress", "type": "started"},
                {"id": "st-done", "name": "Done", "type": "completed"},
            ],
        }
        self.issues_data: dict[str, dict[str, Any]] = {
            "uuid-eng-1": _issue("uuid-eng-1", TEAM_ENG, 1, "Fix login"),
            "uuid-eng-2": _issue("uuid-eng-2", TEAM_ENG, 2, "Add search"),
            "uuid-ops-7": _issue("uuid-ops-7", TEAM_OPS, 7, "Rotate keys"),
        }
        self.create_result: dict[str, Any] | None = None
        self.update_result: dict[str, Any] | None = None
        self.delete_result: dict[str, Any] = {"success": True}
        self.comment_result: dict[str, Any] | None = None

    def mutations(self) -> list[str]:
        return [name for name, _ in self.calls if name in _MUTATIONS]

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    # reads
    def viewer(self) -> dict[str, Any]:
        self.calls.append(("viewer", None))
        return self.viewer_data

    def users(self, *, first: int = 50) -> list[dict[str, Any]]:
        self.calls.append(("users", {"first": first}))
        return self.users_data[:first]

    def teams(self, *, first: int = 50) -> list[dict[str, Any]]:
        self.calls.append(("teams", {"first": first}))
        return self.teams_data[:first]

    def projects(self, *, first: int = 50) -> list[dict[str, Any]]:
        self.calls.append(("projects", {"first": first}))
        return self.projects_data[:first]

    def issues(
        self,
        *,
        first: int = 50,
        issue_filter: dict[str, Any] | None = None,
        order_by: str = "updatedAt",
        fields: str = "",
    ) -> list[dict[str, Any]]:
        self.calls.append(
            ("issues", {"first": first, "issue_filter": issue_filter, "order_by": order_by})
        )
        return list(self.issues_data.values())[:first]

    def issue(self, issue_id: str, *, fields: str = "") -> dict[str, Any] | None:
        self.calls.append(("issue", issue_id))
        if issue_id not in self.issues_data:
            raise LinearAPIError("Entity not found: Issue")
        return self.issues_data[issue_id]

    def find_issue(self, team_key: str, number: int, *, fields: str = "") -> dict[str, Any] | None:
        self.calls.append(("find_issue", (team_key, number)))
        for issue in self.issues_data.values():
            if issue["team"]["key"].lower() == team_key.lower() and issue["number"] == number:
                return issue
        return None

    def team_states(self, team_id: str) -> list[dict[str, Any]]:
        self.calls.append(("team_states", team_id))
        return self.states.get(team_id, [])

    def team_labels(self, team_id: str) -> list[dict[str, Any]]:
        self.calls.append(("team_labels", team_id))
        return self.labels.get(team_id, [])

    # mutations
    def create_issue(self, issue_input: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create_issue", issue_input))
        if self.create_result is not None:
            return self.create_result
        return {
            "success": True,
            "issue": {
                "id": "uuid-new",
                "identifier": "ENG-3",
                "title": issue_input["title"],
                "url": "https://linear.app/acme/issue/ENG-3",
            },
        }

    def update_issue(self, issue_id: str, issue_input: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("update_issue", (issue_id, issue_input)))
        if self.update_result is not None:
            return self.update_result
        issue = dict(self.issues_data[issue_id])
        issue.update({k: v for k, v in issue_input.items() if k in ("title", "description")})
        return {"success": True, "issue": issue}

    def delete_issue(self, issue_id: str) -> dict[str, Any]:
        self.calls.append(("delete_issue", issue_id))
        return self.delete_result

    def create_comment(self, issue_id: str, body: str) -> dict[str, Any]:
        self.calls.append(("create_comment", (issue_id, body)))
        if self.comment_result is not None:
            return self.comment_result
        return {"success": True, "comment": {"id": "cmt-1", "body": body}}


_MUTATIONS = {"create_issue", "update_issue", "delete_issue", "create_comment"}


def _issue(issue_id: str, team: dict[str, str], number: int, title: str) -> dict[str, Any]:
    return {
        "id": issue_id,
        "identifier": f"{team['key']}-{number}",
        "number": number,
        "title": title,
        "url": f"https://linear.app/acme/issue/{team['key']}-{number}",
        "team": team,
        "state": {"name": "Backlog"},
        "assignee": None,
    }


@pytest.fixture
def fake_client() -> FakeLinearClient:
    return FakeLinearClient()


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """No API key, no dotfiles, no settings file outside tmp_path."""
    for var in (
        "LINEAR_API_KEY",
        "LINEAR_CLI_DOTENV",
        "LINEAR_CLI_CONFIG",
        "LINEAR_CLI_LOG_LEVEL",
        "LINEAR_CLI_LOG_JSON",
        "LINEAR_CLI_DEBUG",
    ):
        # setenv first so teardown restores the original state even if a
        # dotenv load writes the variable during the test
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def run_cli(isolated_env: Path, fake_client: FakeLinearClient):
    """Invoke ``main`` in-process against the fake client."""
    from linearcli.cli import main

    def _run(*argv: str) -> int:
        return main(
            list(argv),
            config_loader=lambda settings: CliConfig(
                api_key="lin_api_test", default_limit=settings.default_limit
            ),
            client_factory=lambda cfg: fake_client,  # type: ignore[arg-type,return-value]
        )

    return _run
