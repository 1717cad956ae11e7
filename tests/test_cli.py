from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest
import requests

from linearcli.cli import main, resolve_command
from linearcli.argv import parse_args
from linearcli.commands import issue_view
from linearcli.errors import UsageError
from linearcli.help_text import ACTION_HELP, GLOBAL_HELP, RESOURCE_HELP
from linearcli.linear_api import LinearAPIError


def _run(
    cmd: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> tuple[int, str, str]:
    result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, env=env, check=False)
    return result.returncode, result.stdout, result.stderr


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["--help"], GLOBAL_HELP),
        ([], GLOBAL_HELP),
        (["bogus", "-h"], GLOBAL_HELP),
        (["issue", "--help"], RESOURCE_HELP["issue"]),
        (["team", "list", "-h"], RESOURCE_HELP["team"]),
        (["issue", "frobnicate", "-h"], RESOURCE_HELP["issue"]),
        (["issue", "create", "--help"], ACTION_HELP[("issue", "create")]),
        (["issue", "update", "ENG-1", "--status", "Done", "-h"], ACTION_HELP[("issue", "update")]),
    ],
)
def test_help_is_most_specific_and_side_effect_free(run_cli, fake_client, capsys, argv, expected):
    assert run_cli(*argv) == 0
    assert capsys.readouterr().out.strip() == expected.strip()
    assert fake_client.calls == []


def test_unknown_resource(run_cli, capsys):
    assert run_cli("widget", "list") == 1
    err = capsys.readouterr().err
    assert "Unknown resource 'widget'" in err
    assert "Run 'linear-cli --help' for usage" in err


def test_unknown_action_lists_valid_actions(run_cli, capsys):
    assert run_cli("issue", "close", "ENG-1") == 1
    err = capsys.readouterr().err
    assert "Unknown action 'close' for resource 'issue'" in err
    assert "list, view, create, update, delete, comment" in err


def test_missing_action(run_cli, capsys):
    assert run_cli("user") == 1
    assert "Missing action for resource 'user' (valid actions: list)" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["issue", "view"], "Missing issue identifier"),
        (["issue", "create"], "Missing issue title"),
        (["issue", "update"], "Missing issue identifier"),
        (["issue", "delete"], "Missing issue identifier"),
        (["issue", "comment", "ENG-1"], "Missing required arguments"),
    ],
)
def test_missing_positionals(run_cli, fake_client, capsys, argv, message):
    assert run_cli(*argv) == 1
    assert message in capsys.readouterr().err
    assert fake_client.calls == []


def test_resolve_command_returns_handler():
    spec = resolve_command(parse_args(["issue", "view", "ENG-1"]))
    assert spec.handler is issue_view
    with pytest.raises(UsageError):
        resolve_command(parse_args(["issue", "view"]))


def test_api_key_errors_get_credential_guidance(run_cli, fake_client, monkeypatch, capsys):
    def _reject(*, first=50):
        raise LinearAPIError("Invalid API key: Authentication required", status=401, auth_failed=True)

    monkeypatch.setattr(fake_client, "teams", _reject)
    assert run_cli("team", "list") == 1
    err = capsys.readouterr().err
    assert "Invalid LINEAR_API_KEY" in err
    assert "https://linear.app/settings/api" in err


def test_service_errors_are_surfaced_verbatim(run_cli, fake_client, monkeypatch, capsys):
    def _reject(*, first=50):
        raise LinearAPIError("Argument Validation Error")

    monkeypatch.setattr(fake_client, "projects", _reject)
    assert run_cli("project", "list") == 1
    assert "Error: Argument Validation Error" in capsys.readouterr().err


def test_network_errors_are_reported(run_cli, fake_client, monkeypatch, capsys):
    def _offline(*, first=50):
        raise requests.ConnectionError("Failed to establish a new connection")

    monkeypatch.setattr(fake_client, "users", _offline)
    assert run_cli("user", "list") == 1
    assert "Failed to establish a new connection" in capsys.readouterr().err


def test_missing_api_key_is_fatal(isolated_env, capsys):
    assert main(["team", "list"]) == 1
    err = capsys.readouterr().err
    assert "LINEAR_API_KEY not found" in err
    assert 'export LINEAR_API_KEY="your-api-key"' in err


def test_invalid_settings_file(isolated_env, monkeypatch, capsys):
    cfg = isolated_env / "config.yaml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("LINEAR_CLI_CONFIG", str(cfg))
    monkeypatch.setenv("LINEAR_API_KEY", "lin_api_test")
    assert main(["team", "list"]) == 1
    assert "Configuration root must be a mapping" in capsys.readouterr().err


@pytest.mark.parametrize("content", [None, "logging: verbose\n"])
def test_unusable_settings_file_is_reported(isolated_env, monkeypatch, capsys, content):
    cfg = isolated_env / "settings"
    if content is None:
        cfg.mkdir()
    else:
        cfg.write_text(content, encoding="utf-8")
    monkeypatch.setenv("LINEAR_CLI_CONFIG", str(cfg))
    monkeypatch.setenv("LINEAR_API_KEY", "lin_api_test")
    assert main(["user", "list"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_module_entrypoint_help_and_missing_key(tmp_path: Path) -> None:
    env = os.environ.copy()
    env.pop("LINEAR_API_KEY", None)
    env.pop("LINEAR_CLI_DOTENV", None)
    env.pop("LINEAR_CLI_CONFIG", None)
    env["HOME"] = str(tmp_path)

    rc, out, _ = _run([sys.executable, "-m", "linearcli", "issue", "--help"], tmp_path, env)
    assert rc == 0
    assert "Usage: linear-cli issue <action>" in out

    rc, out, err = _run([sys.executable, "-m", "linearcli", "user", "list"], tmp_path, env)
    assert rc == 1
    assert out == ""
    assert "LINEAR_API_KEY not found" in err

    rc, _, err = _run([sys.executable, "-m", "linearcli", "issue", "view"], tmp_path, env)
    assert rc == 1
    assert "Missing issue identifier" in err
