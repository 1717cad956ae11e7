"""linear-cli entry point.

``linear-cli <resource> <action> [args...] [--flag value]...``

Resources and actions:
  user list | team list | project list
  issue list | view | create | update | delete | comment

Dispatch order: help, then argument checks, then configuration and the API
key, then the handler. Nothing touches the network before the handler runs.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

import requests

from .argv import ParsedCommand, parse_args
from .commands import COMMANDS, CommandContext, CommandSpec
from .config import CliConfig, ConfigError, FileSettings, load_config, load_settings
from .env_auth import API_KEY_VAR, API_SETTINGS_URL
from .errors import CliError, UsageError, redact
from .formatting import print_error
from .help_text import help_for, usage_hint
from .linear_api import LinearAPIError, LinearClient
from .logging import configure_logging
from .runtime import execute_command

ConfigLoader = Callable[[FileSettings], CliConfig]
ClientFactory = Callable[[CliConfig], LinearClient]


def _default_client(cfg: CliConfig) -> LinearClient:
    return LinearClient(api_key=cfg.api_key, api_url=cfg.api_url, timeout=cfg.timeout)


def resolve_command(cmd: ParsedCommand) -> CommandSpec:
    """Pick the handler for (resource, action) and check positional arguments."""
    actions = COMMANDS.get(cmd.resource)
    if actions is None:
        raise UsageError(f"Unknown resource '{cmd.resource}'", hint=usage_hint())
    valid = ", ".join(actions)
    if not cmd.action:
        raise UsageError(
            f"Missing action for resource '{cmd.resource}' (valid actions: {valid})",
            hint=usage_hint(cmd.resource),
        )
    spec = actions.get(cmd.action)
    if spec is None:
        raise UsageError(
            f"Unknown action '{cmd.action}' for resource '{cmd.resource}' "
            f"(valid actions: {valid})",
            hint=usage_hint(cmd.resource),
        )
    if len(cmd.args) < spec.min_args:
        raise UsageError(spec.missing_message, hint=usage_hint(cmd.resource, cmd.action))
    return spec


def _report_api_error(exc: Exception) -> None:
    message = str(exc)
    if "API key" in message:
        print_error(
            f"Invalid {API_KEY_VAR}",
            details=[f"Check your API key is valid: {API_SETTINGS_URL}"],
        )
    else:
        print_error(redact(message) or "Unknown error occurred")


def main(
    argv: Sequence[str] | None = None,
    *,
    config_loader: ConfigLoader = load_config,
    client_factory: ClientFactory = _default_client,
) -> int:
    cmd = parse_args(sys.argv[1:] if argv is None else argv)

    if cmd.wants_help or not cmd.resource:
        print(help_for(cmd.resource, cmd.action))
        return 0

    try:
        spec = resolve_command(cmd)
        settings = load_settings()
        logger = configure_logging(
            json_logging=settings.logging_json_enabled, level=settings.logging_level
        )
        cfg = config_loader(settings)
        ctx = CommandContext(
            command=cmd, client=client_factory(cfg), config=cfg, logger=logger
        )
        return execute_command(spec.handler, ctx, f"{cmd.resource}.{cmd.action}")
    except CliError as exc:
        print_error(exc.message, details=exc.details, hint=exc.hint)
        return exc.exit_code
    except ConfigError as exc:
        print_error(str(exc))
        return 1
    except (LinearAPIError, requests.RequestException) as exc:
        _report_api_error(exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
