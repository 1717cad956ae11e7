"""Command handlers, one per (resource, action).

Each handler validates its inputs, resolves references, performs at most one
mutating call and renders the result. Handlers return an exit code or raise a
:class:`~linearcli.errors.CliError`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .argv import ParsedCommand
from .config import CliConfig
from .errors import CliError, UsageError
from .formatting import (
    format_issue_detail,
    format_issue_rows,
    format_projects,
    format_teams,
    format_users,
    print_json,
    print_lines,
    print_success,
)
from .help_text import usage_hint
from .linear_api import ISSUE_DETAIL_FIELDS, LinearClient
from .logging import StructuredLogger, get_logger
from .resolvers import (
    AssigneeResolver,
    build_issue_filter,
    parse_estimate,
    parse_label_names,
    parse_limit,
    parse_priority,
    read_body_file,
    require_issue,
    resolve_labels,
    resolve_state,
    validate_due_date,
)


@dataclass
class CommandContext:
    command: ParsedCommand
    client: LinearClient
    config: CliConfig
    logger: StructuredLogger = field(default_factory=get_logger)
    assignees: AssigneeResolver = field(init=False)

    def __post_init__(self) -> None:
        self.assignees = AssigneeResolver(self.client)

    @property
    def limit(self) -> int:
        return parse_limit(self.command.text_flag("limit"), self.config.default_limit)


Handler = Callable[[CommandContext], int]


@dataclass(frozen=True)
class CommandSpec:
    handler: Handler
    min_args: int = 0
    missing_message: str = "Missing required arguments"


# ---- simple listings ---------------------------------------------------


def _emit(ctx: CommandContext, data: Any, lines: list[str]) -> None:
    if ctx.command.json_output:
        print_json(data)
    else:
        print_lines(lines)


def list_users(ctx: CommandContext) -> int:
    users = ctx.client.users(first=ctx.limit)
    _emit(ctx, users, format_users(users))
    return 0


def list_teams(ctx: CommandContext) -> int:
    teams = ctx.client.teams(first=ctx.limit)
    _emit(ctx, teams, format_teams(teams))
    return 0


def list_projects(ctx: CommandContext) -> int:
    projects = ctx.client.projects(first=ctx.limit)
    _emit(ctx, projects, format_projects(projects))
    return 0


# ---- issues ------------------------------------------------------------


def issue_list(ctx: CommandContext) -> int:
    cmd = ctx.command
    limit = ctx.limit
    team_id = cmd.text_flag("team")
    status = cmd.text_flag("status")
    assignee_id = ctx.assignees.resolve(cmd.text_flag("assignee"))
    issue_filter = build_issue_filter(team_id=team_id, assignee_id=assignee_id, status=status)
    issues = ctx.client.issues(first=limit, issue_filter=issue_filter or None, order_by="updatedAt")
    _emit(ctx, issues, format_issue_rows(issues))
    return 0


def issue_view(ctx: CommandContext) -> int:
    issue = require_issue(ctx.client, ctx.command.args[0], fields=ISSUE_DETAIL_FIELDS)
    _emit(ctx, issue, format_issue_detail(issue))
    return 0


def _description(cmd: ParsedCommand) -> str | None:
    if cmd.has_flag("body-file"):
        values = cmd.values("body-file")
        return read_body_file(values[-1] if values else True)
    return cmd.text_flag("body")


def _scalar_fields(cmd: ParsedCommand) -> dict[str, Any]:
    """Fields that need no lookup; shape errors surface before any request."""
    fields: dict[str, Any] = {}
    description = _description(cmd)
    if description is not None:
        fields["description"] = description
    project = cmd.text_flag("project")
    if project:
        fields["projectId"] = project
    priority = cmd.text_flag("priority")
    if priority is not None:
        fields["priority"] = parse_priority(priority)
    estimate = cmd.text_flag("estimate")
    if estimate is not None:
        fields["estimate"] = parse_estimate(estimate)
    due_date = cmd.text_flag("due-date")
    if due_date:
        fields["dueDate"] = validate_due_date(due_date)
    return fields


@dataclass
class References:
    """Flag values that name other Linear entities."""

    assignee: str | None = None
    labels: list[str] = field(default_factory=list)
    parent: str | None = None
    status: str | None = None

    @classmethod
    def from_command(cls, cmd: ParsedCommand) -> References:
        return cls(
            assignee=cmd.text_flag("assignee"),
            labels=parse_label_names(cmd.flags.get("label")),
            parent=cmd.text_flag("parent"),
            status=cmd.text_flag("status"),
        )

    def __bool__(self) -> bool:
        return bool(self.assignee or self.labels or self.parent or self.status)


def _resolve_references(ctx: CommandContext, refs: References, team_id: str) -> dict[str, Any]:
    """Fields resolved against Linear, in a fixed order, one call at a time."""
    fields: dict[str, Any] = {}
    assignee_id = ctx.assignees.resolve(refs.assignee)
    if assignee_id:
        fields["assigneeId"] = assignee_id
    if refs.labels:
        fields["labelIds"] = resolve_labels(ctx.client, team_id, refs.labels)
    if refs.parent:
        fields["parentId"] = require_issue(ctx.client, refs.parent, what="Parent issue")["id"]
    if refs.status:
        fields["stateId"] = resolve_state(ctx.client, team_id, refs.status)
    return fields


def issue_create(ctx: CommandContext) -> int:
    cmd = ctx.command
    title = " ".join(cmd.args).strip()
    if not title:
        raise UsageError("Missing issue title", hint=usage_hint("issue", "create"))
    team_id = cmd.text_flag("team")
    if not team_id:
        raise UsageError("--team flag is required", hint=usage_hint("issue", "create"))

    issue_input: dict[str, Any] = {"teamId": team_id, "title": title}
    issue_input.update(_scalar_fields(cmd))
    refs = References.from_command(cmd)
    issue_input.update(_resolve_references(ctx, refs, team_id))

    result = ctx.client.create_issue(issue_input)
    issue = result.get("issue")
    if not result.get("success") or not issue:
        raise CliError("Failed to create issue")
    ctx.logger.log_mutation("create", str(issue.get("identifier")))
    if cmd.json_output:
        print_json(issue)
        return 0
    print_success(f"Issue created: #{issue.get('identifier')}")
    print(f"  Title: {issue.get('title')}")
    print(f"  URL: {issue.get('url')}")
    return 0


def issue_update(ctx: CommandContext) -> int:
    cmd = ctx.command
    updates: dict[str, Any] = {}
    title = cmd.text_flag("title")
    if title:
        updates["title"] = title
    updates.update(_scalar_fields(cmd))
    refs = References.from_command(cmd)
    if not updates and not refs:
        raise UsageError("No updates specified", hint=usage_hint("issue", "update"))

    issue = require_issue(ctx.client, cmd.args[0])
    team_id = str((issue.get("team") or {}).get("id") or "")
    updates.update(_resolve_references(ctx, refs, team_id))

    result = ctx.client.update_issue(issue["id"], updates)
    if not result.get("success"):
        raise CliError(f"Failed to update issue #{issue.get('identifier')}")
    ctx.logger.log_mutation("update", str(issue.get("identifier")), fields=sorted(updates))
    if cmd.json_output:
        print_json(result.get("issue"))
        return 0
    print_success(f"Issue #{issue.get('identifier')} updated")
    return 0


def issue_delete(ctx: CommandContext) -> int:
    issue = require_issue(ctx.client, ctx.command.args[0])
    result = ctx.client.delete_issue(issue["id"])
    success = bool(result.get("success"))
    if ctx.command.json_output:
        print_json({"success": success})
    if not success:
        raise CliError(f"Failed to delete issue #{issue.get('identifier')}")
    ctx.logger.log_mutation("delete", str(issue.get("identifier")))
    if not ctx.command.json_output:
        print_success(f"Issue #{issue.get('identifier')} deleted (moved to trash)")
    return 0


def issue_comment(ctx: CommandContext) -> int:
    cmd = ctx.command
    text = " ".join(cmd.args[1:])
    if not text.strip():
        raise UsageError("Comment text must not be empty", hint=usage_hint("issue", "comment"))
    issue = require_issue(ctx.client, cmd.args[0])
    result = ctx.client.create_comment(issue["id"], text)
    comment = result.get("comment")
    if not result.get("success") or not comment:
        raise CliError(f"Failed to add comment to #{issue.get('identifier')}")
    ctx.logger.log_mutation("comment", str(issue.get("identifier")))
    if cmd.json_output:
        print_json(comment)
        return 0
    print_success(f"Comment added to #{issue.get('identifier')}")
    return 0


_MISSING_ID = "Missing issue identifier"

COMMANDS: dict[str, dict[str, CommandSpec]] = {
    "user": {"list": CommandSpec(list_users)},
    "team": {"list": CommandSpec(list_teams)},
    "project": {"list": CommandSpec(list_projects)},
    "issue": {
        "list": CommandSpec(issue_list),
        "view": CommandSpec(issue_view, 1, _MISSING_ID),
        "create": CommandSpec(issue_create, 1, "Missing issue title"),
        "update": CommandSpec(issue_update, 1, _MISSING_ID),
        "delete": CommandSpec(issue_delete, 1, _MISSING_ID),
        "comment": CommandSpec(issue_comment, 2, "Missing required arguments"),
    },
}


__all__ = ["COMMANDS", "CommandContext", "CommandSpec"]
