"""Static usage text, keyed by resource and (resource, action)."""

from __future__ import annotations

import textwrap

PROG = "linear-cli"

ID_ARG = "  id-or-key    Issue identifier (e.g., ENG-123 or full UUID)"
PRIORITY_HELP = "(0=None, 1=Urgent/P0, 2=High/P1, 3=Medium/P2, 4=Low/P3)"

GLOBAL_HELP = f"""\
{PROG} - CLI for working with Linear

Usage: {PROG} <resource> <action> [arguments] [options]

Resources:
  issue      Work with issues
  user       Work with users
  team       Work with teams
  project    Work with projects

Global Options:
  -h, --help    Show help
  --json        Output raw JSON

Run '{PROG} <resource> --help' for resource-specific help
Run '{PROG} <resource> <action> --help' for action-specific help

Examples:
  {PROG} issue list
  {PROG} issue view ENG-123
  {PROG} issue create "Fix bug" --team <team-id>
  {PROG} user list"""


def _simple_list_help(resource: str) -> str:
    return textwrap.dedent(
        f"""\
        Usage: {PROG} {resource} <action>

        Actions:
          list    List all {resource}s

        Options:
          --limit <n>  Limit results (default: 50)
          --json       Output raw JSON
          -h, --help   Show help

        Examples:
          {PROG} {resource} list
          {PROG} {resource} list --json"""
    )


RESOURCE_HELP: dict[str, str] = {
    "user": _simple_list_help("user"),
    "team": _simple_list_help("team"),
    "project": _simple_list_help("project"),
    "issue": f"""\
Usage: {PROG} issue <action> [arguments] [options]

Actions:
  list                            List issues with filters
  view <id-or-key>                Get detailed information about an issue
  create <title>                  Create a new issue
  update <id-or-key>              Update an issue
  delete <id-or-key>              Delete an issue (moves to trash)
  comment <id-or-key> <text>      Add a comment to an issue

Global Options:
  --json       Output raw JSON
  -h, --help   Show help

Run '{PROG} issue <action> --help' for action-specific help""",
}

ACTION_HELP: dict[tuple[str, str], str] = {
    ("issue", "list"): f"""\
Usage: {PROG} issue list [options]

List issues with filters, most recently updated first

Options:
  --team <id>       Filter by team ID
  --assignee <id>   Filter by assignee user ID (use "@me" for yourself)
  --status <name>   Filter by status name
  --limit <n>       Limit results (default: 50)
  --json            Output raw JSON
  -h, --help        Show help

Examples:
  {PROG} issue list
  {PROG} issue list --team <team-id>
  {PROG} issue list --status "In Progress" --limit 10""",
    ("issue", "view"): f"""\
Usage: {PROG} issue view <id-or-key> [options]

Get detailed information about an issue

Arguments:
{ID_ARG}

Options:
  --json       Output raw JSON
  -h, --help   Show help

Examples:
  {PROG} issue view ENG-123
  {PROG} issue view <issue-uuid> --json""",
    ("issue", "create"): f"""\
Usage: {PROG} issue create <title> [options]

Create a new issue

Arguments:
  title                 Issue title

Options:
  --team <id>           Team ID (required)
  --body <text>         Issue description (use --body-file for long text)
  --body-file <file>    Read description from file (use "-" for stdin)
  --assignee <id>       Assignee user ID (use "@me" for yourself)
  --label <name>        Label name(s) - can be specified multiple times or comma-separated
  --project <id>        Project ID to assign the issue to
  --parent <id>         Parent issue ID or key (for creating sub-issues)
  --priority <n>        Priority {PRIORITY_HELP}
  --estimate <n>        Story point estimate
  --due-date <date>     Due date (YYYY-MM-DD format)
  --status <name>       Initial status (e.g. "Backlog", "Todo", "In Progress")
  --json                Output raw JSON
  -h, --help            Show help

Examples:
  {PROG} issue create "Fix bug" --team <team-id>
  {PROG} issue create "New feature" --team <team-id> --body "Details" --priority 2
  {PROG} issue create "Task" --team <team-id> --label bug --label p0
  echo "Long description" | {PROG} issue create "Title" --team <team-id> --body-file -
  {PROG} issue create "Sub-task" --team <team-id> --parent PROJ-123 --assignee @me""",
    ("issue", "update"): f"""\
Usage: {PROG} issue update <id-or-key> [options]

Update an issue

Arguments:
{ID_ARG}

Options:
  --status <name>       Update status
  --assignee <id>       Update assignee (use "@me" for yourself)
  --priority <n>        Update priority {PRIORITY_HELP}
  --title <text>        Update title
  --body <text>         Update description
  --body-file <file>    Read description from file (use "-" for stdin)
  --label <name>        Set label(s) - can be specified multiple times or comma-separated
  --project <id>        Assign to project
  --parent <id>         Set parent issue ID or key
  --estimate <n>        Update story point estimate
  --due-date <date>     Set due date (YYYY-MM-DD format)
  --json                Output raw JSON
  -h, --help            Show help

Examples:
  {PROG} issue update ENG-123 --status "In Progress"
  {PROG} issue update ENG-123 --assignee @me --priority 1
  {PROG} issue update ENG-123 --label bug --label urgent""",
    ("issue", "delete"): f"""\
Usage: {PROG} issue delete <id-or-key> [options]

Delete an issue (moves to trash)

Arguments:
{ID_ARG}

Options:
  --json       Output raw JSON
  -h, --help   Show help

Examples:
  {PROG} issue delete ENG-123
  {PROG} issue delete <issue-uuid>""",
    ("issue", "comment"): f"""\
Usage: {PROG} issue comment <id-or-key> <text> [options]

Add a comment to an issue

Arguments:
{ID_ARG}
  text         Comment text

Options:
  --json       Output raw JSON (comment details)
  -h, --help   Show help

Examples:
  {PROG} issue comment ENG-123 "This looks good"
  {PROG} issue comment ENG-123 "Fixed in PR #42" --json""",
}


def help_for(resource: str = "", action: str = "") -> str:
    """Most specific help available: action, then resource, then global."""
    if (resource, action) in ACTION_HELP:
        return ACTION_HELP[(resource, action)]
    if resource in RESOURCE_HELP:
        return RESOURCE_HELP[resource]
    return GLOBAL_HELP


def usage_hint(resource: str = "", action: str = "") -> str:
    target = " ".join(part for part in (PROG, resource, action) if part)
    return f"Run '{target} --help' for usage"


__all__ = ["ACTION_HELP", "GLOBAL_HELP", "RESOURCE_HELP", "help_for", "usage_hint"]
