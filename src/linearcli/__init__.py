"""linear-cli - work with Linear issues, users, teams and projects from a shell.

Library use mirrors the CLI:

from linearcli import main
exit_code = main(["issue", "list", "--team", "<team-id>", "--json"])

The GraphQL client is importable on its own:

from linearcli.linear_api import LinearClient
client = LinearClient(api_key="lin_api_...")
print(client.viewer())
"""

from __future__ import annotations

from .argv import ParsedCommand, parse_args
from .cli import main
from .linear_api import LinearAPIError, LinearClient

# Version constant (keep in sync with pyproject)
__version__ = "0.2.0"

__all__ = [
    "LinearAPIError",
    "LinearClient",
    "ParsedCommand",
    "main",
    "parse_args",
    "__version__",
]
