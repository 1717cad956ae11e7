"""Token-level argument parsing.

``linear-cli <resource> <action> [args...] [--flag value]... [-h]``

argparse is not used here: flags are free-form, may appear anywhere, and a
flag repeated on the command line accumulates its values instead of
overwriting them. Nothing is validated at parse time; unknown resources,
actions and flags are left for the dispatcher.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

from .errors import UsageError

# A flag is either a bare switch (True), a single value, or the ordered
# values of a flag given several times.
FlagValue = Union[bool, str, list[str]]


@dataclass
class ParsedCommand:
    resource: str = ""
    action: str = ""
    args: list[str] = field(default_factory=list)
    flags: dict[str, FlagValue] = field(default_factory=dict)

    @property
    def wants_help(self) -> bool:
        return "h" in self.flags or "help" in self.flags

    @property
    def json_output(self) -> bool:
        return "json" in self.flags

    def has_flag(self, key: str) -> bool:
        return key in self.flags

    def values(self, key: str) -> list[str]:
        """All string values given for ``key`` in order; a bare switch has none."""
        value = self.flags.get(key)
        if isinstance(value, list):
            return list(value)
        if isinstance(value, str):
            return [value]
        return []

    def text_flag(self, key: str) -> str | None:
        """Single string value of ``key`` (last one wins when repeated).

        Raises UsageError when the flag was given without a value.
        """
        if key not in self.flags:
            return None
        values = self.values(key)
        if not values:
            raise UsageError(f"--{key} requires a value")
        return values[-1]


def _add_value(flags: dict[str, FlagValue], key: str, value: str) -> None:
    current = flags.get(key)
    if isinstance(current, list):
        current.append(value)
    elif isinstance(current, str):
        flags[key] = [current, value]
    else:
        flags[key] = value


def _add_switch(flags: dict[str, FlagValue], key: str) -> None:
    # a switch never erases values already collected for the same key
    flags.setdefault(key, True)


def parse_args(argv: Sequence[str]) -> ParsedCommand:
    """Turn raw tokens (program name excluded) into a ParsedCommand."""
    cmd = ParsedCommand()
    tokens = list(argv)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--"):
            key = token[2:]
            nxt = tokens[i + 1] if i + 1 < len(tokens) else None
            if nxt is not None and not nxt.startswith("-"):
                _add_value(cmd.flags, key, nxt)
                i += 1
            else:
                _add_switch(cmd.flags, key)
        elif token.startswith("-"):
            # a lone "-" is recorded under the empty key
            _add_switch(cmd.flags, token[1:])
        elif not cmd.resource:
            cmd.resource = token
        elif not cmd.action:
            cmd.action = token
        else:
            cmd.args.append(token)
        i += 1
    return cmd


__all__ = ["FlagValue", "ParsedCommand", "parse_args"]
