"""Runtime helpers for linear-cli command execution."""

from __future__ import annotations

from .commands import CommandContext, Handler
from .errors import classify_error


def execute_command(handler: Handler, ctx: CommandContext, command: str) -> int:
    """Run a handler, logging its outcome and duration.

    Exceptions are classified, logged and re-raised; rendering them for the
    user happens in ``cli.main``, so failures are logged below WARNING.
    """
    logger = ctx.logger
    with logger.timed_operation(command):
        try:
            result = handler(ctx)
        except Exception as exc:
            info = classify_error(exc)
            logger.info(
                f"command {command} failed",
                operation=command,
                category=info.category,
                error=info.message,
            )
            raise
    return int(result) if result is not None else 0


__all__ = ["execute_command"]
