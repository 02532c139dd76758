"""Outcome decision table applied when a process closes."""
from __future__ import annotations

import logging

from proc_exec.config.schema import ExecutionConfig
from proc_exec.core.errors import (
    EmptyStderr,
    Killed,
    NonZeroExit,
    NotFound,
    StderrProduced,
)
from proc_exec.core.models import ExecResult, StreamSelector
from proc_exec.platform.windows import NormalizedCommand, not_recognized_message

logger = logging.getLogger(__name__)


def _text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").strip()
    return value


def decide_outcome(
    stdout: str | bytes,
    stderr: str | bytes,
    exit_code: int | None,
    config: ExecutionConfig,
    command: NormalizedCommand,
) -> str | bytes | ExecResult:
    """Map finalized output and an exit code to a value, or raise.

    Rules, in order:
        1. Interpreter substitution plus its "not recognized" stderr
           raises :class:`NotFound` for the original executable.
        2. No exit code, or a negative one (terminated by a signal),
           raises :class:`Killed`.
        3. The configured stream decides the rest.

    Output may be ``bytes`` when the caller asked for raw output; error
    messages always carry decoded text.

    Raises:
        ExecError: One of the typed failures above.
    """
    if command.substituted and _text(stderr) == not_recognized_message(command.original_executable):
        raise NotFound(command.original_executable, command.original_arguments)

    if exit_code is None or exit_code < 0:
        raise Killed(Killed.KILL)

    if config.stream is StreamSelector.STDOUT:
        if stderr and config.throw_on_stderr:
            raise StderrProduced(_text(stderr))
        if exit_code != 0 and not config.ignore_exit_code:
            logger.warning(
                "%s exited with code %d; stdout was: %s",
                command.original_executable, exit_code, stdout,
            )
            raise NonZeroExit(exit_code, stdout)
        return stdout

    if config.stream is StreamSelector.STDERR:
        if not stderr and not config.allow_empty_stderr:
            raise EmptyStderr(exit_code)
        return stderr

    return ExecResult(stdout=stdout, stderr=stderr, exit_code=exit_code)
