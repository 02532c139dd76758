"""Typed failures delivered through an execution's pending outcome."""
from __future__ import annotations

from enum import Enum
from errno import ENOENT
from typing import Sequence


class ErrorKind(Enum):
    """Category of an execution failure."""

    INVALID_ARGUMENT = "invalid-argument"
    SPAWN_FAILURE = "spawn-failure"
    NOT_FOUND = "not-found"
    STDERR_PRODUCED = "stderr-produced"
    NON_ZERO_EXIT = "non-zero-exit"
    EMPTY_STDERR = "empty-stderr"
    KILLED = "killed"


class ExecError(Exception):
    """Base class for every proc-exec failure."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(ExecError, ValueError):
    """An option or request field failed validation before spawning."""

    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class SpawnFailure(ExecError):
    """The OS could not create the process."""

    kind = ErrorKind.SPAWN_FAILURE

    def __init__(
        self,
        message: str,
        *,
        errno: int | None = None,
        filename: str | None = None,
    ) -> None:
        super().__init__(message)
        self.errno = errno
        self.filename = filename

    @classmethod
    def from_os_error(cls, exc: OSError, executable: str) -> SpawnFailure:
        filename = exc.filename if exc.filename is not None else executable
        return cls(
            f"Failed to spawn {executable}: {exc.strerror or exc}",
            errno=exc.errno,
            filename=str(filename),
        )


class NotFound(SpawnFailure):
    """The command interpreter reported the wrapped executable as unknown.

    Mirrors a native ``ENOENT`` spawn error so callers handle both the same way.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, path: str, spawnargs: Sequence[str]) -> None:
        super().__init__(f"spawn {path} ENOENT", errno=ENOENT, filename=path)
        self.code = "ENOENT"
        self.syscall = f"spawn {path}"
        self.path = path
        self.spawnargs = list(spawnargs)


class StderrProduced(ExecError):
    """The process wrote to stderr while only stdout was expected."""

    kind = ErrorKind.STDERR_PRODUCED

    def __init__(self, stderr: str) -> None:
        super().__init__(stderr)
        self.stderr = stderr


class NonZeroExit(ExecError):
    kind = ErrorKind.NON_ZERO_EXIT

    def __init__(self, exit_code: int, stdout: str | bytes = "") -> None:
        super().__init__(f"Process exited with non-zero code: {exit_code}")
        self.exit_code = exit_code
        self.stdout = stdout


class EmptyStderr(ExecError):
    kind = ErrorKind.EMPTY_STDERR

    def __init__(self, exit_code: int | None) -> None:
        super().__init__(f"Process exited with no output, code: {exit_code}")
        self.exit_code = exit_code


class Killed(ExecError):
    """The process was terminated by a timeout or an explicit kill."""

    kind = ErrorKind.KILLED

    TIMEOUT = "timeout"
    KILL = "kill"

    _MESSAGES = {
        TIMEOUT: "Process execution timed out",
        KILL: "Process was killed",
    }

    def __init__(self, reason: str = KILL) -> None:
        super().__init__(self._MESSAGES[reason])
        self.reason = reason
