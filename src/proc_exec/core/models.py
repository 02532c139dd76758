"""Core data models for proc-exec."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from proc_exec.config.schema import ExecutionConfig

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class StreamSelector(Enum):
    """Which captured stream(s) an execution resolves with."""

    STDOUT = "stdout"
    STDERR = "stderr"
    BOTH = "both"


class StdioMode(Enum):
    """How the child's standard streams are wired."""

    PIPE = "pipe"
    INHERIT = "inherit"


class ProcessState(Enum):
    """Lifecycle state of a single launched process."""

    CREATED = "created"
    SPAWNING = "spawning"
    RUNNING = "running"
    CLOSED = "closed"
    KILLED = "killed"
    SPAWN_ERROR = "spawn-error"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessState.CLOSED, ProcessState.KILLED, ProcessState.SPAWN_ERROR)


# ---------------------------------------------------------------------------
# Requests and results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExecutionRequest:
    """A validated executable + argument vector + configuration."""

    executable: str
    arguments: tuple[str, ...]
    config: ExecutionConfig


@dataclass(frozen=True)
class ExecResult:
    """Both captured streams plus the literal exit code."""

    stdout: str | bytes
    stderr: str | bytes
    exit_code: int | None


# ---------------------------------------------------------------------------
# Output capture
# ---------------------------------------------------------------------------

@dataclass
class CapturedOutput:
    """Append-only stdout/stderr chunk buffers, finalized once at close."""

    stdout: list[bytes] = field(default_factory=list)
    stderr: list[bytes] = field(default_factory=list)
    _final: tuple[str | bytes, str | bytes] | None = field(default=None, repr=False)

    @property
    def finalized(self) -> bool:
        return self._final is not None

    def append_stdout(self, chunk: bytes) -> None:
        if self._final is not None:
            raise RuntimeError("stdout buffer already finalized")
        self.stdout.append(chunk)

    def append_stderr(self, chunk: bytes) -> None:
        if self._final is not None:
            raise RuntimeError("stderr buffer already finalized")
        self.stderr.append(chunk)

    def finalize(self, encoding: str | None = "utf-8") -> tuple[str | bytes, str | bytes]:
        """Join, decode and strip both buffers.

        With *encoding* ``None`` the joined bytes are returned untouched.
        Later calls return the first result unchanged.
        """
        if self._final is None:
            stdout = b"".join(self.stdout)
            stderr = b"".join(self.stderr)
            if encoding is None:
                self._final = (stdout, stderr)
            else:
                self._final = (
                    stdout.decode(encoding, errors="replace").strip(),
                    stderr.decode(encoding, errors="replace").strip(),
                )
        return self._final
