"""Configuration schema dataclasses for proc-exec."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from proc_exec.core.models import StdioMode, StreamSelector


@dataclass(frozen=True)
class LocalSearch:
    """Project-local executable lookup."""

    directory: str
    prepend: bool = False


@dataclass(frozen=True)
class ExecutionConfig:
    """Fully-resolved options for one execution.

    ``timeout`` is in milliseconds; ``None`` means no limit.  ``encoding``
    ``None`` keeps captured output as raw bytes.  ``stdio=INHERIT`` wires
    the child to this process's streams and captures nothing.
    """

    stream: StreamSelector = StreamSelector.STDOUT
    timeout: float | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    stdin: str | bytes | None = None
    throw_on_stderr: bool = True
    ignore_exit_code: bool = False
    allow_empty_stderr: bool = False
    local: LocalSearch | None = None
    shell: bool = False
    cwd: str | None = None
    encoding: str | None = "utf-8"
    stdio: StdioMode = StdioMode.PIPE

    @classmethod
    def create_default(cls) -> ExecutionConfig:
        """Create a configuration with all default values."""
        return cls()

    def stdin_bytes(self) -> bytes | None:
        if self.stdin is None or isinstance(self.stdin, bytes):
            return self.stdin
        return self.stdin.encode(self.encoding or "utf-8")
