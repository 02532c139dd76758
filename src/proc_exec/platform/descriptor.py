"""Platform capability descriptor injected into the launcher."""
from __future__ import annotations

import dataclasses
import signal
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """Describes the OS conventions the launcher relies on.

    Attributes:
        name: ``"posix"`` or ``"windows"``.
        path_separator: Separator between PATH segments.
        case_insensitive_env: Whether environment variable names ignore case.
        command_interpreter: Default command interpreter for shimmed
            executables, or ``None`` where no such convention exists.
        has_process_groups: Whether signalling a process is enough to
            tear down what it spawned.  When false the kill coordinator
            signals descendants one by one.
        kill_signal: Signal sent by a plain ``kill()``.
        embedded_runtime: The launcher itself runs inside a frozen
            application bundle.
    """

    name: str
    path_separator: str
    case_insensitive_env: bool
    command_interpreter: str | None
    has_process_groups: bool
    kill_signal: int = signal.SIGTERM
    embedded_runtime: bool = False

    @property
    def is_windows(self) -> bool:
        return self.name == "windows"


POSIX = PlatformInfo(
    name="posix",
    path_separator=":",
    case_insensitive_env=False,
    command_interpreter=None,
    has_process_groups=True,
)

WINDOWS = PlatformInfo(
    name="windows",
    path_separator=";",
    case_insensitive_env=True,
    command_interpreter="cmd.exe",
    has_process_groups=False,
)


def current_platform() -> PlatformInfo:
    """Return the descriptor for the running interpreter."""
    base = WINDOWS if sys.platform == "win32" else POSIX
    if getattr(sys, "frozen", False):
        return dataclasses.replace(base, embedded_runtime=True)
    return base
