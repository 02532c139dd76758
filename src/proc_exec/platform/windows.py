"""Windows command normalization.

Executables that are really batch shims (``.cmd``/``.bat``) can only be
started through ``cmd.exe``.  The launcher therefore routes everything
except the interpreter itself through ``cmd.exe /s /c "..."`` and has to
recognise the interpreter's "not recognized" message as a missing
executable afterwards.
"""
from __future__ import annotations

import ntpath
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from proc_exec.config.schema import ExecutionConfig
from proc_exec.env.resolver import merge_all_path_exts, merge_all_paths
from proc_exec.platform.descriptor import PlatformInfo

COMSPEC_KEY = "COMSPEC"

_NOT_RECOGNIZED = (
    "'{}' is not recognized as an internal or external command,\r\n"
    "operable program or batch file."
)


@dataclass(frozen=True)
class NormalizedCommand:
    """The final executable and argument vector handed to the OS.

    Attributes:
        executable: Program to start.
        arguments: Arguments after the program.
        verbatim: ``command_line`` is already fully quoted and must reach
            the OS unchanged.
        use_shell: Run ``command_line`` through the platform shell.
        substituted: The command interpreter was put in front of the
            original executable.
        original_executable: Executable before substitution.
        original_arguments: Arguments before substitution.
    """

    executable: str
    arguments: tuple[str, ...]
    verbatim: bool = False
    use_shell: bool = False
    substituted: bool = False
    original_executable: str = ""
    original_arguments: tuple[str, ...] = ()

    @classmethod
    def passthrough(
        cls, executable: str, arguments: Sequence[str], *, use_shell: bool = False
    ) -> NormalizedCommand:
        return cls(
            executable=executable,
            arguments=tuple(arguments),
            use_shell=use_shell,
            original_executable=executable,
            original_arguments=tuple(arguments),
        )

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]

    @property
    def command_line(self) -> str:
        """Single-string form used for verbatim and shell launches."""
        if self.verbatim:
            return " ".join([quote_if_needed(self.executable), *self.arguments])
        return " ".join(self.argv)


def quote(item: str) -> str:
    """Wrap *item* in double quotes, escaping embedded double quotes."""
    return '"' + item.replace('"', '\\"') + '"'


def quote_if_needed(item: str) -> str:
    if any(ch.isspace() for ch in item):
        return quote(item)
    return item


def _lookup(environ: Mapping[str, str], name: str) -> str | None:
    for key, value in environ.items():
        if key.upper() == name:
            return value
    return None


def should_normalize(executable: str, config: ExecutionConfig, platform: PlatformInfo) -> bool:
    """Return True when *executable* must be started through the interpreter."""
    if platform.command_interpreter is None or config.shell:
        return False
    stem, _ext = ntpath.splitext(ntpath.basename(executable).lower())
    return stem != "cmd"


def normalize_command(
    executable: str,
    arguments: Sequence[str],
    platform: PlatformInfo,
    environ: Mapping[str, str],
) -> NormalizedCommand:
    """Rewrite *executable* and *arguments* into a ``cmd.exe /s /c`` call."""
    interpreter = _lookup(environ, COMSPEC_KEY) or platform.command_interpreter or "cmd.exe"
    parts = [quote_if_needed(executable), *(quote(arg) for arg in arguments)]
    return NormalizedCommand(
        executable=interpreter,
        arguments=("/s", "/c", '"' + " ".join(parts) + '"'),
        verbatim=True,
        substituted=True,
        original_executable=executable,
        original_arguments=tuple(arguments),
    )


def not_recognized_message(executable: str) -> str:
    """The interpreter's stderr text for an unknown command."""
    return _NOT_RECOGNIZED.format(executable)


def resolve_executable(
    executable: str,
    environ: Mapping[str, str],
    platform: PlatformInfo,
) -> str:
    """Append the first matching PATHEXT extension to *executable*.

    Executables that already carry a known extension are returned as-is.
    Bare names are looked up in each PATH directory; names with a
    directory part are only tried in place.  Returns *executable*
    unchanged when nothing matches.
    """
    extensions = merge_all_path_exts(environ, platform)
    _root, ext = ntpath.splitext(executable)
    if ext and ext.upper() in extensions:
        return executable

    if ntpath.dirname(executable):
        directories = [""]
    else:
        directories = [""] + merge_all_paths(environ, platform).split(platform.path_separator)

    for directory in directories:
        base = os.path.join(directory, executable) if directory else executable
        for extension in extensions:
            candidate = base + extension
            if os.path.isfile(candidate):
                return candidate
    return executable
