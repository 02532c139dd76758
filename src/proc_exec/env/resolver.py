"""Environment resolution for child processes.

Builds the environment mapping handed to the child: the ambient process
environment merged with caller overrides, with PATH handling that follows
the platform's case rules, an optional project-local executable directory,
and the literal flags required when running inside a frozen bundle.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING

from proc_exec.env.local_bin import find_local_bin
from proc_exec.platform.descriptor import PlatformInfo, current_platform

if TYPE_CHECKING:
    from proc_exec.config.schema import LocalSearch

PATH_KEY = "PATH"
PATHEXT_KEY = "PATHEXT"
DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"

# Forwarded verbatim to children of a frozen application so a frozen child
# does not reuse the parent's unpacked runtime.
EMBEDDED_RUNTIME_ENV: dict[str, str] = {
    "PYINSTALLER_RESET_ENVIRONMENT": "1",
}


def merge_path(first: str, second: str, separator: str = os.pathsep) -> str:
    """Concatenate two PATH values, dropping blanks and duplicates.

    Examples:
        >>> merge_path("a;b", "a;c", ";")
        'a;b;c'
        >>> merge_path("a;", ";c", ";")
        'a;c'
        >>> merge_path("", "", ";")
        ''
    """
    seen: dict[str, None] = {}
    for value in (first, second):
        for segment in value.split(separator):
            segment = segment.strip()
            if segment and segment not in seen:
                seen[segment] = None
    return separator.join(seen)


def _is_path_key(key: str, platform: PlatformInfo) -> bool:
    if platform.case_insensitive_env:
        return key.upper() == PATH_KEY
    return key == PATH_KEY


def find_path_key(env: Mapping[str, str], platform: PlatformInfo) -> str:
    """Return the spelling of the PATH key already used in *env*."""
    for key in env:
        if _is_path_key(key, platform):
            return key
    return PATH_KEY


def merge_env(
    base: Mapping[str, str],
    overrides: Mapping[str, str],
    platform: PlatformInfo | None = None,
) -> dict[str, str]:
    """Overlay *overrides* on *base*.

    On case-sensitive platforms this is a plain dict update.  Where
    variable names ignore case, every PATH-like key from both sides is
    folded into a single entry via :func:`merge_path` and other keys
    replace their base counterpart regardless of spelling.
    """
    platform = platform or current_platform()
    if not platform.case_insensitive_env:
        return {**base, **overrides}

    result: dict[str, str] = {}
    by_upper: dict[str, str] = {}
    path_key: str | None = None
    path_value = ""

    for source in (base, overrides):
        for key, value in source.items():
            upper = key.upper()
            if upper == PATH_KEY:
                if path_key is None:
                    path_key = key
                path_value = merge_path(path_value, value, platform.path_separator)
                continue
            previous = by_upper.get(upper)
            if previous is not None:
                del result[previous]
            by_upper[upper] = key
            result[key] = value

    if path_key is not None:
        result[path_key] = path_value
    return result


def merge_all_paths(env: Mapping[str, str], platform: PlatformInfo | None = None) -> str:
    """Return every PATH-like value in *env* merged into one string."""
    platform = platform or current_platform()
    merged = ""
    for key, value in env.items():
        if _is_path_key(key, platform):
            merged = merge_path(merged, value, platform.path_separator)
    return merged


def merge_all_path_exts(env: Mapping[str, str], platform: PlatformInfo | None = None) -> list[str]:
    """Return the executable extensions from PATHEXT, upper-cased and unique."""
    platform = platform or current_platform()
    merged = ""
    for key, value in env.items():
        if key.upper() == PATHEXT_KEY:
            merged = merge_path(merged, value.upper(), platform.path_separator)
    if not merged:
        merged = DEFAULT_PATHEXT
    return merged.split(platform.path_separator)


def resolve_environment(
    overrides: Mapping[str, str] | None = None,
    *,
    local: LocalSearch | None = None,
    platform: PlatformInfo | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Produce the complete environment for a child process.

    Args:
        overrides: Caller-supplied variables.
        local: When set, the nearest local executable directory is appended
            to PATH (prepended if ``local.prepend``).
        platform: Platform descriptor; defaults to the running platform.
        base: Ambient environment; defaults to ``os.environ``.
    """
    platform = platform or current_platform()
    env = merge_env(os.environ if base is None else base, overrides or {}, platform)

    if local is not None:
        bin_dir = find_local_bin(local.directory)
        key = find_path_key(env, platform)
        current = env.get(key, "")
        if local.prepend:
            env[key] = merge_path(bin_dir, current, platform.path_separator)
        else:
            env[key] = merge_path(current, bin_dir, platform.path_separator)

    if platform.embedded_runtime:
        env.update(EMBEDDED_RUNTIME_ENV)

    return env
