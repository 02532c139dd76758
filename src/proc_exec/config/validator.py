"""Validation of caller-supplied execution options."""
from __future__ import annotations

import codecs
import math
import os
import threading
from collections.abc import Mapping
from typing import Any

from proc_exec.config.schema import ExecutionConfig, LocalSearch
from proc_exec.core.errors import InvalidArgument
from proc_exec.core.models import ExecutionRequest, StdioMode, StreamSelector

# camelCase spellings accepted alongside the snake_case field names.
OPTION_ALIASES: dict[str, str] = {
    "throwOnStderr": "throw_on_stderr",
    "throwOnStdErr": "throw_on_stderr",
    "ignoreExitCode": "ignore_exit_code",
    "allowEmptyStderr": "allow_empty_stderr",
    "useShell": "shell",
    "use_shell": "shell",
}

_BOOL_FIELDS = ("throw_on_stderr", "ignore_exit_code", "allow_empty_stderr", "shell")

KNOWN_OPTIONS = frozenset(
    ("stream", "timeout", "env", "stdin", "local", "cwd", "encoding", "stdio", *_BOOL_FIELDS)
)


def _canonical_key(key: Any) -> str:
    if not isinstance(key, str):
        raise InvalidArgument("options", f"option names must be strings, got {key!r}")
    return OPTION_ALIASES.get(key, key)


def _validate_stream(value: Any) -> StreamSelector:
    if isinstance(value, StreamSelector):
        return value
    try:
        return StreamSelector(value)
    except ValueError:
        raise InvalidArgument("stream", "options.stream should be stdout|stderr|both") from None


def _validate_timeout(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument("timeout", "options.timeout must be a number")
    try:
        millis = float(value)
    except OverflowError:
        millis = math.inf if value > 0 else -math.inf
    if math.isnan(millis):
        raise InvalidArgument("timeout", "options.timeout must be a number")
    if millis < 0:
        raise InvalidArgument("timeout", "options.timeout must not be negative")
    # Zero, infinity and anything past the platform wait limit mean no timer.
    if math.isinf(millis) or millis / 1000.0 > threading.TIMEOUT_MAX:
        return None
    return millis or None


def _validate_env(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidArgument("env", "options.env must be a mapping")
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise InvalidArgument("env", f"options.env entries must be strings, got {key!r}: {item!r}")
    return dict(value)


def _validate_stdin(value: Any) -> str | bytes | None:
    if value is None or isinstance(value, (str, bytes)):
        return value
    raise InvalidArgument("stdin", "options.stdin must be a string or bytes")


def _validate_local(value: Any) -> LocalSearch | None:
    if value is None:
        return None
    if isinstance(value, LocalSearch):
        return value
    if not isinstance(value, Mapping):
        raise InvalidArgument("local", "options.local must be a mapping")
    directory = value.get("directory")
    if not isinstance(directory, str):
        raise InvalidArgument("local.directory", "options.local.directory must be a string")
    prepend = value.get("prepend", False)
    if not isinstance(prepend, bool):
        raise InvalidArgument("local.prepend", "options.local.prepend must be a boolean")
    unknown = set(value) - {"directory", "prepend"}
    if unknown:
        raise InvalidArgument("local", f"Unknown options.local keys: {', '.join(sorted(unknown))}")
    return LocalSearch(directory=directory, prepend=prepend)


def _validate_cwd(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str):
        raise InvalidArgument("cwd", "options.cwd must be a string")
    return value


def _validate_stdio(value: Any) -> StdioMode:
    if isinstance(value, StdioMode):
        return value
    try:
        return StdioMode(value)
    except ValueError:
        raise InvalidArgument("stdio", "options.stdio should be pipe|inherit") from None


def _validate_encoding(value: Any) -> str | None:
    # "buffer" and None both mean raw bytes.
    if value is None or value == "buffer":
        return None
    if not isinstance(value, str):
        raise InvalidArgument("encoding", "options.encoding must be a string")
    try:
        codecs.lookup(value)
    except LookupError:
        raise InvalidArgument("encoding", f"Unknown encoding: {value}") from None
    return value


def validate_options(options: Mapping[str, Any] | ExecutionConfig | None = None) -> ExecutionConfig:
    """Normalize raw options into a fully-populated :class:`ExecutionConfig`.

    Raises:
        InvalidArgument: Naming the first offending field.
    """
    if options is None:
        return ExecutionConfig.create_default()
    if isinstance(options, ExecutionConfig):
        return options
    if not isinstance(options, Mapping):
        raise InvalidArgument("options", "options must be a mapping")

    raw: dict[str, Any] = {}
    for key, value in options.items():
        name = _canonical_key(key)
        if name not in KNOWN_OPTIONS:
            raise InvalidArgument(name, f"Unknown option: {key}")
        raw[name] = value

    for name in _BOOL_FIELDS:
        if name in raw and not isinstance(raw[name], bool):
            raise InvalidArgument(name, f"options.{name} must be a boolean")

    defaults = ExecutionConfig.create_default()
    stdio = _validate_stdio(raw.get("stdio", defaults.stdio))
    if stdio is StdioMode.INHERIT and raw.get("stdin") is not None:
        raise InvalidArgument("stdin", "options.stdin cannot be used with stdio=inherit")
    return ExecutionConfig(
        stream=_validate_stream(raw.get("stream", defaults.stream)),
        timeout=_validate_timeout(raw.get("timeout")),
        env=_validate_env(raw.get("env")),
        stdin=_validate_stdin(raw.get("stdin")),
        throw_on_stderr=raw.get("throw_on_stderr", defaults.throw_on_stderr),
        ignore_exit_code=raw.get("ignore_exit_code", defaults.ignore_exit_code),
        allow_empty_stderr=raw.get("allow_empty_stderr", defaults.allow_empty_stderr),
        local=_validate_local(raw.get("local")),
        shell=raw.get("shell", defaults.shell),
        cwd=_validate_cwd(raw.get("cwd")),
        encoding=_validate_encoding(raw.get("encoding", defaults.encoding)),
        stdio=stdio,
    )


def validate_request(
    executable: Any,
    arguments: Any = (),
    options: Mapping[str, Any] | ExecutionConfig | None = None,
) -> ExecutionRequest:
    """Validate an executable, its arguments and options in one step."""
    if isinstance(executable, os.PathLike):
        executable = os.fspath(executable)
    if not isinstance(executable, str) or not executable:
        raise InvalidArgument("executable", "executable must be a non-empty string")
    if not isinstance(arguments, (list, tuple)):
        raise InvalidArgument("arguments", "arguments must be a list of strings")
    for arg in arguments:
        if not isinstance(arg, str):
            raise InvalidArgument("arguments", f"arguments must be strings, got {arg!r}")
    return ExecutionRequest(
        executable=executable,
        arguments=tuple(arguments),
        config=validate_options(options),
    )
