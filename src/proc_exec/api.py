"""Public entry points: execute a program and get ``(handle, outcome)``."""
from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from proc_exec.config.schema import ExecutionConfig
from proc_exec.config.validator import validate_request
from proc_exec.core.launcher import ExecutionHandle, Outcome, ProcessLauncher
from proc_exec.core.models import ExecResult, ExecutionRequest
from proc_exec.env.resolver import resolve_environment
from proc_exec.platform.descriptor import PlatformInfo, current_platform
from proc_exec.platform.windows import (
    NormalizedCommand,
    normalize_command,
    resolve_executable,
    should_normalize,
)

logger = logging.getLogger(__name__)

Options = Mapping[str, Any] | ExecutionConfig | None


def prepare(
    request: ExecutionRequest,
    *,
    platform: PlatformInfo | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProcessLauncher:
    """Resolve environment and command for *request* without spawning it."""
    platform = platform or current_platform()
    config = request.config
    env = resolve_environment(config.env, local=config.local, platform=platform, base=environ)

    executable = request.executable
    if platform.is_windows and not config.shell:
        executable = resolve_executable(executable, env, platform)

    if should_normalize(executable, config, platform):
        command = normalize_command(executable, request.arguments, platform, env)
        logger.debug("Routing %s through %s", executable, command.executable)
    else:
        command = NormalizedCommand.passthrough(executable, request.arguments, use_shell=config.shell)

    return ProcessLauncher(request, command, env, platform=platform)


def execute(
    path: str | os.PathLike[str],
    args: Sequence[str] = (),
    options: Options = None,
    *,
    platform: PlatformInfo | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[ExecutionHandle, Outcome]:
    """Launch *path* with *args* and return ``(handle, outcome)``.

    The outcome is a :class:`concurrent.futures.Future` resolving to the
    selected stream's text (``stream="stdout"``/``"stderr"``) or an
    :class:`ExecResult` (``stream="both"``), or failing with an
    :class:`~proc_exec.core.errors.ExecError`.  Use
    ``asyncio.wrap_future`` to await it from a coroutine.

    Raises:
        InvalidArgument: Synchronously, before anything is spawned.
    """
    request = validate_request(path, args, options)
    return prepare(request, platform=platform, environ=environ).start()


def execute_via_interpreter(
    script_path: str | os.PathLike[str],
    args: Sequence[str] = (),
    options: Options = None,
    *,
    platform: PlatformInfo | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[ExecutionHandle, Outcome]:
    """Run *script_path* with the current Python interpreter."""
    request = validate_request(script_path, args, options)
    return execute(
        sys.executable,
        [request.executable, *request.arguments],
        request.config,
        platform=platform,
        environ=environ,
    )


def run(
    path: str | os.PathLike[str],
    args: Sequence[str] = (),
    options: Options = None,
    **kwargs: Any,
) -> str | bytes | ExecResult:
    """Blocking form of :func:`execute`; raises the typed failure."""
    _handle, outcome = execute(path, args, options, **kwargs)
    return outcome.result()


def run_via_interpreter(
    script_path: str | os.PathLike[str],
    args: Sequence[str] = (),
    options: Options = None,
    **kwargs: Any,
) -> str | bytes | ExecResult:
    """Blocking form of :func:`execute_via_interpreter`."""
    _handle, outcome = execute_via_interpreter(script_path, args, options, **kwargs)
    return outcome.result()
