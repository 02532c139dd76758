"""proc-exec run/script commands — execute a program and print its output."""
from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any

from proc_exec.api import run, run_via_interpreter
from proc_exec.config.loader import load_config
from proc_exec.core.errors import ExecError, InvalidArgument, Killed
from proc_exec.core.models import ExecResult

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_TIMEOUT = 124


def collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate explicitly-given flags into dot-notation config overrides."""
    overrides: dict[str, Any] = {}
    if args.stream:
        overrides["stream"] = args.stream
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.stdin is not None:
        overrides["stdin"] = args.stdin
    if args.cwd:
        overrides["cwd"] = args.cwd
    if args.local:
        overrides["local.directory"] = args.local
        overrides["local.prepend"] = args.prepend
    if args.allow_stderr:
        overrides["throw_on_stderr"] = False
    if args.ignore_exit_code:
        overrides["ignore_exit_code"] = True
    if args.allow_empty_stderr:
        overrides["allow_empty_stderr"] = True
    if args.shell:
        overrides["shell"] = True
    if args.stdio:
        overrides["stdio"] = args.stdio
    env: dict[str, str] = {}
    for item in args.env:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidArgument("env", f"--env expects KEY=VALUE, got {item!r}")
        env[key] = value
    if env:
        # Variable names may contain dots, so they bypass dot-notation keys.
        overrides["env"] = env
    return overrides


def _text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _format(result: str | bytes | ExecResult) -> str:
    if isinstance(result, ExecResult):
        fields = {key: _text(value) if isinstance(value, bytes) else value
                  for key, value in dataclasses.asdict(result).items()}
        return json.dumps(fields, indent=2)
    return _text(result)


def cmd_run(args: argparse.Namespace) -> int:
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("No command given.", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = load_config(Path(args.config) if args.config else None, collect_overrides(args))
    except (InvalidArgument, FileNotFoundError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    runner = run_via_interpreter if args.command_name == "script" else run
    try:
        result = runner(command[0], command[1:], config)
    except InvalidArgument as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE
    except Killed as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_TIMEOUT
    except ExecError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FAILURE

    output = _format(result)
    if output:
        print(output)
    return 0
