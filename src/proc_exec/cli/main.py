"""CLI entry point for proc-exec."""
from __future__ import annotations

import argparse
import logging


def _add_execution_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--stream", choices=["stdout", "stderr", "both"], help="Output to return")
    parser.add_argument("--timeout", type=float, help="Kill the process after this many milliseconds")
    parser.add_argument("--env", action="append", default=[], metavar="KEY=VALUE",
                        help="Extra environment variable (repeatable)")
    parser.add_argument("--stdin", help="Text written to the process's standard input")
    parser.add_argument("--cwd", help="Working directory for the process")
    parser.add_argument("--local", metavar="DIR", help="Add the nearest local bin directory above DIR to PATH")
    parser.add_argument("--prepend", action="store_true", help="Prepend the --local directory instead of appending")
    parser.add_argument("--allow-stderr", action="store_true", help="Do not fail when stdout mode sees stderr output")
    parser.add_argument("--ignore-exit-code", action="store_true", help="Do not fail on a non-zero exit code")
    parser.add_argument("--allow-empty-stderr", action="store_true", help="Accept empty stderr in stderr mode")
    parser.add_argument("--shell", action="store_true", help="Run through the system shell")
    parser.add_argument("--stdio", choices=["pipe", "inherit"], help="Capture output (pipe) or share this terminal (inherit)")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Program (or script) and its arguments")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proc-exec",
        description="Run a child process and report its output",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--config", default=None, help="Config file path (default: ./proc-exec.yaml if present)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log process lifecycle events")

    sub = parser.add_subparsers(dest="command_name", help="Available commands")

    # init
    sub.add_parser("init", help="Write a proc-exec.yaml config file")

    # run
    run_p = sub.add_parser("run", help="Run a program")
    _add_execution_options(run_p)

    # script
    script_p = sub.add_parser("script", help="Run a Python script with the current interpreter")
    _add_execution_options(script_p)

    # env
    env_p = sub.add_parser("env", help="Show the PATH a child process would see")
    env_p.add_argument("--local", metavar="DIR", help="Local bin lookup start directory")
    env_p.add_argument("--prepend", action="store_true", help="Prepend the local directory")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command_name is None:
        parser.print_help()
        return 0

    if args.command_name == "init":
        from proc_exec.cli.cmd_init import cmd_init
        return cmd_init(args)

    if args.command_name in ("run", "script"):
        from proc_exec.cli.cmd_run import cmd_run
        return cmd_run(args)

    if args.command_name == "env":
        from proc_exec.cli.cmd_env import cmd_env
        return cmd_env(args)

    parser.print_help()
    return 1
