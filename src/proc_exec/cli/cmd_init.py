"""proc-exec init command — writes a starter config."""
from __future__ import annotations

import argparse
from pathlib import Path

from proc_exec.config.defaults import DEFAULT_CONFIG_FILE, DEFAULT_CONFIG_YAML


def cmd_init(args: argparse.Namespace) -> int:
    target = Path(args.config or DEFAULT_CONFIG_FILE)

    if target.exists():
        print(f"Refusing to overwrite {target}; remove it to start over.")
        return 1

    target.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
    print(f"Wrote execution defaults to {target}")
    return 0
