"""proc-exec env command — show the resolved child PATH."""
from __future__ import annotations

import argparse

from proc_exec.config.schema import LocalSearch
from proc_exec.env.resolver import find_path_key, resolve_environment
from proc_exec.platform.descriptor import current_platform


def cmd_env(args: argparse.Namespace) -> int:
    platform = current_platform()
    local = LocalSearch(directory=args.local, prepend=args.prepend) if args.local else None
    env = resolve_environment({}, local=local, platform=platform)
    path = env.get(find_path_key(env, platform), "")
    for segment in path.split(platform.path_separator):
        if segment:
            print(segment)
    return 0
