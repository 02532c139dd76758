"""Default configuration template for proc-exec."""
from __future__ import annotations

DEFAULT_CONFIG_FILE = "proc-exec.yaml"

DEFAULT_CONFIG_YAML: str = """\
# proc-exec configuration
# Defaults for `proc-exec run` and `proc-exec script`; command-line flags win.

# Which output to return: stdout, stderr or both
stream: "stdout"

# Milliseconds before the process is killed; omit for no limit
# timeout: 30000

# Fail when a stdout-only run writes to stderr
throw_on_stderr: true

# Return stdout even when the exit code is non-zero
ignore_exit_code: false

# Accept an empty stderr when stream is "stderr"
allow_empty_stderr: false

# Run through the system shell instead of starting the program directly
shell: false

# "pipe" captures output; "inherit" shares this terminal and captures nothing
stdio: "pipe"

# Text encoding of captured output; "buffer" returns raw bytes
encoding: "utf-8"

# Extra environment variables for the child
env: {}

# Add the nearest node_modules/.bin or .venv/bin above a directory to PATH
# local:
#   directory: "."
#   prepend: false
"""
