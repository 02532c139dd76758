"""Cross-platform child-process execution with typed outcomes."""
from proc_exec.api import (
    execute,
    execute_via_interpreter,
    prepare,
    run,
    run_via_interpreter,
)
from proc_exec.config.schema import ExecutionConfig, LocalSearch
from proc_exec.core.errors import (
    EmptyStderr,
    ErrorKind,
    ExecError,
    InvalidArgument,
    Killed,
    NonZeroExit,
    NotFound,
    SpawnFailure,
    StderrProduced,
)
from proc_exec.core.launcher import ExecutionHandle
from proc_exec.core.models import ExecResult, ProcessState, StdioMode, StreamSelector

__version__ = "0.1.0"

__all__ = [
    "execute", "execute_via_interpreter", "prepare", "run", "run_via_interpreter",
    "ExecutionConfig", "LocalSearch", "ExecutionHandle", "ExecResult",
    "ProcessState", "StdioMode", "StreamSelector", "ErrorKind", "ExecError",
    "InvalidArgument", "SpawnFailure", "NotFound", "StderrProduced",
    "NonZeroExit", "EmptyStderr", "Killed",
]
