from proc_exec.core.errors import ErrorKind, ExecError
from proc_exec.core.models import (
    CapturedOutput,
    ExecResult,
    ExecutionRequest,
    ProcessState,
    StdioMode,
    StreamSelector,
)

__all__ = [
    "ErrorKind", "ExecError", "CapturedOutput", "ExecResult",
    "ExecutionRequest", "ProcessState", "StdioMode", "StreamSelector",
]
