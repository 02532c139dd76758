"""Process launcher and outcome resolver.

One :class:`ProcessLauncher` drives one child process through
``CREATED -> SPAWNING -> RUNNING -> CLOSED | KILLED | SPAWN_ERROR``.
Reader threads only append to the output buffers; the close, error,
timeout and kill paths all funnel into :meth:`ProcessLauncher._settle`,
which completes the future at most once.
"""
from __future__ import annotations

import contextlib
import logging
import subprocess
import threading
from concurrent.futures import Future, InvalidStateError
from functools import partial
from typing import IO, Any, Callable, Mapping

from proc_exec.config.schema import ExecutionConfig
from proc_exec.core.errors import ExecError, Killed, SpawnFailure
from proc_exec.core.kill import KillCoordinator
from proc_exec.core.models import (
    CapturedOutput,
    ExecResult,
    ExecutionRequest,
    ProcessState,
    StdioMode,
)
from proc_exec.core.outcome import decide_outcome
from proc_exec.platform.descriptor import PlatformInfo, current_platform
from proc_exec.platform.windows import NormalizedCommand

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024

Outcome = Future  # resolves to str | bytes | ExecResult, or fails with ExecError


class ExecutionHandle:
    """Control side of an execution: kill it and inspect its state."""

    def __init__(self, launcher: ProcessLauncher) -> None:
        self._launcher = launcher

    @property
    def pid(self) -> int | None:
        return self._launcher.pid

    @property
    def state(self) -> ProcessState:
        return self._launcher.state

    @property
    def killed(self) -> bool:
        return self._launcher.kill_coordinator.killed

    @property
    def exit_code(self) -> int | None:
        return self._launcher.exit_code

    def kill(self, sig: int | None = None) -> bool:
        """Terminate the process; see :meth:`KillCoordinator.kill`."""
        return self._launcher.kill(sig)

    def result(self, timeout: float | None = None) -> str | bytes | ExecResult:
        """Block until the outcome settles; raises the typed failure."""
        return self._launcher.future.result(timeout)


class ProcessLauncher:
    """Spawns a process and resolves its outcome exactly once.

    Args:
        request: Validated request.
        command: Final executable/arguments after platform normalization.
        environ: Complete child environment.
        platform: Platform descriptor; defaults to the running platform.
    """

    def __init__(
        self,
        request: ExecutionRequest,
        command: NormalizedCommand,
        environ: Mapping[str, str],
        platform: PlatformInfo | None = None,
    ) -> None:
        self.request = request
        self.command = command
        self.environ = dict(environ)
        self.platform = platform or current_platform()
        self.state = ProcessState.CREATED
        self.output = CapturedOutput()
        self.future: Outcome = Future()
        self.kill_coordinator = KillCoordinator(self.platform)
        self.handle = ExecutionHandle(self)
        self.pid: int | None = None
        self.exit_code: int | None = None

        self._lock = threading.Lock()
        self._settle_lock = threading.Lock()
        self._settled = False
        self._kill_cause: str | None = None
        self._timer: threading.Timer | None = None
        self.future.add_done_callback(self._on_future_done)

    @property
    def config(self) -> ExecutionConfig:
        return self.request.config

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> tuple[ExecutionHandle, Outcome]:
        """Spawn the process and wire up its event sources."""
        if self.state is not ProcessState.CREATED:
            raise RuntimeError(f"Launcher already started (state: {self.state.value})")
        self.state = ProcessState.SPAWNING

        try:
            process = self._spawn()
        except (OSError, ValueError) as exc:
            self.on_error(exc)
            return self.handle, self.future

        self.pid = process.pid
        self.state = ProcessState.RUNNING
        logger.debug("Spawned %s (pid %d)", self.command.original_executable, process.pid)

        readers: list[threading.Thread] = []
        if process.stdout is not None:
            readers.append(self._thread(self._pump, process.stdout, self.output.append_stdout, name="stdout"))
        if process.stderr is not None:
            readers.append(self._thread(self._pump, process.stderr, self.output.append_stderr, name="stderr"))
        self._feed_stdin(process.stdin)
        self.kill_coordinator.attach(process)

        if self.config.timeout is not None:
            self._timer = threading.Timer(self.config.timeout / 1000.0, self.on_timeout)
            self._timer.daemon = True
            self._timer.start()

        self._thread(self._wait, process, readers, name="wait")
        return self.handle, self.future

    def _spawn(self) -> subprocess.Popen[bytes]:
        command = self.command
        # None leaves the parent's descriptors in place.
        stdio = subprocess.PIPE if self.config.stdio is StdioMode.PIPE else None
        kwargs: dict[str, Any] = {
            "stdin": stdio,
            "stdout": stdio,
            "stderr": stdio,
            "env": self.environ,
            "cwd": self.config.cwd,
        }
        if command.use_shell:
            return subprocess.Popen(command.command_line, shell=True, **kwargs)
        if command.verbatim:
            # A string command line reaches CreateProcess without list2cmdline.
            return subprocess.Popen(command.command_line, executable=command.executable, **kwargs)
        return subprocess.Popen(command.argv, **kwargs)

    def _thread(self, target: Callable[..., None], *args: Any, name: str) -> threading.Thread:
        thread = threading.Thread(
            target=target,
            args=args,
            name=f"proc-exec-{name}-{self.pid}",
            daemon=True,
        )
        thread.start()
        return thread

    @staticmethod
    def _pump(stream: IO[bytes], append: Callable[[bytes], None]) -> None:
        with stream:
            for chunk in iter(partial(stream.read1, _CHUNK_SIZE), b""):  # type: ignore[attr-defined]
                append(chunk)

    def _feed_stdin(self, stream: IO[bytes] | None) -> None:
        if stream is None:
            return
        payload = self.config.stdin_bytes()
        if not payload:
            with contextlib.suppress(OSError):
                stream.close()
            return
        self._thread(self._write_stdin, stream, payload, name="stdin")

    @staticmethod
    def _write_stdin(stream: IO[bytes], payload: bytes) -> None:
        # The child may exit without reading its input.
        with contextlib.suppress(OSError):
            stream.write(payload)
        with contextlib.suppress(OSError):
            stream.close()

    def _wait(self, process: subprocess.Popen[bytes], readers: list[threading.Thread]) -> None:
        for reader in readers:
            reader.join()
        self.on_close(process.wait())

    # -- event sources --------------------------------------------------------

    def on_error(self, exc: BaseException) -> None:
        """The OS refused to create the process."""
        with self._lock:
            if self.state.is_terminal:
                return
            self.state = ProcessState.SPAWN_ERROR
        self._cancel_timer()
        self.kill_coordinator.detach()
        logger.debug("Failed to spawn %s: %s", self.command.original_executable, exc)
        if isinstance(exc, OSError):
            failure = SpawnFailure.from_os_error(exc, self.command.original_executable)
        else:
            failure = SpawnFailure(f"Failed to spawn {self.command.original_executable}: {exc}")
        self._settle(failure)

    def on_close(self, exit_code: int | None) -> None:
        """The process terminated and its streams are drained."""
        self._cancel_timer()
        self.kill_coordinator.detach()
        with self._lock:
            if self.state.is_terminal:
                return
            cause = self._kill_cause
            self.state = ProcessState.KILLED if cause else ProcessState.CLOSED
            self.exit_code = exit_code
        logger.debug(
            "%s (pid %s) closed with code %s",
            self.command.original_executable, self.pid, exit_code,
        )

        if cause is not None:
            self._settle(Killed(cause))
            return

        stdout, stderr = self.output.finalize(self.config.encoding)
        try:
            value = decide_outcome(stdout, stderr, exit_code, self.config, self.command)
        except ExecError as exc:
            self._settle(exc)
        else:
            self._settle(value)

    def on_timeout(self) -> None:
        """The timer fired before the process closed."""
        with self._lock:
            if self.state.is_terminal or self._kill_cause is not None:
                return
            self._kill_cause = Killed.TIMEOUT
        logger.debug("Timed out after %sms: %s", self.config.timeout, self.command.original_executable)
        try:
            self.kill_coordinator.kill()
        except OSError:
            logger.debug("Termination after timeout failed", exc_info=True)
        self._settle(Killed(Killed.TIMEOUT))

    def kill(self, sig: int | None = None) -> bool:
        """Caller-requested termination."""
        with self._lock:
            if self.state.is_terminal:
                return False
            claimed = self._kill_cause is None
            if claimed:
                self._kill_cause = Killed.KILL
        delivered = self.kill_coordinator.kill(sig)
        if not delivered and claimed:
            with self._lock:
                if not self.state.is_terminal:
                    self._kill_cause = None
        return delivered

    # -- resolution -----------------------------------------------------------

    def _settle(self, outcome: str | bytes | ExecResult | ExecError) -> bool:
        with self._settle_lock:
            if self._settled:
                return False
            self._settled = True
        with contextlib.suppress(InvalidStateError):
            if isinstance(outcome, ExecError):
                self.future.set_exception(outcome)
            else:
                self.future.set_result(outcome)
        return True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def _on_future_done(self, future: Future) -> None:
        if future.cancelled():
            logger.debug("Outcome cancelled, killing pid %s", self.pid)
            self.kill()
