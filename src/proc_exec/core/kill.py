"""Kill coordination for a launched process."""
from __future__ import annotations

import logging
import threading
from typing import Protocol

import psutil

from proc_exec.platform.descriptor import PlatformInfo

logger = logging.getLogger(__name__)


class Signalable(Protocol):
    """The slice of ``subprocess.Popen`` the coordinator needs."""

    pid: int

    def send_signal(self, sig: int) -> None:
        ...

    def poll(self) -> int | None:
        ...


class KillCoordinator:
    """Delivers kill requests to a process that may not exist yet.

    A request made before :meth:`attach` is latched and delivered as soon
    as the process handle arrives.  After :meth:`detach` (process closed)
    requests are refused.  The coordinator never owns the process; it only
    holds the handle between attach and detach.
    """

    def __init__(self, platform: PlatformInfo) -> None:
        self._platform = platform
        self._lock = threading.Lock()
        self._process: Signalable | None = None
        self._pending: int | None = None
        self._closed = False
        self.killed = False

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def attach(self, process: Signalable) -> None:
        with self._lock:
            if self._closed:
                return
            self._process = process
            sig, self._pending = self._pending, None
        if sig is not None:
            logger.debug("Delivering latched signal %s to pid %d", sig, process.pid)
            self._deliver(process, sig)

    def detach(self) -> None:
        with self._lock:
            self._closed = True
            self._process = None
            self._pending = None

    def kill(self, sig: int | None = None) -> bool:
        """Send *sig* (default: the platform's terminate signal).

        Returns:
            True if the signal was delivered or latched, False when the
            process already exited or closed.
        """
        if sig is None:
            sig = self._platform.kill_signal
        with self._lock:
            if self._closed:
                return False
            process = self._process
            if process is None:
                self._pending = sig
                return True
        return self._deliver(process, sig)

    def _deliver(self, process: Signalable, sig: int) -> bool:
        # An exited child may still be draining its pipes; leave its outcome alone.
        if process.poll() is not None:
            return False

        descendants: list[psutil.Process] = []
        if not self._platform.has_process_groups:
            descendants = self._descendants(process.pid)

        try:
            process.send_signal(sig)
        except ProcessLookupError:
            return False
        self.killed = True

        for child in descendants:
            try:
                child.send_signal(sig)
            except psutil.Error:
                continue
        return True

    @staticmethod
    def _descendants(pid: int) -> list[psutil.Process]:
        """Snapshot the process tree below *pid*, best-effort."""
        try:
            children = psutil.Process(pid).children(recursive=True)
        except psutil.Error:
            logger.debug("Could not enumerate children of pid %d", pid, exc_info=True)
            return []
        return [child for child in children if child.pid > 0 and child.pid != pid]
