"""Tests for the kill coordinator."""
from __future__ import annotations

import signal
from unittest.mock import MagicMock, patch

import psutil

from proc_exec.core.kill import KillCoordinator
from proc_exec.platform.descriptor import POSIX, WINDOWS


class FakeProcess:
    """Records signals instead of delivering them."""

    def __init__(self, pid: int = 4242, gone: bool = False, returncode: int | None = None) -> None:
        self.pid = pid
        self.gone = gone
        self.returncode = returncode
        self.signals: list[int] = []

    def poll(self) -> int | None:
        return self.returncode

    def send_signal(self, sig: int) -> None:
        if self.gone:
            raise ProcessLookupError(self.pid)
        self.signals.append(sig)


def test_kill_after_attach_delivers_default_signal() -> None:
    coordinator = KillCoordinator(POSIX)
    process = FakeProcess()
    coordinator.attach(process)
    assert coordinator.kill() is True
    assert process.signals == [signal.SIGTERM]
    assert coordinator.killed


def test_kill_before_attach_is_latched() -> None:
    coordinator = KillCoordinator(POSIX)
    assert coordinator.kill(signal.SIGINT) is True
    assert coordinator.pending
    assert not coordinator.killed

    process = FakeProcess()
    coordinator.attach(process)
    assert process.signals == [signal.SIGINT]
    assert coordinator.killed
    assert not coordinator.pending


def test_kill_after_detach_is_refused() -> None:
    coordinator = KillCoordinator(POSIX)
    process = FakeProcess()
    coordinator.attach(process)
    coordinator.detach()
    assert coordinator.kill() is False
    assert process.signals == []


def test_latched_kill_dropped_when_closed_first() -> None:
    coordinator = KillCoordinator(POSIX)
    coordinator.kill()
    coordinator.detach()
    process = FakeProcess()
    coordinator.attach(process)
    assert process.signals == []


def test_kill_of_vanished_process_reports_false() -> None:
    coordinator = KillCoordinator(POSIX)
    coordinator.attach(FakeProcess(gone=True))
    assert coordinator.kill() is False
    assert not coordinator.killed


def test_kill_of_exited_process_reports_false() -> None:
    coordinator = KillCoordinator(WINDOWS)
    process = FakeProcess(returncode=0)
    coordinator.attach(process)
    with patch("proc_exec.core.kill.psutil.Process") as mock_process:
        assert coordinator.kill() is False
    assert process.signals == []
    assert not coordinator.killed
    mock_process.assert_not_called()


def test_posix_does_not_walk_descendants() -> None:
    coordinator = KillCoordinator(POSIX)
    coordinator.attach(FakeProcess())
    with patch("proc_exec.core.kill.psutil.Process") as mock_process:
        coordinator.kill()
    mock_process.assert_not_called()


def test_windows_signals_each_descendant() -> None:
    coordinator = KillCoordinator(WINDOWS)
    parent = FakeProcess(pid=100)
    coordinator.attach(parent)

    child = MagicMock(pid=101)
    grandchild = MagicMock(pid=102)
    same_as_parent = MagicMock(pid=100)
    invalid = MagicMock(pid=0)
    with patch("proc_exec.core.kill.psutil.Process") as mock_process:
        mock_process.return_value.children.return_value = [child, grandchild, same_as_parent, invalid]
        assert coordinator.kill() is True

    mock_process.assert_called_once_with(100)
    mock_process.return_value.children.assert_called_once_with(recursive=True)
    assert parent.signals == [signal.SIGTERM]
    child.send_signal.assert_called_once_with(signal.SIGTERM)
    grandchild.send_signal.assert_called_once_with(signal.SIGTERM)
    same_as_parent.send_signal.assert_not_called()
    invalid.send_signal.assert_not_called()


def test_windows_enumeration_failure_still_kills_parent() -> None:
    coordinator = KillCoordinator(WINDOWS)
    parent = FakeProcess(pid=100)
    coordinator.attach(parent)
    with patch("proc_exec.core.kill.psutil.Process", side_effect=psutil.NoSuchProcess(100)):
        assert coordinator.kill() is True
    assert parent.signals == [signal.SIGTERM]


def test_windows_descendant_signal_failure_is_swallowed() -> None:
    coordinator = KillCoordinator(WINDOWS)
    parent = FakeProcess(pid=100)
    coordinator.attach(parent)
    stubborn = MagicMock(pid=101)
    stubborn.send_signal.side_effect = psutil.AccessDenied(101)
    after = MagicMock(pid=102)
    with patch("proc_exec.core.kill.psutil.Process") as mock_process:
        mock_process.return_value.children.return_value = [stubborn, after]
        assert coordinator.kill() is True
    after.send_signal.assert_called_once_with(signal.SIGTERM)
