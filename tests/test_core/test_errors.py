"""Tests for the typed error hierarchy."""
from __future__ import annotations

import errno

from proc_exec.core.errors import (
    ErrorKind,
    ExecError,
    InvalidArgument,
    Killed,
    NotFound,
    SpawnFailure,
)


def test_invalid_argument_is_value_error() -> None:
    err = InvalidArgument("stream", "options.stream should be stdout|stderr|both")
    assert isinstance(err, ValueError)
    assert isinstance(err, ExecError)
    assert err.field == "stream"
    assert err.kind is ErrorKind.INVALID_ARGUMENT


def test_spawn_failure_from_os_error() -> None:
    exc = FileNotFoundError(errno.ENOENT, "No such file or directory", "/nope")
    err = SpawnFailure.from_os_error(exc, "/nope")
    assert err.errno == errno.ENOENT
    assert err.filename == "/nope"
    assert "No such file or directory" in err.message


def test_not_found_mirrors_native_enoent() -> None:
    err = NotFound("ding", ["a", "b"])
    assert isinstance(err, SpawnFailure)
    assert err.errno == errno.ENOENT
    assert err.code == "ENOENT"
    assert err.kind is ErrorKind.NOT_FOUND
    assert str(err) == "spawn ding ENOENT"


def test_killed_messages() -> None:
    assert str(Killed(Killed.TIMEOUT)) == "Process execution timed out"
    assert str(Killed()) == "Process was killed"
    assert Killed().reason == Killed.KILL
