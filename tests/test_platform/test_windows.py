"""Tests for Windows command normalization.

These run on every OS: the Windows descriptor is injected rather than
detected.
"""
from __future__ import annotations

import os
from pathlib import Path

import pytest

from proc_exec.config.schema import ExecutionConfig
from proc_exec.platform.descriptor import POSIX, WINDOWS
from proc_exec.platform.windows import (
    NormalizedCommand,
    normalize_command,
    not_recognized_message,
    quote,
    quote_if_needed,
    resolve_executable,
    should_normalize,
)


@pytest.mark.parametrize(
    ("executable", "expected"),
    [
        ("cmd", False),
        ("cmd.exe", False),
        ("CMD.EXE", False),
        ("C:\\Windows\\System32\\cmd.exe", False),
        ("bash.exe", True),
        ("ding", True),
        ("C:\\tools\\cmdline.exe", True),
    ],
)
def test_should_normalize_on_windows(executable: str, expected: bool) -> None:
    assert should_normalize(executable, ExecutionConfig(), WINDOWS) is expected


def test_should_not_normalize_with_shell() -> None:
    assert should_normalize("ding", ExecutionConfig(shell=True), WINDOWS) is False


def test_should_not_normalize_on_posix() -> None:
    assert should_normalize("ding", ExecutionConfig(), POSIX) is False


def test_quote_escapes_embedded_quotes() -> None:
    assert quote("plain") == '"plain"'
    assert quote('say "hi"') == '"say \\"hi\\""'


def test_quote_if_needed() -> None:
    assert quote_if_needed("tool") == "tool"
    assert quote_if_needed("C:\\Program Files\\tool.exe") == '"C:\\Program Files\\tool.exe"'


def test_normalize_command_uses_comspec() -> None:
    command = normalize_command("ding", ["a", "b c"], WINDOWS, {"ComSpec": "C:\\Windows\\cmd.exe"})
    assert command.executable == "C:\\Windows\\cmd.exe"
    assert command.arguments == ("/s", "/c", '"ding "a" "b c""')
    assert command.verbatim is True
    assert command.substituted is True
    assert command.original_executable == "ding"
    assert command.original_arguments == ("a", "b c")


def test_normalize_command_falls_back_to_interpreter() -> None:
    command = normalize_command("ding", [], WINDOWS, {})
    assert command.executable == "cmd.exe"
    assert command.arguments == ("/s", "/c", '"ding"')


def test_command_line_forms() -> None:
    command = normalize_command("C:\\My Tools\\ding.exe", ["x"], WINDOWS, {})
    assert command.command_line == 'cmd.exe /s /c ""C:\\My Tools\\ding.exe" "x""'

    passthrough = NormalizedCommand.passthrough("echo", ["hello", "world"], use_shell=True)
    assert passthrough.use_shell is True
    assert passthrough.substituted is False
    assert passthrough.argv == ["echo", "hello", "world"]
    assert passthrough.command_line == "echo hello world"


def test_not_recognized_message() -> None:
    assert not_recognized_message("ding") == (
        "'ding' is not recognized as an internal or external command,\r\n"
        "operable program or batch file."
    )


# -- resolve_executable -------------------------------------------------------


@pytest.fixture
def bin_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    directory = tmp_path / "bin"
    directory.mkdir()
    (directory / "tool.BAT").write_text("@echo off\n", encoding="utf-8")
    return directory


def test_resolve_executable_searches_path(bin_dir: Path) -> None:
    resolved = resolve_executable("tool", {"PATH": str(bin_dir)}, WINDOWS)
    assert resolved == os.path.join(str(bin_dir), "tool") + ".BAT"


def test_resolve_executable_honours_pathext(bin_dir: Path) -> None:
    environ = {"Path": str(bin_dir), "PATHEXT": ".EXE"}
    assert resolve_executable("tool", environ, WINDOWS) == "tool"


def test_resolve_executable_keeps_known_extension(bin_dir: Path) -> None:
    assert resolve_executable("tool.exe", {"PATH": str(bin_dir)}, WINDOWS) == "tool.exe"


def test_resolve_executable_with_directory_part(bin_dir: Path) -> None:
    base = str(bin_dir / "tool")
    assert resolve_executable(base, {}, WINDOWS) == base + ".BAT"


def test_resolve_executable_unmatched_is_unchanged(bin_dir: Path) -> None:
    assert resolve_executable("missing", {"PATH": str(bin_dir)}, WINDOWS) == "missing"
