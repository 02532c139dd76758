"""Smoke tests for CLI."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from proc_exec.cli.main import build_parser, main


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for var in ("PROC_EXEC_STREAM", "PROC_EXEC_TIMEOUT", "PROC_EXEC_SHELL",
                "PROC_EXEC_THROW_ON_STDERR", "PROC_EXEC_IGNORE_EXIT_CODE",
                "PROC_EXEC_ALLOW_EMPTY_STDERR", "PROC_EXEC_STDIO"):
        monkeypatch.delenv(var, raising=False)


def test_parser_builds() -> None:
    parser = build_parser()
    assert parser is not None


def test_no_command_returns_zero() -> None:
    assert main([]) == 0


def test_version_flag() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_init_creates_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "proc-exec.yaml"
    result = main(["--config", str(config_path), "init"])
    assert result == 0
    assert "Wrote execution defaults" in capsys.readouterr().out
    assert config_path.exists()
    assert "stream:" in config_path.read_text(encoding="utf-8")


def test_init_fails_if_exists(tmp_path: Path) -> None:
    config_path = tmp_path / "proc-exec.yaml"
    config_path.write_text("existing")
    result = main(["--config", str(config_path), "init"])
    assert result == 1


def test_run_prints_stdout(output_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["run", sys.executable, output_script]) == 0
    assert capsys.readouterr().out.strip() == "STDOUT"


def test_run_both_prints_json(output_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["run", "--stream", "both", sys.executable, output_script, "error"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"stdout": "STDOUT", "stderr": "STDERR", "exit_code": 0}


def test_run_passes_env(env_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    argv = ["run", "--env", "SOMETHING=a=b", "--env", "SOMETHING_ELSE=c", sys.executable, env_script]
    assert main(argv) == 0
    assert capsys.readouterr().out.split() == ["a=b", "c"]


def test_run_reads_config_file(output_script: str, tmp_path: Path,
                               capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "proc-exec.yaml").write_text("stream: stderr\n", encoding="utf-8")
    assert main(["run", sys.executable, output_script, "error"]) == 0
    assert capsys.readouterr().out.strip() == "STDERR"


def test_script_uses_interpreter(output_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["script", "--stdin", "hi", output_script, "input"]) == 0
    assert capsys.readouterr().out.strip() == "STDOUThi"


def test_run_failure_exit_code(non_zero_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["run", sys.executable, non_zero_script]) == 1
    assert "non-zero code: 2" in capsys.readouterr().err


def test_run_timeout_exit_code(wait_script: str) -> None:
    assert main(["run", "--timeout", "200", sys.executable, wait_script, "3000"]) == 124


def test_run_without_command() -> None:
    assert main(["run"]) == 2


def test_run_bad_env_flag(output_script: str) -> None:
    assert main(["run", "--env", "NOVALUE", sys.executable, output_script]) == 2


def test_run_missing_config(output_script: str, tmp_path: Path) -> None:
    assert main(["--config", str(tmp_path / "absent.yaml"), "run", sys.executable, output_script]) == 2


def test_env_lists_local_bin(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bin_dir = tmp_path / "node_modules" / ".bin"
    bin_dir.mkdir(parents=True)
    assert main(["env", "--local", str(tmp_path), "--prepend"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == str(bin_dir.resolve())


def test_run_env_name_with_dot(capsys: pytest.CaptureFixture[str]) -> None:
    code = "import os; print(os.environ['SOMETHING.X'])"
    assert main(["run", "--env", "SOMETHING.X=1", "--", sys.executable, "-c", code]) == 0
    assert capsys.readouterr().out.strip() == "1"


def test_run_env_flags_merge_with_config(env_script: str, tmp_path: Path,
                                         capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "proc-exec.yaml").write_text("env:\n  SOMETHING: from-file\n", encoding="utf-8")
    assert main(["run", "--env", "SOMETHING_ELSE=from-flag", sys.executable, env_script]) == 0
    assert capsys.readouterr().out.split() == ["from-file", "from-flag"]


def test_run_inherited_stdio_prints_nothing(env_script: str, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["run", "--stdio", "inherit", sys.executable, env_script]) == 0
    assert capsys.readouterr().out == ""
