"""Shared fixtures for proc-exec tests."""
from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def output_script(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "output.py")


@pytest.fixture
def wait_script(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "wait.py")


@pytest.fixture
def env_script(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "env.py")


@pytest.fixture
def non_zero_script(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "non_zero.py")


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def linger_script(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "linger.py")
