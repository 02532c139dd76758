"""Configuration loader for the proc-exec command line."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from proc_exec.config.defaults import DEFAULT_CONFIG_FILE
from proc_exec.config.schema import ExecutionConfig
from proc_exec.config.validator import KNOWN_OPTIONS, OPTION_ALIASES, validate_options

_log = logging.getLogger(__name__)


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _to_timeout(value: str) -> float | None:
    value = value.strip()
    if not value or value.lower() in ("none", "off"):
        return None
    return float(value)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    text = path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level in {path}, got {type(data).__name__}")
    return data


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Overlay PROC_EXEC_* environment variables onto the raw options."""
    env_mappings: list[tuple[str, str, Any]] = [
        ("PROC_EXEC_STREAM", "stream", str),
        ("PROC_EXEC_STDIO", "stdio", str),
        ("PROC_EXEC_TIMEOUT", "timeout", _to_timeout),
        ("PROC_EXEC_SHELL", "shell", _to_bool),
        ("PROC_EXEC_THROW_ON_STDERR", "throw_on_stderr", _to_bool),
        ("PROC_EXEC_IGNORE_EXIT_CODE", "ignore_exit_code", _to_bool),
        ("PROC_EXEC_ALLOW_EMPTY_STDERR", "allow_empty_stderr", _to_bool),
    ]

    for env_var, key, cast in env_mappings:
        value = os.environ.get(env_var)
        if value is None:
            continue
        raw[key] = cast(value)

    return raw


def _apply_cli_overrides(raw: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Apply CLI overrides using dot-notation keys (e.g., 'local.prepend')."""
    for dotted_key, value in overrides.items():
        parts = dotted_key.split(".")
        d = raw
        for part in parts[:-1]:
            if part not in d or not isinstance(d[part], dict):
                d[part] = {}
            d = d[part]
        last = parts[-1]
        # Mappings such as env merge into what the file already set.
        if isinstance(value, dict) and isinstance(d.get(last), dict):
            d[last] = {**d[last], **value}
        else:
            d[last] = value
    return raw


def _drop_unknown(raw: dict[str, Any], source: Path) -> dict[str, Any]:
    known: dict[str, Any] = {}
    for key, value in raw.items():
        name = OPTION_ALIASES.get(key, key)
        if name in KNOWN_OPTIONS:
            known[name] = value
        else:
            _log.warning(
                "Unknown config key '%s' in %s (known: %s) - ignored",
                key, source, ", ".join(sorted(KNOWN_OPTIONS)),
            )
    return known


def load_config(
    yaml_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> ExecutionConfig:
    """Load execution defaults from YAML, environment variables, and CLI overrides.

    Priority (highest to lowest):
        1. CLI overrides (dot-notation keys, e.g., ``local.directory``)
        2. Environment variables (``PROC_EXEC_*``)
        3. YAML file values
        4. Dataclass defaults

    Args:
        yaml_path: Path to the YAML configuration file.  If ``None``, the
            loader attempts ``proc-exec.yaml`` in the current directory; if
            that does not exist, pure defaults are used.
        cli_overrides: Optional dict of dot-notation key/value overrides from
            the command line.

    Returns:
        A validated :class:`ExecutionConfig`.

    Raises:
        FileNotFoundError: An explicit *yaml_path* does not exist.
        InvalidArgument: The merged options fail validation.
    """
    raw: dict[str, Any] = {}

    # 1. Load YAML file if available.
    if yaml_path is not None:
        if yaml_path.exists():
            raw = _drop_unknown(_load_yaml_file(yaml_path), yaml_path)
        else:
            raise FileNotFoundError(f"Config file not found: {yaml_path}")
    else:
        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            raw = _drop_unknown(_load_yaml_file(default_path), default_path)

    # 2. Overlay environment variables.
    raw = _apply_env_overrides(raw)

    # 3. Overlay CLI overrides.
    if cli_overrides:
        raw = _apply_cli_overrides(raw, cli_overrides)

    # 4. Validate into a typed config.
    return validate_options(raw)
