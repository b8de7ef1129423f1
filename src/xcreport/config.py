"""xcreport configuration management.

Handles:
- Output format selection (json or yaml)
- .env file loading with precedence: CLI > .env > env vars
- Screenshot extension priority for attachment lookup
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from xcreport.xctest.steps import DEFAULT_SCREENSHOT_EXTENSIONS


class OutputFormat(str, Enum):
    """Report artifact format."""

    JSON = "json"
    YAML = "yaml"


@dataclass
class Config:
    """xcreport runtime configuration."""

    results_dir: Path | None = None
    out_dir: Path = Path("xcreport-out")
    trees_file: Path | None = None
    output_format: OutputFormat = OutputFormat.JSON
    screenshot_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_SCREENSHOT_EXTENSIONS)
    )
    env_file_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "results_dir": str(self.results_dir) if self.results_dir else None,
            "out_dir": str(self.out_dir),
            "trees_file": str(self.trees_file) if self.trees_file else None,
            "output_format": self.output_format.value,
            "screenshot_extensions": self.screenshot_extensions,
            "env_file_path": str(self.env_file_path) if self.env_file_path else None,
        }


_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    # Unquoted values may carry a trailing " # comment"
    return value.split(" #", 1)[0].rstrip()


def parse_env_file(env_file: Path) -> dict[str, str]:
    """Read ``XCR_*`` settings (and anything else) from a .env file.

    Lines look like ``XCR_RESULTS_DIR=build/results``, optionally prefixed
    with ``export`` and with the value in single or double quotes. Blank
    lines, ``#`` comment lines and lines without ``=`` are skipped. A
    missing file yields an empty mapping.
    """
    if not env_file.is_file():
        return {}

    values: dict[str, str] = {}
    for raw in env_file.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            continue
        values[key.strip()] = _unquote(value.strip())
    return values


def _find_env_file(start: Path | None = None) -> Path | None:
    """Nearest .env at or above ``start`` (default: the working directory).

    The search does not leave the enclosing git checkout or the user's
    home directory.
    """
    here = (start or Path.cwd()).resolve()
    try:
        home: Path | None = Path.home()
    except RuntimeError:
        home = None

    for directory in (here, *here.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
        if directory == home or (directory / ".git").exists():
            return None
    return None


def _split_list(value: str) -> list[str]:
    return [v.strip().lstrip(".") for v in value.split(",") if v.strip()]


def load_config(
    env_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> Config:
    """Load configuration with precedence: CLI > .env > env vars.

    Args:
        env_file: Path to .env file to load; discovered when omitted
        cli_overrides: Values given on the command line; None entries are ignored

    Returns:
        Loaded Config instance

    Raises:
        ValueError: If an output format or extension list is invalid
    """
    cli_overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    env_vars = dict(os.environ)

    env_file_path: Path | None
    if env_file:
        env_file_path = Path(env_file)
    else:
        env_file_path = _find_env_file()
    if env_file_path and env_file_path.exists():
        env_vars.update(parse_env_file(env_file_path))
    else:
        env_file_path = None

    results_dir = cli_overrides.get("results_dir") or env_vars.get("XCR_RESULTS_DIR")
    out_dir = cli_overrides.get("out_dir") or env_vars.get("XCR_OUT_DIR") or "xcreport-out"
    trees_file = cli_overrides.get("trees_file") or env_vars.get("XCR_TREES_FILE")
    raw_format = cli_overrides.get("output_format") or env_vars.get("XCR_OUTPUT_FORMAT", "json")
    try:
        output_format = OutputFormat(raw_format.lower())
    except ValueError as e:
        raise ValueError(f"output format must be json or yaml, got {raw_format!r}") from e

    extensions = list(DEFAULT_SCREENSHOT_EXTENSIONS)
    raw_extensions = env_vars.get("XCR_SCREENSHOT_EXTENSIONS", "")
    if raw_extensions.strip():
        extensions = _split_list(raw_extensions)
        if not extensions:
            raise ValueError(f"XCR_SCREENSHOT_EXTENSIONS has no usable entries: {raw_extensions!r}")

    return Config(
        results_dir=Path(results_dir) if results_dir else None,
        out_dir=Path(out_dir),
        trees_file=Path(trees_file) if trees_file else None,
        output_format=output_format,
        screenshot_extensions=extensions,
        env_file_path=env_file_path,
    )


# Global config instance (set by CLI)
_config: Config | None = None


def get_config() -> Config:
    """Get the current configuration.

    Raises:
        RuntimeError: If config not initialized (call load_config first)
    """
    if _config is None:
        raise RuntimeError("Config not initialized. Call load_config() first.")
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration."""
    global _config
    _config = config
