"""TOML config loading for lemon.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "lemon.toml"


@dataclass
class OutputConfig:
    color: bool = True
    max_errors: int = 0  # 0 shows every error


@dataclass
class FormatConfig:
    indent: int = 4


@dataclass
class LemonConfig:
    output: OutputConfig = field(default_factory=OutputConfig)
    format: FormatConfig = field(default_factory=FormatConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find lemon.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> LemonConfig:
    """Parse a lemon.toml file into a LemonConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = LemonConfig()

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(
            color=out.get("color", True),
            max_errors=out.get("max_errors", 0),
        )

    if "format" in data:
        fmt = data["format"]
        config.format = FormatConfig(
            indent=fmt.get("indent", 4),
        )

    return config


def resolve_config(start_path: Path | None = None) -> LemonConfig:
    """Load the nearest lemon.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return LemonConfig()
