"""Configuration loading from environment variables and ulc.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from ulc.errors import ConfigError

_DEFAULT_LEDGER_DIR = Path.home() / ".ulc" / "ledger"
_CONFIG_FILENAME = "ulc.toml"


@dataclass
class UlcConfig:
    """Top-level ulc configuration."""

    ledger_dir: Path = _DEFAULT_LEDGER_DIR
    log_level: str = "WARNING"


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to load config: {path}\n{e}") from e


def load_config(config_path: Path | None = None) -> UlcConfig:
    """Load configuration from environment variables and optional ulc.toml.

    Priority: environment variables > ulc.toml > defaults. The --ledger-dir
    flag is applied on top of this by the CLI.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = _read_toml(config_path)
    else:
        # Search current dir and ~/.ulc/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".ulc" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = _read_toml(candidate)
                break

    ledger_dir = os.getenv("ULC_LEDGER_DIR", file_data.get("ledger_dir", str(_DEFAULT_LEDGER_DIR)))
    return UlcConfig(
        ledger_dir=Path(ledger_dir).expanduser(),
        log_level=os.getenv("ULC_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
