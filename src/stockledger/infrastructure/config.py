"""Runtime settings, read from the environment once at start-up.

``STOCKLEDGER_DATA_DIR``     directory holding ``ledger.json``
``STOCKLEDGER_LOG_LEVEL``    logging level name (default WARNING)
``STOCKLEDGER_LOG_FORMAT``   ``text`` or ``json`` (default text)
``STOCKLEDGER_MAX_RETRIES``  attempts per operation on version conflicts
``STOCKLEDGER_LOCK_TIMEOUT`` seconds to wait for a record lock
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

LOG_FORMATS = ("text", "json")


class ConfigurationError(Exception):
    """An environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:

    data_dir: Path = DEFAULT_DATA_DIR
    log_level: int = logging.WARNING
    log_format: str = "text"
    max_retries: int = 3
    lock_timeout: float = 10.0

    @property
    def state_file(self) -> Path:
        return self.data_dir / "ledger.json"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    level_name = env.get("STOCKLEDGER_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level '{level_name}'")

    log_format = env.get("STOCKLEDGER_LOG_FORMAT", "text").lower()
    if log_format not in LOG_FORMATS:
        raise ConfigurationError(
            f"STOCKLEDGER_LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}"
        )

    max_retries = _positive_number(env, "STOCKLEDGER_MAX_RETRIES", "3", int)
    lock_timeout = _positive_number(env, "STOCKLEDGER_LOCK_TIMEOUT", "10", float)

    data_dir = env.get("STOCKLEDGER_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        log_level=level,
        log_format=log_format,
        max_retries=max_retries,
        lock_timeout=lock_timeout,
    )


def _positive_number(env: Mapping[str, str], name: str, default: str, cast):
    raw = env.get(name, default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value
