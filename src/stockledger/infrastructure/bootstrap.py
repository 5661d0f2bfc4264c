"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from stockledger.infrastructure.config import Settings, load_settings
from stockledger.infrastructure.logging_config import configure_logging
from stockledger.infrastructure.persistence.json_store import JsonFileStore
from stockledger.infrastructure.persistence.memory import InMemoryUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def store() -> JsonFileStore:
    cfg = settings()
    return JsonFileStore(cfg.state_file, lock_timeout=cfg.lock_timeout)


def unit_of_work() -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store())


def max_attempts() -> int:
    return settings().max_retries


def init_logging(verbose: bool = False) -> None:
    cfg = settings()
    level = min(cfg.log_level, logging.INFO) if verbose else cfg.log_level
    configure_logging(level=level, fmt=cfg.log_format)
