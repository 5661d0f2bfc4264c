"""Retry of whole units of work on optimistic-concurrency conflicts.

Only ``ConcurrencyConflictError`` is retried: every other domain error is
deterministic and would fail the same way again.  The wrapped callable
must open its own unit of work so each attempt starts from fresh reads.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockledger.domain.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

T = TypeVar("T")


def _log_retry(state: RetryCallState) -> None:
    logger.warning(
        "concurrency_conflict_retry",
        extra={
            "operation": getattr(state.fn, "__qualname__", repr(state.fn)),
            "attempt": state.attempt_number,
        },
    )


def run_with_retry(
    fn: Callable[..., T],
    *args,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    **kwargs,
) -> T:
    """Call *fn*, retrying on ConcurrencyConflictError.

    After *max_attempts* the last conflict is re-raised to the caller.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.01, max=0.5),
        retry=retry_if_exception_type(ConcurrencyConflictError),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(fn, *args, **kwargs)
