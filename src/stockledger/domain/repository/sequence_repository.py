"""Abstract repository for named document counters."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SequenceRepository(ABC):

    @abstractmethod
    def next_value(self, name: str) -> int:
        """Atomically increment the named counter and return the new value.

        The first call for a name returns 1.  Two callers never receive the
        same value, even concurrently.  A value handed out to a unit of
        work that later rolls back is not reused.
        """

    @abstractmethod
    def current_value(self, name: str) -> int:
        """Return the last value handed out, or 0 if none."""
