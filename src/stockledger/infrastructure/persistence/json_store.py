"""JSON-file-backed store.

Same transactional semantics as ``InMemoryStore``; the whole state lives
in one JSON document that is re-read before every read or commit and
rewritten atomically (temp file + rename) after every commit or counter
increment.

Every refresh-check-write cycle runs under an exclusive lock on a
``<file>.lock`` sidecar, so stores in other processes (or other
``JsonFileStore`` objects on the same file) never overwrite each other's
commits or hand out the same counter value.  Version checks then catch
records that changed since a unit of work loaded them.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Iterator

from filelock import FileLock, Timeout

from stockledger.domain.exceptions import ConcurrencyConflictError
from stockledger.infrastructure.persistence import serialization
from stockledger.infrastructure.persistence.memory import (
    DEFAULT_LOCK_TIMEOUT,
    PRODUCTS,
    PURCHASES,
    SALES,
    SUPPLIERS,
    InMemoryStore,
)

_CODECS = {
    PRODUCTS: (serialization.product_to_raw, serialization.product_to_domain),
    SUPPLIERS: (serialization.supplier_to_raw, serialization.supplier_to_domain),
    SALES: (serialization.sale_to_raw, serialization.sale_to_domain),
    PURCHASES: (serialization.purchase_to_raw, serialization.purchase_to_domain),
}


class JsonFileStore(InMemoryStore):

    def __init__(self, file_path: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        super().__init__(lock_timeout=lock_timeout)
        self._file_path = file_path
        self._file_lock = FileLock(
            str(file_path.with_name(file_path.name + ".lock")), timeout=lock_timeout
        )
        self._ensure_file()

    # --- Durable hooks --------------------------------------------------------

    @contextlib.contextmanager
    def _exclusive(self) -> Iterator[None]:
        try:
            self._file_lock.acquire()
        except Timeout as exc:
            raise ConcurrencyConflictError(
                f"Timed out waiting for lock on '{self._file_lock.lock_file}'"
            ) from exc
        try:
            yield
        finally:
            self._file_lock.release()

    def _refresh(self) -> None:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        for table, (_, to_domain) in _CODECS.items():
            self._tables[table] = {
                record["id"]: to_domain(record) for record in raw.get(table, [])
            }
        self._ledger = [
            serialization.ledger_entry_to_domain(record) for record in raw.get("ledger", [])
        ]
        self._counters = {name: int(value) for name, value in raw.get("counters", {}).items()}

    def _persist(self) -> None:
        raw: dict = {
            table: [to_raw(record) for record in self._tables[table].values()]
            for table, (to_raw, _) in _CODECS.items()
        }
        raw["ledger"] = [serialization.ledger_entry_to_raw(e) for e in self._ledger]
        raw["counters"] = dict(self._counters)
        self._write_atomic(json.dumps(raw, indent=2) + "\n")

    # --- File helpers ---------------------------------------------------------

    def _write_atomic(self, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, self._exclusive():
            if not self._file_path.exists():
                self._persist()
