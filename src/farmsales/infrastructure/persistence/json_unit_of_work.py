"""JSON-file-backed implementation of UnitOfWork.

All collections live in one JSON document. A unit of work holds two locks
from ``__enter__`` to ``__exit__``: a per-path RLock for threads of this
process, and an exclusive lock on the ``farmsales.json.lock`` sidecar file
for other processes (two CLI commands run side by side). It works on an
in-memory copy, and ``commit()`` replaces the file in one ``os.replace``
call. Readers therefore see either every effect of a transition or none
of them.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from filelock import FileLock, Timeout

from farmsales.domain.repository.receipt_sequence import (
    ReceiptSequence,
    format_on_demand_receipt_no,
    format_receipt_no,
)
from farmsales.domain.repository.unit_of_work import UnitOfWork
from farmsales.infrastructure.persistence.json_assignment_repository import (
    JsonAssignmentRepository,
)
from farmsales.infrastructure.persistence.json_document import empty_document, next_sequence
from farmsales.infrastructure.persistence.json_order_repository import JsonOrderRepository
from farmsales.infrastructure.persistence.json_product_repository import JsonProductRepository

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0

_locks: dict[Path, tuple[threading.RLock, FileLock]] = {}
_locks_guard = threading.Lock()


def _locks_for(path: Path) -> tuple[threading.RLock, FileLock]:
    """One RLock and one FileLock per store, shared by every unit of work on it."""
    with _locks_guard:
        if path not in _locks:
            _locks[path] = (threading.RLock(), FileLock(f"{path}.lock"))
        return _locks[path]


class JsonReceiptSequence(ReceiptSequence):

    def __init__(self, document: dict) -> None:
        self._document = document

    def next_receipt_no(self) -> str:
        return format_receipt_no(next_sequence(self._document, "receipt"))

    def next_on_demand_receipt_no(self) -> str:
        return format_on_demand_receipt_no(next_sequence(self._document, "on_demand_receipt"))


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, file_path: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._file_path = file_path.resolve()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock, self._file_lock = _locks_for(self._file_path)
        self._lock_timeout = lock_timeout
        self._document: dict | None = None
        self._acquire()
        try:
            self._ensure_file()
        finally:
            self._release()

    # --- UnitOfWork interface -------------------------------------------------

    def _begin(self) -> None:
        self._acquire()
        try:
            self._bind(self._load())
        except BaseException:
            self._release()
            raise

    def _end(self) -> None:
        self._document = None
        self._release()

    def commit(self) -> None:
        if self._document is None:
            raise RuntimeError("commit() called outside of a unit of work")
        self._persist(self._document)
        logger.debug(f"Committed {self._file_path.name}")

    def rollback(self) -> None:
        if self._document is not None:
            self._bind(self._load())

    # --- Locking --------------------------------------------------------------

    def _acquire(self) -> None:
        self._lock.acquire()
        try:
            self._file_lock.acquire(timeout=self._lock_timeout)
        except Timeout:
            self._lock.release()
            logger.error(
                f"{self._file_path.name} is locked by another process "
                f"(waited {self._lock_timeout}s)"
            )
            raise
        except BaseException:
            self._lock.release()
            raise

    def _release(self) -> None:
        try:
            self._file_lock.release()
        finally:
            self._lock.release()

    # --- File helpers ---------------------------------------------------------

    def _bind(self, document: dict) -> None:
        self._document = document
        self.products = JsonProductRepository(document)
        self.orders = JsonOrderRepository(document)
        self.assignments = JsonAssignmentRepository(document)
        self.receipts = JsonReceiptSequence(document)

    def _load(self) -> dict:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist(self, document: dict) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(document, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._persist(empty_document())
