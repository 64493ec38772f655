"""Thread-safe, insertion-ordered store of instantiated objects.

The cache keeps at most one record per (contract, implementation) pair unless
the record allows multiples. Inserting a second single-instance record for a
pair replaces the first, which is disposed.

All mutations and the membership checks that gate them run under one
re-entrant lock per cache. Callers needing a compound check-then-insert over
several calls may hold :meth:`ObjectCache.locked` around it.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from contractor.contracts import Disposable
from contractor.domain import ImplementationDescriptor, InstanceRecord
from contractor.errors import NullRecordError

__all__ = ["ObjectCache"]

logger = logging.getLogger(__name__)


class ObjectCache:
    """Cache of :class:`InstanceRecord` objects owned by a resolver."""

    def __init__(self):
        self._records: list[InstanceRecord] = []
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator["ObjectCache"]:
        with self._lock:
            yield self

    def insert(self, record: InstanceRecord) -> None:
        """Append a record, replacing any single-instance record for the same pair.

        The replaced record is disposed after the new one is in place, so a
        failing ``dispose`` propagates without losing the new record.

        Args:
            record: The record to insert.

        Raises:
            NullRecordError: If ``record`` is ``None``.
        """
        if record is None:
            raise NullRecordError("Cannot insert a None record into the object cache")

        with self._lock:
            replaced = None
            if not record.allow_multiple:
                replaced = self.find(record.contract, record.implementation)
                if replaced is not None:
                    self._records.remove(replaced)
            self._records.append(record)

        logger.debug(
            "Cached %s for contract '%s' (%s)",
            record.implementation.name,
            record.contract,
            record.id,
        )
        if replaced is not None:
            logger.debug(
                "Replaced cached %s for contract '%s' (%s)",
                replaced.implementation.name,
                replaced.contract,
                replaced.id,
            )
            _dispose(replaced)

    def find(
        self, contract: str, implementation: ImplementationDescriptor
    ) -> Optional[InstanceRecord]:
        with self._lock:
            return next(
                (r for r in self._records if r.matches(contract, implementation)), None
            )

    def records(self, contract: Optional[str] = None) -> list[InstanceRecord]:
        """Snapshot of the cached records, optionally restricted to one contract."""
        with self._lock:
            if contract is None:
                return list(self._records)
            return [r for r in self._records if r.contract == contract]

    def exists(self, contract: str) -> bool:
        with self._lock:
            return any(r.contract == contract for r in self._records)

    def exists_implementation(self, implementation: ImplementationDescriptor) -> bool:
        with self._lock:
            return any(r.implementation == implementation for r in self._records)

    def exists_both(self, contract: str, implementation: ImplementationDescriptor) -> bool:
        """Whether a record exists for exactly this (contract, implementation) pair.

        Raises:
            ValueError: If either argument is ``None``.
        """
        if contract is None or implementation is None:
            raise ValueError(
                "Both a contract and an implementation are required, "
                f"got contract={contract!r}, implementation={implementation!r}"
            )
        return self.find(contract, implementation) is not None

    def exists_instance(self, instance: Any) -> bool:
        with self._lock:
            return any(r.instance is instance for r in self._records)

    def clear(self) -> None:
        """Dispose every :class:`Disposable` instance, then empty the cache.

        Disposal is best-effort: an instance whose ``dispose`` raises is
        logged and still removed.
        """
        with self._lock:
            records, self._records = self._records, []

        for record in records:
            try:
                _dispose(record)
            except Exception:
                logger.exception(
                    "Failed to dispose %s cached for contract '%s'",
                    record.implementation.name,
                    record.contract,
                )
        logger.debug("Cleared %d cached records", len(records))

    def snapshot(self) -> list[str]:
        with self._lock:
            return [r.describe() for r in self._records]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _dispose(record: InstanceRecord) -> None:
    if isinstance(record.instance, Disposable):
        logger.debug("Disposing %s (%s)", record.implementation.name, record.id)
        record.instance.dispose()
