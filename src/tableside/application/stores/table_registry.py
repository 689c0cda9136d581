from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from tableside.application.metrics.order_lifecycle import record_table_transition
from tableside.application.stores.locking import KeyedLocks
from tableside.domain.common.errors import DuplicateIdError, NotFoundError
from tableside.domain.common.ids import CustomerId, TableNumber
from tableside.domain.table.entities import Table, TableStatus
from tableside.domain.table.events import TableStatusChanged

logger = logging.getLogger(__name__)

TableListener = Callable[[TableStatusChanged], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TableRegistry:
    """Dining tables and their occupancy.

    Transitions: FREE -> RESERVED -> OCCUPIED -> FREE, plus FREE -> OCCUPIED
    for walk-ins. ``release`` is accepted from any state; callers that must
    not free a table still in use check that before calling it.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._tables: dict[TableNumber, Table] = {}
        self._lock = threading.RLock()
        self._table_locks = KeyedLocks()
        self._listeners: list[TableListener] = []
        self._clock = clock or _utcnow

    def add_listener(self, listener: TableListener) -> None:
        self._listeners.append(listener)

    @contextmanager
    def table_lock(self, table_number: TableNumber) -> Iterator[None]:
        # Tables are never removed, so a lock is only allocated for known numbers.
        self.get(table_number)
        with self._table_locks.hold(table_number):
            yield

    def add_table(self, table: Table) -> Table:
        with self._lock:
            if table.number in self._tables:
                raise DuplicateIdError(
                    f"table {table.number} already exists", table_number=table.number
                )
            self._tables[table.number] = table
        logger.info("table_added", extra={"table_number": table.number})
        return table

    def get(self, table_number: TableNumber) -> Table:
        with self._lock:
            table = self._tables.get(table_number)
        if table is None:
            raise NotFoundError(f"table {table_number} not found", table_number=table_number)
        return table

    def reserve(self, table_number: TableNumber, customer_id: CustomerId | None = None) -> Table:
        return self._transition(table_number, lambda table: table.reserve(customer_id))

    def occupy(self, table_number: TableNumber, customer_id: CustomerId | None = None) -> Table:
        return self._transition(table_number, lambda table: table.occupy(customer_id))

    def release(self, table_number: TableNumber) -> Table:
        return self._transition(table_number, lambda table: table.release())

    def list_free(self) -> list[Table]:
        return self.list(status=TableStatus.FREE)

    def list(self, status: TableStatus | None = None) -> list[Table]:
        with self._lock:
            tables = list(self._tables.values())
        if status is None:
            return tables
        return [table for table in tables if table.status == status]

    def _transition(
        self,
        table_number: TableNumber,
        change: Callable[[Table], Table],
    ) -> Table:
        with self.table_lock(table_number):
            current = self.get(table_number)
            updated = change(current)
            with self._lock:
                self._tables[table_number] = updated

            if updated.status != current.status:
                record_table_transition(from_status=current.status, to_status=updated.status)
                logger.info(
                    "table_status_changed",
                    extra={"table_number": table_number, "status": updated.status.value},
                )
                event = TableStatusChanged(
                    table_number=table_number,
                    from_status=current.status,
                    to_status=updated.status,
                    occurred_at=self._clock(),
                )
                for listener in self._listeners:
                    listener(event)
        return updated
