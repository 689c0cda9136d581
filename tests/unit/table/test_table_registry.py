from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tableside.application.stores.table_registry import TableRegistry
from tableside.domain.common.errors import DuplicateIdError, InvalidStateError, NotFoundError
from tableside.domain.common.ids import TableNumber
from tableside.domain.table.entities import Table, TableStatus
from tableside.domain.table.events import TableStatusChanged


def _registry(*numbers: int) -> TableRegistry:
    registry = TableRegistry()
    for number in numbers:
        registry.add_table(Table(number=TableNumber(number), capacity=4))
    return registry


def test_add_table_rejects_duplicates() -> None:
    registry = _registry(1)

    with pytest.raises(DuplicateIdError):
        registry.add_table(Table(number=TableNumber(1), capacity=2))
    assert registry.get(TableNumber(1)).capacity == 4


def test_unknown_table_raises_not_found() -> None:
    registry = _registry()

    for operation in (registry.get, registry.reserve, registry.occupy, registry.release):
        with pytest.raises(NotFoundError):
            operation(TableNumber(9))


def test_reserve_twice_raises_invalid_state() -> None:
    registry = _registry(1)
    registry.reserve(TableNumber(1))

    with pytest.raises(InvalidStateError):
        registry.reserve(TableNumber(1))
    assert registry.get(TableNumber(1)).status == TableStatus.RESERVED


def test_occupy_from_occupied_raises() -> None:
    registry = _registry(1)
    registry.occupy(TableNumber(1))

    with pytest.raises(InvalidStateError):
        registry.occupy(TableNumber(1))


def test_list_free_is_a_snapshot() -> None:
    registry = _registry(1, 2, 3)
    registry.reserve(TableNumber(2))

    free = registry.list_free()
    registry.occupy(TableNumber(1))

    assert [table.number for table in free] == [1, 3]
    assert [table.number for table in registry.list_free()] == [3]
    assert [table.number for table in registry.list(status=TableStatus.OCCUPIED)] == [1]


def test_listeners_receive_status_changes() -> None:
    registry = _registry(1)
    events: list[TableStatusChanged] = []
    registry.add_listener(events.append)

    registry.reserve(TableNumber(1))
    registry.occupy(TableNumber(1))
    registry.release(TableNumber(1))
    registry.release(TableNumber(1))

    assert [(event.from_status, event.to_status) for event in events] == [
        (TableStatus.FREE, TableStatus.RESERVED),
        (TableStatus.RESERVED, TableStatus.OCCUPIED),
        (TableStatus.OCCUPIED, TableStatus.FREE),
    ]


def test_unknown_tables_do_not_allocate_locks() -> None:
    registry = _registry(1)

    for number in range(100, 150):
        with pytest.raises(NotFoundError):
            registry.reserve(TableNumber(number))
        with pytest.raises(NotFoundError):
            with registry.table_lock(TableNumber(number)):
                pass

    assert len(registry._table_locks) == 0
