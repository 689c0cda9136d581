from __future__ import annotations

import concurrent.futures
import sys
import threading
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tableside.bootstrap import build_operations
from tableside.domain.common.errors import InvalidStateError


def _operations(tables: int = 1):
    operations = build_operations()
    for number in range(1, tables + 1):
        operations.add_table(table_number=number, capacity=4)
    operations.add_menu_item(1, "Pizza", Decimal("10.00"), "MAIN_COURSE")
    return operations


def test_concurrent_add_item_loses_no_lines() -> None:
    operations = _operations()
    order = operations.create_order(customer_id=42, table_number=1)
    workers = 16
    calls = 200
    barrier = threading.Barrier(workers)

    def _add(_: int) -> None:
        if _ < workers:
            barrier.wait()
        operations.add_item(order.orderId, menu_item_id=1, quantity=1)

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        list(executor.map(_add, range(calls)))

    current = operations.get_order(order.orderId)
    assert len(current.lines) == calls
    assert len({line.lineId for line in current.lines}) == calls
    assert current.version == calls + 1
    assert current.total.amount == Decimal("10.00") * calls


def test_concurrent_generate_bill_succeeds_once() -> None:
    operations = _operations()
    order = operations.create_order(customer_id=42, table_number=1)
    operations.add_item(order.orderId, menu_item_id=1, quantity=1)
    barrier = threading.Barrier(8)

    def _bill(_: int) -> str:
        barrier.wait()
        try:
            return operations.generate_bill(order.orderId).status
        except InvalidStateError:
            return "CONFLICT"

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(_bill, range(8)))

    assert sorted(results) == ["CONFLICT"] * 7 + ["PENDING"]


def test_concurrent_settle_pays_once() -> None:
    operations = _operations()
    order = operations.create_order(customer_id=42, table_number=1)
    operations.add_item(order.orderId, menu_item_id=1, quantity=1)
    bill = operations.generate_bill(order.orderId)
    barrier = threading.Barrier(4)

    def _settle(method: str) -> str:
        barrier.wait()
        try:
            return operations.settle_bill(bill.billId, method).status
        except InvalidStateError:
            return "CONFLICT"

    with concurrent.futures.ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(_settle, ["CASH", "CARD", "CASH", "CARD"]))

    assert sorted(results) == ["CONFLICT"] * 3 + ["PAID"]
    assert operations.get_table(1).status == "FREE"


def test_mixed_workload_on_many_tables_completes() -> None:
    tables = 8
    operations = _operations(tables)

    def _dine(table_number: int) -> str:
        for round_number in range(10):
            order = operations.create_order(customer_id=table_number, table_number=table_number)
            operations.add_item(order.orderId, menu_item_id=1, quantity=1)
            if round_number % 2:
                operations.cancel_order(order.orderId)
            else:
                bill = operations.generate_bill(order.orderId)
                operations.settle_bill(bill.billId, "CARD")
        return operations.get_table(table_number).status

    with concurrent.futures.ThreadPoolExecutor(max_workers=tables) as executor:
        statuses = list(executor.map(_dine, range(1, tables + 1)))

    assert statuses == ["FREE"] * tables
    assert operations.kitchen_queue().orders == []
