from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from tableside.application.metrics.order_lifecycle import (
    record_bill_generated,
    record_bill_settled,
    record_time_to_bill,
)
from tableside.application.stores.order_ledger import OrderLedger
from tableside.application.stores.table_registry import TableRegistry
from tableside.domain.billing.entities import Bill
from tableside.domain.common.errors import InvalidStateError, NotFoundError
from tableside.domain.common.ids import BillId, OrderId
from tableside.domain.order.entities import OrderStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BillingEngine:
    """Bill generation and settlement, at most one bill per order.

    Totals come from the price snapshots frozen on the order lines, never
    from the live menu. Generating a bill and settling it are the two
    points after which an order's progress is permanent.
    """

    def __init__(
        self,
        order_ledger: OrderLedger,
        table_registry: TableRegistry,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._order_ledger = order_ledger
        self._table_registry = table_registry
        self._clock = clock or _utcnow
        self._bills: dict[BillId, Bill] = {}
        self._bill_ids_by_order: dict[OrderId, BillId] = {}
        self._lock = threading.RLock()
        self._bill_ids = itertools.count(1)

    def generate_bill(self, order_id: OrderId) -> Bill:
        with self._order_ledger.order_lock(order_id):
            order = self._order_ledger.get_order(order_id)
            with self._lock:
                existing = self._bill_ids_by_order.get(order_id)
                if existing is not None:
                    raise InvalidStateError(
                        f"order {order_id} already has bill {existing}",
                        order_id=order_id,
                        bill_id=existing,
                    )
                if order.status != OrderStatus.IN_PROGRESS:
                    raise InvalidStateError(
                        f"cannot bill order {order_id} with status={order.status.value}",
                        order_id=order_id,
                        status=order.status.value,
                    )

                now = self._clock()
                bill = Bill(
                    bill_id=BillId(next(self._bill_ids)),
                    order_id=order_id,
                    total=order.total,
                    created_at=now,
                )
                self._order_ledger.mark_billed(order_id)
                self._bills[bill.bill_id] = bill
                self._bill_ids_by_order[order_id] = bill.bill_id

        record_bill_generated(bill)
        record_time_to_bill(order, now=now)
        logger.info("bill_generated", extra={"bill_id": bill.bill_id, "order_id": order_id})
        return bill

    def settle_bill(self, bill_id: BillId, payment_method: str) -> Bill:
        order_id = self.get_bill(bill_id).order_id
        table_number = self._order_ledger.get_order(order_id).table_number

        with self._table_registry.table_lock(table_number):
            with self._order_ledger.order_lock(order_id):
                with self._lock:
                    settled = self._bills[bill_id].settle(payment_method, now=self._clock())
                    self._order_ledger.mark_paid(order_id)
                    self._bills[bill_id] = settled
                self._table_registry.release(table_number)

        record_bill_settled(settled)
        logger.info(
            "bill_settled",
            extra={"bill_id": bill_id, "order_id": order_id, "table_number": table_number},
        )
        return settled

    def get_bill(self, bill_id: BillId) -> Bill:
        with self._lock:
            bill = self._bills.get(bill_id)
        if bill is None:
            raise NotFoundError(f"bill {bill_id} not found", bill_id=bill_id)
        return bill

    def get_bill_for_order(self, order_id: OrderId) -> Bill:
        with self._lock:
            bill_id = self._bill_ids_by_order.get(order_id)
            bill = self._bills.get(bill_id) if bill_id is not None else None
        if bill is None:
            raise NotFoundError(f"no bill for order {order_id}", order_id=order_id)
        return bill
