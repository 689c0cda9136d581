from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone

from tableside.application.metrics.order_lifecycle import (
    record_line_added,
    record_order_status,
    record_transition,
)
from tableside.application.stores.locking import KeyedLocks
from tableside.application.stores.menu_catalog import MenuCatalog
from tableside.application.stores.table_registry import TableRegistry
from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from tableside.domain.common.ids import CustomerId, MenuItemId, OrderId, OrderLineId, TableNumber
from tableside.domain.order.entities import (
    ACTIVE_STATUSES,
    Order,
    OrderLine,
    OrderStatus,
    OrderTransitionError,
    create_order,
    create_order_line,
)

logger = logging.getLogger(__name__)

LineRequest = tuple[MenuItemId, int]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidArgumentError("quantity must be an integer", quantity=quantity)
    if quantity < 1:
        raise InvalidArgumentError("quantity must be >= 1", quantity=quantity)


class OrderLedger:
    """Orders, their lines, and the order state machine.

    CREATED -> IN_PROGRESS -> BILLED -> PAID, and CREATED/IN_PROGRESS ->
    CANCELLED. ``mark_billed`` and ``mark_paid`` are driven by
    :class:`~tableside.application.stores.billing_engine.BillingEngine`.

    Locks are taken in the order table, then order, then this ledger's map
    lock. Every mutation of one order runs under that order's lock.
    """

    def __init__(
        self,
        menu_catalog: MenuCatalog,
        table_registry: TableRegistry,
        clock: Callable[[], datetime] | None = None,
        currency: str = "USD",
    ) -> None:
        self._menu_catalog = menu_catalog
        self._table_registry = table_registry
        self._clock = clock or _utcnow
        self._currency = currency
        self._orders: dict[OrderId, Order] = {}
        self._lock = threading.RLock()
        self._order_locks = KeyedLocks()
        self._order_ids = itertools.count(1)
        self._line_ids = itertools.count(1)

    @contextmanager
    def order_lock(self, order_id: OrderId) -> Iterator[None]:
        # Orders are never removed, so a lock is only allocated for known ids.
        self.get_order(order_id)
        with self._order_locks.hold(order_id):
            yield

    def create_order(self, customer_id: CustomerId, table_number: TableNumber) -> Order:
        with self._table_registry.table_lock(table_number):
            self._table_registry.get(table_number)
            holder = self.active_order_for_table(table_number)
            if holder is not None:
                raise InvalidStateError(
                    f"table {table_number} is held by order {holder.order_id}",
                    table_number=table_number,
                    order_id=holder.order_id,
                )
            self._table_registry.occupy(table_number, customer_id)

            with self._lock:
                order = create_order(
                    order_id=OrderId(next(self._order_ids)),
                    customer_id=customer_id,
                    table_number=table_number,
                    now=self._clock(),
                    currency=self._currency,
                )
                self._orders[order.order_id] = order

        record_order_status(order)
        logger.info(
            "order_created",
            extra={
                "order_id": order.order_id,
                "customer_id": customer_id,
                "table_number": table_number,
            },
        )
        return order

    def add_line(self, order_id: OrderId, menu_item_id: MenuItemId, quantity: int) -> Order:
        return self.add_lines(order_id, [(menu_item_id, quantity)])

    def add_lines(self, order_id: OrderId, requests: Sequence[LineRequest]) -> Order:
        """Append all lines or none of them.

        Every request is validated and priced before the order is touched, so
        a failure on any line leaves the order exactly as it was.
        """
        if not requests:
            raise InvalidArgumentError("at least one line is required", order_id=order_id)
        for _, quantity in requests:
            _validate_quantity(quantity)

        with self.order_lock(order_id):
            order = self.get_order(order_id)
            if order.status not in ACTIVE_STATUSES:
                raise OrderTransitionError(
                    f"order {order_id} lines are frozen with status={order.status.value}",
                    order_id=order_id,
                    status=order.status.value,
                )

            lines = [self._price_line(item_id, quantity) for item_id, quantity in requests]

            updated = order
            for line in lines:
                updated = updated.with_line(line)
            with self._lock:
                self._orders[order_id] = updated

        if order.status != updated.status:
            record_transition(from_status=order.status, to_status=updated.status)
            record_order_status(updated)
        for line in lines:
            record_line_added()
            logger.info(
                "order_line_added",
                extra={"order_id": order_id, "menu_item_id": line.item_id},
            )
        return updated

    def cancel_order(self, order_id: OrderId) -> Order:
        table_number = self.get_order(order_id).table_number
        with self._table_registry.table_lock(table_number):
            with self.order_lock(order_id):
                cancelled = self._apply(order_id, lambda order: order.cancel())
                self._table_registry.release(table_number)

        logger.info("order_cancelled", extra={"order_id": order_id, "table_number": table_number})
        return cancelled

    def mark_billed(self, order_id: OrderId) -> Order:
        with self.order_lock(order_id):
            return self._apply(order_id, lambda order: order.mark_billed())

    def mark_paid(self, order_id: OrderId) -> Order:
        with self.order_lock(order_id):
            return self._apply(order_id, lambda order: order.mark_paid())

    def get_order(self, order_id: OrderId) -> Order:
        with self._lock:
            order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f"order {order_id} not found", order_id=order_id)
        return order

    def find_active_orders_for_customer(self, customer_id: CustomerId) -> list[Order]:
        return [
            order
            for order in self._snapshot()
            if order.customer_id == customer_id and order.status in ACTIVE_STATUSES
        ]

    def list_by_status(self, statuses: Iterable[OrderStatus]) -> list[Order]:
        wanted = frozenset(statuses)
        orders = [order for order in self._snapshot() if order.status in wanted]
        return sorted(orders, key=lambda order: (order.created_at, order.order_id))

    def orders_for_table(self, table_number: TableNumber) -> list[Order]:
        return [order for order in self._snapshot() if order.table_number == table_number]

    def active_order_for_table(self, table_number: TableNumber) -> Order | None:
        for order in self._snapshot():
            if order.table_number == table_number and order.holds_table:
                return order
        return None

    def _snapshot(self) -> list[Order]:
        with self._lock:
            return list(self._orders.values())

    def _price_line(self, menu_item_id: MenuItemId, quantity: int) -> OrderLine:
        menu_item = self._menu_catalog.find(item_id=menu_item_id)
        with self._lock:
            line_id = OrderLineId(next(self._line_ids))
        return create_order_line(
            line_id=line_id,
            item_id=menu_item.item_id,
            name=menu_item.name,
            quantity=quantity,
            unit_price=menu_item.price,
        )

    def _apply(self, order_id: OrderId, change: Callable[[Order], Order]) -> Order:
        current = self.get_order(order_id)
        updated = change(current)
        with self._lock:
            self._orders[order_id] = updated
        record_transition(from_status=current.status, to_status=updated.status)
        record_order_status(updated)
        return updated
