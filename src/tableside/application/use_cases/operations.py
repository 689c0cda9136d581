from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from tableside.application.dto.requests import PlaceOrderAndBillRequest
from tableside.application.dto.responses import (
    BillResponse,
    MenuItemResponse,
    MenuResponse,
    OrderListResponse,
    OrderResponse,
    TableListResponse,
    TableResponse,
)
from tableside.application.mappers.bill_mapper import to_bill_response
from tableside.application.mappers.event_envelope import (
    ORDER_EVENTS_CHANNEL,
    TABLE_EVENTS_CHANNEL,
    serialize_bill_generated,
    serialize_bill_settled,
    serialize_order_cancelled,
    serialize_order_created,
    serialize_order_line_added,
    serialize_table_status_changed,
)
from tableside.application.mappers.menu_mapper import to_menu_item_response, to_menu_response
from tableside.application.mappers.order_mapper import to_order_list_response, to_order_response
from tableside.application.mappers.table_mapper import to_table_list_response, to_table_response
from tableside.application.metrics.order_lifecycle import (
    record_kitchen_queue_size,
    record_operation_failure,
)
from tableside.application.ports.publisher import EventPublisher
from tableside.application.stores.billing_engine import BillingEngine
from tableside.application.stores.menu_catalog import MenuCatalog
from tableside.application.stores.order_ledger import OrderLedger
from tableside.application.stores.table_registry import TableRegistry
from tableside.application.use_cases.context import TraceContext
from tableside.domain.billing.entities import Bill
from tableside.domain.billing.events import BillGenerated, BillSettled
from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError, OperationsError
from tableside.domain.common.ids import BillId, CustomerId, MenuItemId, OrderId, TableNumber
from tableside.domain.common.money import Money
from tableside.domain.menu.entities import MenuCategory, MenuItem
from tableside.domain.order.entities import Order, OrderStatus
from tableside.domain.order.events import OrderCancelled, OrderCreated, OrderLineAdded
from tableside.domain.table.entities import Table, TableStatus
from tableside.domain.table.events import TableStatusChanged
from tableside.infrastructure.observability.context import get_operation_id, operation_scope

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationsFacade:
    """Use-case entry points over the shared restaurant stores.

    Every method either completes or raises one of the
    :mod:`tableside.domain.common.errors` kinds without a visible partial
    change. Two calls are commit points: ``generate_bill`` (and the billing
    step of ``place_order_and_bill``) and ``settle_bill``. Events are
    published after a commit; a publishing failure is logged and does not
    undo it.
    """

    def __init__(
        self,
        menu_catalog: MenuCatalog,
        table_registry: TableRegistry,
        order_ledger: OrderLedger,
        billing_engine: BillingEngine,
        publisher: EventPublisher,
        clock: Callable[[], datetime] | None = None,
        currency: str = "USD",
    ) -> None:
        self._menu_catalog = menu_catalog
        self._table_registry = table_registry
        self._order_ledger = order_ledger
        self._billing_engine = billing_engine
        self._publisher = publisher
        self._clock = clock or _utcnow
        self._currency = currency
        self._table_registry.add_listener(self._on_table_status_changed)

    # Menu

    def add_menu_item(
        self,
        item_id: int,
        name: str,
        price: Money | Decimal | int | str,
        category: MenuCategory | str,
    ) -> MenuItemResponse:
        with self._operation("add_menu_item", menu_item_id=item_id):
            if not isinstance(price, Money):
                price = Money(amount=price, currency=self._currency)
            item = MenuItem(
                item_id=MenuItemId(item_id),
                name=name,
                price=price,
                category=category,  # type: ignore[arg-type]
            )
            stored = self._menu_catalog.add_item(item)
        return to_menu_item_response(stored)

    def update_menu_price(
        self, item_id: int, new_price: Money | Decimal | int | str
    ) -> MenuItemResponse:
        with self._operation("update_menu_price", menu_item_id=item_id):
            updated = self._menu_catalog.update_price(MenuItemId(item_id), new_price)
        return to_menu_item_response(updated)

    def find_menu_item(
        self, item_id: int | None = None, name: str | None = None
    ) -> MenuItemResponse:
        with self._operation("find_menu_item", menu_item_id=item_id):
            item = self._menu_catalog.find(
                item_id=MenuItemId(item_id) if item_id is not None else None,
                name=name,
            )
        return to_menu_item_response(item)

    def get_menu(self) -> MenuResponse:
        with self._operation("get_menu"):
            items = self._menu_catalog.list()
        return to_menu_response(items)

    # Tables

    def add_table(self, table_number: int, capacity: int) -> TableResponse:
        with self._operation("add_table", table_number=table_number):
            table = self._table_registry.add_table(
                Table(number=TableNumber(table_number), capacity=capacity)
            )
        return to_table_response(table)

    def get_table(self, table_number: int) -> TableResponse:
        with self._operation("get_table", table_number=table_number):
            table = self._table_registry.get(TableNumber(table_number))
        return to_table_response(table)

    def reserve_table(self, table_number: int, customer_id: int | None = None) -> TableResponse:
        with self._operation("reserve_table", table_number=table_number, customer_id=customer_id):
            table = self._table_registry.reserve(
                TableNumber(table_number),
                CustomerId(customer_id) if customer_id is not None else None,
            )
        return to_table_response(table)

    def release_table(self, table_number: int) -> TableResponse:
        """Free a table by hand; refused while an unfinished order holds it."""
        number = TableNumber(table_number)
        with self._operation("release_table", table_number=table_number):
            with self._table_registry.table_lock(number):
                self._table_registry.get(number)
                holder = self._order_ledger.active_order_for_table(number)
                if holder is not None:
                    raise InvalidStateError(
                        f"table {table_number} is held by order {holder.order_id} "
                        f"with status={holder.status.value}",
                        table_number=table_number,
                        order_id=holder.order_id,
                        status=holder.status.value,
                    )
                table = self._table_registry.release(number)
        return to_table_response(table)

    def list_free_tables(self) -> TableListResponse:
        with self._operation("list_free_tables"):
            tables = self._table_registry.list_free()
        return to_table_list_response(tables)

    def list_tables(self, status: str = "ALL") -> TableListResponse:
        with self._operation("list_tables", status=status):
            if not isinstance(status, str):
                raise InvalidArgumentError("status must be a string", status=status)
            normalized = status.upper()
            if normalized == "ALL":
                tables = self._table_registry.list()
            else:
                try:
                    table_status = TableStatus(normalized)
                except ValueError as exc:
                    raise InvalidArgumentError(
                        f"unknown table status {status!r}", status=status
                    ) from exc
                tables = self._table_registry.list(status=table_status)
        return to_table_list_response(tables)

    # Orders

    def create_order(self, customer_id: int, table_number: int) -> OrderResponse:
        with self._operation("create_order", customer_id=customer_id, table_number=table_number):
            order = self._order_ledger.create_order(
                CustomerId(customer_id), TableNumber(table_number)
            )
            event = OrderCreated(
                order_id=order.order_id,
                customer_id=order.customer_id,
                table_number=order.table_number,
                occurred_at=order.created_at,
            )
            message = serialize_order_created(event, order, self._trace())
            self._publish(ORDER_EVENTS_CHANNEL, message)
        return to_order_response(order)

    def add_item(self, order_id: int, menu_item_id: int, quantity: int) -> OrderResponse:
        with self._operation("add_item", order_id=order_id, menu_item_id=menu_item_id):
            order = self._order_ledger.add_line(
                OrderId(order_id), MenuItemId(menu_item_id), quantity
            )
            self._publish_lines_added(order, len(order.lines) - 1)
        return to_order_response(order)

    def cancel_order(self, order_id: int) -> OrderResponse:
        with self._operation("cancel_order", order_id=order_id):
            order = self._order_ledger.cancel_order(OrderId(order_id))
            event = OrderCancelled(
                order_id=order.order_id,
                table_number=order.table_number,
                occurred_at=self._clock(),
            )
            self._publish(ORDER_EVENTS_CHANNEL, serialize_order_cancelled(event, self._trace()))
        return to_order_response(order)

    def get_order(self, order_id: int) -> OrderResponse:
        with self._operation("get_order", order_id=order_id):
            order = self._order_ledger.get_order(OrderId(order_id))
        return to_order_response(order)

    def active_orders_for_customer(self, customer_id: int) -> OrderListResponse:
        with self._operation("active_orders_for_customer", customer_id=customer_id):
            orders = self._order_ledger.find_active_orders_for_customer(CustomerId(customer_id))
        return to_order_list_response(orders)

    def table_orders(self, table_number: int) -> OrderListResponse:
        with self._operation("table_orders", table_number=table_number):
            self._table_registry.get(TableNumber(table_number))
            orders = self._order_ledger.orders_for_table(TableNumber(table_number))
        return to_order_list_response(orders)

    def kitchen_queue(self) -> OrderListResponse:
        """Orders with lines that have not been billed yet, oldest first."""
        with self._operation("kitchen_queue"):
            orders = self._order_ledger.list_by_status([OrderStatus.IN_PROGRESS])
            record_kitchen_queue_size(len(orders))
        return to_order_list_response(orders)

    # Billing

    def generate_bill(self, order_id: int) -> BillResponse:
        with self._operation("generate_bill", order_id=order_id):
            bill = self._billing_engine.generate_bill(OrderId(order_id))
            self._publish_bill_generated(bill)
        return to_bill_response(bill)

    def settle_bill(self, bill_id: int, payment_method: str) -> BillResponse:
        with self._operation("settle_bill", bill_id=bill_id):
            bill = self._billing_engine.settle_bill(BillId(bill_id), payment_method)
            event = BillSettled(
                bill_id=bill.bill_id,
                order_id=bill.order_id,
                total=bill.total,
                payment_method=bill.payment_method or payment_method,
                occurred_at=bill.settled_at or self._clock(),
            )
            self._publish(ORDER_EVENTS_CHANNEL, serialize_bill_settled(event, self._trace()))
        return to_bill_response(bill)

    def get_bill(self, bill_id: int) -> BillResponse:
        with self._operation("get_bill", bill_id=bill_id):
            bill = self._billing_engine.get_bill(BillId(bill_id))
        return to_bill_response(bill)

    def get_bill_for_order(self, order_id: int) -> BillResponse:
        with self._operation("get_bill_for_order", order_id=order_id):
            bill = self._billing_engine.get_bill_for_order(OrderId(order_id))
        return to_bill_response(bill)

    def place_order_and_bill(
        self, order_id: int, request_dto: PlaceOrderAndBillRequest
    ) -> BillResponse:
        """Add a batch of lines and bill the order in one step.

        The order lock is held throughout. If any line fails validation the
        order is left untouched and no bill exists. Bill generation is the
        commit point; it cannot fail once the lines have been appended.
        """
        oid = OrderId(order_id)
        requests = [
            (MenuItemId(line.menu_item_id), line.quantity) for line in request_dto.lines
        ]
        with self._operation("place_order_and_bill", order_id=order_id):
            with self._order_ledger.order_lock(oid):
                before = len(self._order_ledger.get_order(oid).lines)
                order = self._order_ledger.add_lines(oid, requests)
                bill = self._billing_engine.generate_bill(oid)
            self._publish_lines_added(order, before)
            self._publish_bill_generated(bill)
        return to_bill_response(bill)

    # Internals

    @contextmanager
    def _operation(self, name: str, **fields: Any) -> Iterator[None]:
        extra = {key: value for key, value in fields.items() if value is not None}
        with operation_scope():
            with tracer.start_as_current_span(f"tableside.{name}") as span:
                for key, value in extra.items():
                    span.set_attribute(f"tableside.{key}", str(value))
                started = time.perf_counter()
                try:
                    yield
                except OperationsError as exc:
                    duration_ms = (time.perf_counter() - started) * 1000
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    record_operation_failure(operation=name, code=exc.code)
                    logger.warning(
                        "operation_failed",
                        extra={
                            **extra,
                            "operation": name,
                            "error_code": exc.code,
                            "duration_ms": round(duration_ms, 2),
                        },
                    )
                    raise

                duration_ms = (time.perf_counter() - started) * 1000
                logger.debug(
                    "operation_complete",
                    extra={**extra, "operation": name, "duration_ms": round(duration_ms, 2)},
                )

    def _trace(self) -> TraceContext:
        return TraceContext(trace_id=_current_trace_id(), operation_id=get_operation_id())

    def _publish(self, channel: str, message: str) -> None:
        try:
            self._publisher.publish(channel=channel, message=message)
        except Exception:
            logger.exception("event_publish_failed", extra={"operation": channel})

    def _publish_lines_added(self, order: Order, already_present: int) -> None:
        now = self._clock()
        for line in order.lines[already_present:]:
            event = OrderLineAdded(order_id=order.order_id, line=line, occurred_at=now)
            self._publish(ORDER_EVENTS_CHANNEL, serialize_order_line_added(event, self._trace()))

    def _publish_bill_generated(self, bill: Bill) -> None:
        event = BillGenerated(
            bill_id=bill.bill_id,
            order_id=bill.order_id,
            total=bill.total,
            occurred_at=bill.created_at,
        )
        self._publish(ORDER_EVENTS_CHANNEL, serialize_bill_generated(event, self._trace()))

    def _on_table_status_changed(self, event: TableStatusChanged) -> None:
        self._publish(TABLE_EVENTS_CHANNEL, serialize_table_status_changed(event, self._trace()))
