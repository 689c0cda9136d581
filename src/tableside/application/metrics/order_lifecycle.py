from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Gauge, Histogram

from tableside.domain.billing.entities import Bill
from tableside.domain.order.entities import Order, OrderStatus
from tableside.domain.table.entities import TableStatus

ORDERS_TOTAL = Counter(
    "tableside_orders_total",
    "Total number of orders observed by status.",
    ["status"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "tableside_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_LINES_ADDED_TOTAL = Counter(
    "tableside_order_lines_added_total",
    "Total number of order lines added.",
)

ORDER_TIME_TO_BILL_SECONDS = Histogram(
    "tableside_order_time_to_bill_seconds",
    "Time between order creation and bill generation.",
)

TABLE_TRANSITION_TOTAL = Counter(
    "tableside_table_transition_total",
    "Total number of table status transitions.",
    ["from", "to"],
)

BILLS_GENERATED_TOTAL = Counter(
    "tableside_bills_generated_total",
    "Total number of bills generated.",
)

BILLS_SETTLED_TOTAL = Counter(
    "tableside_bills_settled_total",
    "Total number of bills settled by payment method.",
    ["payment_method"],
)

BILLED_AMOUNT_TOTAL = Counter(
    "tableside_billed_amount_total",
    "Sum of generated bill totals in major currency units.",
    ["currency"],
)

KITCHEN_QUEUE_SIZE = Gauge(
    "tableside_kitchen_queue_size",
    "Current number of orders returned by kitchen queue queries.",
)

OPERATION_FAILURES_TOTAL = Counter(
    "tableside_operation_failures_total",
    "Total number of facade operations that failed, by error code.",
    ["operation", "code"],
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(status=order.status.value).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_line_added() -> None:
    ORDER_LINES_ADDED_TOTAL.inc()


def record_time_to_bill(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_BILL_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_table_transition(from_status: TableStatus, to_status: TableStatus) -> None:
    TABLE_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_bill_generated(bill: Bill) -> None:
    BILLS_GENERATED_TOTAL.inc()
    BILLED_AMOUNT_TOTAL.labels(currency=bill.total.currency).inc(float(bill.total.amount))


def record_bill_settled(bill: Bill) -> None:
    BILLS_SETTLED_TOTAL.labels(payment_method=bill.payment_method or "UNKNOWN").inc()


def record_kitchen_queue_size(size: int) -> None:
    KITCHEN_QUEUE_SIZE.set(size)


def record_operation_failure(operation: str, code: str) -> None:
    OPERATION_FAILURES_TOTAL.labels(operation=operation, code=code).inc()
