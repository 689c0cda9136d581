from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from tableside.application.use_cases.context import TraceContext
from tableside.domain.billing.events import BillGenerated, BillSettled
from tableside.domain.common.money import Money
from tableside.domain.order.entities import Order
from tableside.domain.order.events import OrderCancelled, OrderCreated, OrderLineAdded
from tableside.domain.table.events import TableStatusChanged

ORDER_EVENTS_CHANNEL = "events:orders"
TABLE_EVENTS_CHANNEL = "events:tables"


def _money(money: Money) -> dict[str, Any]:
    return {"amount": str(money.amount), "currency": money.currency}


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_ctx: TraceContext,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "operation_id": trace_ctx.operation_id,
        "trace_id": trace_ctx.trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def _order_payload(order: Order) -> dict[str, Any]:
    return {
        "orderId": order.order_id,
        "customerId": order.customer_id,
        "tableNumber": order.table_number,
        "status": order.status.value,
        "total": _money(order.total),
        "lineCount": len(order.lines),
    }


def serialize_order_created(event: OrderCreated, order: Order, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="order.created",
        occurred_at=event.occurred_at,
        payload=_order_payload(order),
        trace_ctx=trace_ctx,
    )


def serialize_order_line_added(event: OrderLineAdded, trace_ctx: TraceContext) -> str:
    line = event.line
    return _serialize_event(
        event_type="order.line_added",
        occurred_at=event.occurred_at,
        payload={
            "orderId": event.order_id,
            "lineId": line.line_id,
            "itemId": line.item_id,
            "name": line.name,
            "quantity": line.quantity,
            "unitPrice": _money(line.unit_price),
            "lineTotal": _money(line.line_total),
        },
        trace_ctx=trace_ctx,
    )


def serialize_order_cancelled(event: OrderCancelled, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="order.cancelled",
        occurred_at=event.occurred_at,
        payload={"orderId": event.order_id, "tableNumber": event.table_number},
        trace_ctx=trace_ctx,
    )


def serialize_bill_generated(event: BillGenerated, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="bill.generated",
        occurred_at=event.occurred_at,
        payload={
            "billId": event.bill_id,
            "orderId": event.order_id,
            "total": _money(event.total),
        },
        trace_ctx=trace_ctx,
    )


def serialize_bill_settled(event: BillSettled, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="bill.settled",
        occurred_at=event.occurred_at,
        payload={
            "billId": event.bill_id,
            "orderId": event.order_id,
            "total": _money(event.total),
            "paymentMethod": event.payment_method,
        },
        trace_ctx=trace_ctx,
    )


def serialize_table_status_changed(event: TableStatusChanged, trace_ctx: TraceContext) -> str:
    return _serialize_event(
        event_type="table.status_changed",
        occurred_at=event.occurred_at,
        payload={
            "tableNumber": event.table_number,
            "fromStatus": event.from_status.value,
            "toStatus": event.to_status.value,
        },
        trace_ctx=trace_ctx,
    )
