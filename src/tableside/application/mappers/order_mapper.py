from __future__ import annotations

from collections.abc import Sequence

from tableside.application.dto.responses import (
    OrderLineResponse,
    OrderListResponse,
    OrderResponse,
)
from tableside.application.mappers.money_mapper import to_money_response
from tableside.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=order.order_id,
        customerId=order.customer_id,
        tableNumber=order.table_number,
        status=order.status.value,
        lines=[
            OrderLineResponse(
                lineId=line.line_id,
                itemId=line.item_id,
                name=line.name,
                quantity=line.quantity,
                unitPrice=to_money_response(line.unit_price),
                lineTotal=to_money_response(line.line_total),
            )
            for line in order.lines
        ],
        total=to_money_response(order.total),
        createdAt=order.created_at,
        version=order.version,
    )


def to_order_list_response(orders: Sequence[Order]) -> OrderListResponse:
    return OrderListResponse(orders=[to_order_response(order) for order in orders])
