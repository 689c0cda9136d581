from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tableside.domain.common.ids import CustomerId, OrderId, TableNumber
from tableside.domain.order.entities import OrderLine


@dataclass(frozen=True)
class OrderCreated:
    order_id: OrderId
    customer_id: CustomerId
    table_number: TableNumber
    occurred_at: datetime


@dataclass(frozen=True)
class OrderLineAdded:
    order_id: OrderId
    line: OrderLine
    occurred_at: datetime


@dataclass(frozen=True)
class OrderCancelled:
    order_id: OrderId
    table_number: TableNumber
    occurred_at: datetime
