from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tableside.domain.common.ids import BillId, OrderId
from tableside.domain.common.money import Money


@dataclass(frozen=True)
class BillGenerated:
    bill_id: BillId
    order_id: OrderId
    total: Money
    occurred_at: datetime


@dataclass(frozen=True)
class BillSettled:
    bill_id: BillId
    order_id: OrderId
    total: Money
    payment_method: str
    occurred_at: datetime
