from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError
from tableside.domain.common.ids import BillId, OrderId
from tableside.domain.common.money import Money


class BillStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


@dataclass(frozen=True)
class Bill:
    bill_id: BillId
    order_id: OrderId
    total: Money
    created_at: datetime
    status: BillStatus = BillStatus.PENDING
    payment_method: str | None = None
    settled_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.status == BillStatus.PAID and self.settled_at is None:
            raise InvalidArgumentError(
                "settled_at must be set when bill status is PAID", bill_id=self.bill_id
            )
        if self.status == BillStatus.PENDING and self.settled_at is not None:
            raise InvalidArgumentError(
                "settled_at must be empty while bill is pending", bill_id=self.bill_id
            )

    def settle(self, payment_method: str, now: datetime) -> Bill:
        if self.status == BillStatus.PAID:
            raise BillSettlementError(
                f"bill {self.bill_id} is already paid",
                bill_id=self.bill_id,
                status=self.status.value,
            )
        if not isinstance(payment_method, str):
            raise InvalidArgumentError("payment method must be a string", bill_id=self.bill_id)
        method = payment_method.strip()
        if not method:
            raise InvalidArgumentError("payment method must be non-empty", bill_id=self.bill_id)
        return replace(self, status=BillStatus.PAID, payment_method=method, settled_at=now)


class BillSettlementError(InvalidStateError):
    pass
