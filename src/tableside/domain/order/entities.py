from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError
from tableside.domain.common.ids import CustomerId, MenuItemId, OrderId, OrderLineId, TableNumber
from tableside.domain.common.money import Money


class OrderStatus(str, Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    BILLED = "BILLED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


# Lines may only be added while the order is in one of these.
ACTIVE_STATUSES = frozenset({OrderStatus.CREATED, OrderStatus.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.CANCELLED})


@dataclass(frozen=True)
class OrderLine:
    line_id: OrderLineId
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise InvalidArgumentError("quantity must be >= 1", quantity=self.quantity)
        if self.line_total != self.unit_price.times(self.quantity):
            raise InvalidArgumentError("line_total must equal unit_price * quantity")


def create_order_line(
    line_id: OrderLineId,
    item_id: MenuItemId,
    name: str,
    quantity: int,
    unit_price: Money,
) -> OrderLine:
    if quantity < 1:
        raise InvalidArgumentError("quantity must be >= 1", quantity=quantity)
    return OrderLine(
        line_id=line_id,
        item_id=item_id,
        name=name,
        quantity=quantity,
        unit_price=unit_price,
        line_total=unit_price.times(quantity),
    )


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    customer_id: CustomerId
    table_number: TableNumber
    status: OrderStatus
    created_at: datetime
    lines: tuple[OrderLine, ...] = ()
    currency: str = "USD"
    version: int = 1

    def __post_init__(self) -> None:
        if self.version < 1:
            raise InvalidArgumentError("version must be >= 1", order_id=self.order_id)
        for line in self.lines:
            if line.unit_price.currency != self.currency:
                raise InvalidArgumentError(
                    "line currency must match order currency", order_id=self.order_id
                )

    @property
    def total(self) -> Money:
        total = Money.zero(self.currency)
        for line in self.lines:
            total = total + line.line_total
        return total

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def holds_table(self) -> bool:
        return self.status not in TERMINAL_STATUSES

    def with_line(self, line: OrderLine) -> Order:
        if self.status not in ACTIVE_STATUSES:
            raise OrderTransitionError(
                f"cannot add lines to order {self.order_id} with status={self.status.value}",
                order_id=self.order_id,
                status=self.status.value,
            )
        return replace(
            self,
            status=OrderStatus.IN_PROGRESS,
            lines=(*self.lines, line),
            version=self.version + 1,
        )

    def cancel(self) -> Order:
        if self.status not in ACTIVE_STATUSES:
            raise OrderTransitionError(
                f"cannot cancel order {self.order_id} from status={self.status.value}",
                order_id=self.order_id,
                status=self.status.value,
            )
        return self._transition(OrderStatus.CANCELLED)

    def mark_billed(self) -> Order:
        if self.status != OrderStatus.IN_PROGRESS:
            raise OrderTransitionError(
                f"cannot bill order {self.order_id} from status={self.status.value}",
                order_id=self.order_id,
                status=self.status.value,
            )
        return self._transition(OrderStatus.BILLED)

    def mark_paid(self) -> Order:
        if self.status != OrderStatus.BILLED:
            raise OrderTransitionError(
                f"cannot mark order {self.order_id} paid from status={self.status.value}",
                order_id=self.order_id,
                status=self.status.value,
            )
        return self._transition(OrderStatus.PAID)

    def _transition(self, status: OrderStatus) -> Order:
        return replace(self, status=status, version=self.version + 1)


def create_order(
    order_id: OrderId,
    customer_id: CustomerId,
    table_number: TableNumber,
    now: datetime,
    currency: str = "USD",
) -> Order:
    return Order(
        order_id=order_id,
        customer_id=customer_id,
        table_number=table_number,
        status=OrderStatus.CREATED,
        created_at=now,
        currency=currency,
    )


class OrderTransitionError(InvalidStateError):
    pass
