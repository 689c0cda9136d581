from __future__ import annotations

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError
from tableside.domain.common.ids import CustomerId, MenuItemId, OrderId, OrderLineId, TableNumber
from tableside.domain.common.money import Money
from tableside.domain.order.entities import (
    OrderLine,
    OrderStatus,
    OrderTransitionError,
    create_order,
    create_order_line,
)


def _order():
    return create_order(
        order_id=OrderId(1),
        customer_id=CustomerId(42),
        table_number=TableNumber(5),
        now=datetime.now(timezone.utc),
    )


def _line(line_id: int = 1, quantity: int = 1, price: str = "10.00") -> OrderLine:
    return create_order_line(
        line_id=OrderLineId(line_id),
        item_id=MenuItemId(1),
        name="Pizza",
        quantity=quantity,
        unit_price=Money(amount=price),
    )


def test_order_line_quantity_must_be_gte_one() -> None:
    with pytest.raises(InvalidArgumentError):
        OrderLine(
            line_id=OrderLineId(1),
            item_id=MenuItemId(1),
            name="Item",
            quantity=0,
            unit_price=Money(amount="1.00"),
            line_total=Money(amount="0.00"),
        )


def test_order_line_total_must_match_quantity() -> None:
    with pytest.raises(InvalidArgumentError):
        OrderLine(
            line_id=OrderLineId(1),
            item_id=MenuItemId(1),
            name="Item",
            quantity=2,
            unit_price=Money(amount="1.00"),
            line_total=Money(amount="1.00"),
        )


def test_new_order_is_created_and_empty() -> None:
    order = _order()

    assert order.status == OrderStatus.CREATED
    assert order.lines == ()
    assert order.total.amount == Decimal("0.00")
    assert order.version == 1


def test_first_line_moves_order_in_progress() -> None:
    order = _order().with_line(_line(quantity=2)).with_line(_line(2, price="2.50"))

    assert order.status == OrderStatus.IN_PROGRESS
    assert [line.line_id for line in order.lines] == [1, 2]
    assert order.total.amount == Decimal("22.50")
    assert order.version == 3


def test_billing_requires_lines() -> None:
    with pytest.raises(OrderTransitionError):
        _order().mark_billed()


def test_billed_order_freezes_lines() -> None:
    billed = _order().with_line(_line()).mark_billed()

    with pytest.raises(InvalidStateError):
        billed.with_line(_line(2))
    with pytest.raises(InvalidStateError):
        billed.cancel()


def test_paid_requires_billed() -> None:
    in_progress = _order().with_line(_line())

    with pytest.raises(OrderTransitionError):
        in_progress.mark_paid()
    assert in_progress.mark_billed().mark_paid().status == OrderStatus.PAID


def test_cancelled_order_is_terminal() -> None:
    cancelled = _order().cancel()

    assert cancelled.status == OrderStatus.CANCELLED
    assert not cancelled.holds_table
    for transition in (
        lambda: cancelled.with_line(_line()),
        cancelled.cancel,
        cancelled.mark_billed,
        cancelled.mark_paid,
    ):
        with pytest.raises(OrderTransitionError):
            transition()
