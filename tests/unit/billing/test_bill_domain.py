from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tableside.domain.billing.entities import Bill, BillSettlementError, BillStatus
from tableside.domain.common.errors import InvalidArgumentError
from tableside.domain.common.ids import BillId, OrderId
from tableside.domain.common.money import Money


def _bill() -> Bill:
    return Bill(
        bill_id=BillId(1),
        order_id=OrderId(1),
        total=Money(amount="22.50"),
        created_at=datetime.now(timezone.utc),
    )


def test_new_bill_is_pending() -> None:
    bill = _bill()

    assert bill.status == BillStatus.PENDING
    assert bill.payment_method is None
    assert bill.settled_at is None


def test_paid_bill_requires_settled_at() -> None:
    with pytest.raises(InvalidArgumentError):
        Bill(
            bill_id=BillId(1),
            order_id=OrderId(1),
            total=Money(amount="1.00"),
            created_at=datetime.now(timezone.utc),
            status=BillStatus.PAID,
        )


def test_settle_records_method_and_time() -> None:
    now = datetime.now(timezone.utc)
    settled = _bill().settle(" CASH ", now)

    assert settled.status == BillStatus.PAID
    assert settled.payment_method == "CASH"
    assert settled.settled_at == now
    assert settled.total == _bill().total


def test_settle_twice_raises() -> None:
    settled = _bill().settle("CARD", datetime.now(timezone.utc))

    with pytest.raises(BillSettlementError):
        settled.settle("CASH", datetime.now(timezone.utc))


def test_settle_requires_payment_method() -> None:
    with pytest.raises(InvalidArgumentError):
        _bill().settle("  ", datetime.now(timezone.utc))


def test_settle_rejects_non_string_payment_method() -> None:
    with pytest.raises(InvalidArgumentError):
        _bill().settle(None, datetime.now(timezone.utc))  # type: ignore[arg-type]
