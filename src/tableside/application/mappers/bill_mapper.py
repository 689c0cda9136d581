from __future__ import annotations

from tableside.application.dto.responses import BillResponse
from tableside.application.mappers.money_mapper import to_money_response
from tableside.domain.billing.entities import Bill


def to_bill_response(bill: Bill) -> BillResponse:
    return BillResponse(
        billId=bill.bill_id,
        orderId=bill.order_id,
        status=bill.status.value,
        total=to_money_response(bill.total),
        createdAt=bill.created_at,
        paymentMethod=bill.payment_method,
        settledAt=bill.settled_at,
    )
