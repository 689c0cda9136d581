from __future__ import annotations

from tableside.application.dto.responses import MoneyResponse
from tableside.domain.common.money import Money


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(
        amount=money.amount,
        amountCents=money.amount_cents,
        currency=money.currency,
    )
