from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tableside.domain.common.errors import InvalidArgumentError

_CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | str) -> Decimal:
    if isinstance(value, (float, bool)):
        raise InvalidArgumentError(f"amount must not be a {type(value).__name__}", value=value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"amount {value!r} is not a decimal", value=value) from exc
    if not amount.is_finite():
        raise InvalidArgumentError(f"amount {value!r} is not finite", value=value)
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount < 0:
            raise InvalidArgumentError("amount must be >= 0", amount=str(self.amount))
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise InvalidArgumentError(
                "currency must be a 3-letter uppercase code", currency=self.currency
            )

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def amount_cents(self) -> int:
        return int(self.amount * 100)

    def times(self, quantity: int) -> Money:
        return Money(amount=self.amount * quantity, currency=self.currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise InvalidArgumentError(
                "cannot add amounts in different currencies",
                currency=self.currency,
                other_currency=other.currency,
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)
