from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from tableside.domain.common.errors import InvalidArgumentError, InvalidStateError
from tableside.domain.common.ids import CustomerId, TableNumber


class TableStatus(str, Enum):
    FREE = "FREE"
    RESERVED = "RESERVED"
    OCCUPIED = "OCCUPIED"


@dataclass(frozen=True)
class Table:
    number: TableNumber
    capacity: int
    status: TableStatus = TableStatus.FREE
    reserved_for: CustomerId | None = None

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int):
            raise InvalidArgumentError("capacity must be an integer", table_number=self.number)
        if self.capacity < 1:
            raise InvalidArgumentError("capacity must be >= 1", table_number=self.number)
        if self.status != TableStatus.RESERVED and self.reserved_for is not None:
            raise InvalidArgumentError(
                "reserved_for is only set on reserved tables", table_number=self.number
            )

    def reserve(self, customer_id: CustomerId | None = None) -> Table:
        if self.status != TableStatus.FREE:
            raise TableTransitionError(
                f"cannot reserve table {self.number} from status={self.status.value}",
                table_number=self.number,
                status=self.status.value,
            )
        return replace(self, status=TableStatus.RESERVED, reserved_for=customer_id)

    def occupy(self, customer_id: CustomerId | None = None) -> Table:
        if self.status == TableStatus.OCCUPIED:
            raise TableTransitionError(
                f"table {self.number} is already occupied",
                table_number=self.number,
                status=self.status.value,
            )
        if (
            self.status == TableStatus.RESERVED
            and self.reserved_for is not None
            and customer_id is not None
            and customer_id != self.reserved_for
        ):
            raise TableTransitionError(
                f"table {self.number} is reserved for another customer",
                table_number=self.number,
                status=self.status.value,
                customer_id=customer_id,
            )
        return replace(self, status=TableStatus.OCCUPIED, reserved_for=None)

    def release(self) -> Table:
        return replace(self, status=TableStatus.FREE, reserved_for=None)


class TableTransitionError(InvalidStateError):
    pass
