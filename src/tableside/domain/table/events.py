from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tableside.domain.common.ids import TableNumber
from tableside.domain.table.entities import TableStatus


@dataclass(frozen=True)
class TableStatusChanged:
    table_number: TableNumber
    from_status: TableStatus
    to_status: TableStatus
    occurred_at: datetime
