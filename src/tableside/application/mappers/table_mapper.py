from __future__ import annotations

from collections.abc import Sequence

from tableside.application.dto.responses import TableListResponse, TableResponse
from tableside.domain.table.entities import Table


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        tableNumber=table.number,
        capacity=table.capacity,
        status=table.status.value,
        reservedFor=table.reserved_for,
    )


def to_table_list_response(tables: Sequence[Table]) -> TableListResponse:
    return TableListResponse(tables=[to_table_response(table) for table in tables])
