from __future__ import annotations

from typing import NewType

MenuItemId = NewType("MenuItemId", int)
TableNumber = NewType("TableNumber", int)
CustomerId = NewType("CustomerId", int)
OrderId = NewType("OrderId", int)
OrderLineId = NewType("OrderLineId", int)
BillId = NewType("BillId", int)
