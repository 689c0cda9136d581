from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amount: Decimal
    amountCents: int
    currency: str


class MenuItemResponse(BaseModel):
    itemId: int
    name: str
    price: MoneyResponse
    category: str


class MenuResponse(BaseModel):
    categories: list[str] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableNumber: int
    capacity: int
    status: str
    reservedFor: int | None = None


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class OrderLineResponse(BaseModel):
    lineId: int
    itemId: int
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse


class OrderResponse(BaseModel):
    orderId: int
    customerId: int
    tableNumber: int
    status: str
    lines: list[OrderLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime
    version: int


class OrderListResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class BillResponse(BaseModel):
    billId: int
    orderId: int
    status: str
    total: MoneyResponse
    createdAt: datetime
    paymentMethod: str | None = None
    settledAt: datetime | None = None
