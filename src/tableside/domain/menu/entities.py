from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from tableside.domain.common.errors import InvalidArgumentError
from tableside.domain.common.ids import MenuItemId
from tableside.domain.common.money import Money


class MenuCategory(str, Enum):
    STARTER = "STARTER"
    MAIN_COURSE = "MAIN_COURSE"
    DESSERT = "DESSERT"
    BEVERAGE = "BEVERAGE"


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: str
    price: Money
    category: MenuCategory

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError("name must be non-empty", item_id=self.item_id)
        if not isinstance(self.category, MenuCategory):
            try:
                object.__setattr__(self, "category", MenuCategory(self.category))
            except ValueError as exc:
                raise InvalidArgumentError(
                    f"unknown menu category {self.category!r}", item_id=self.item_id
                ) from exc

    def with_price(self, price: Money) -> MenuItem:
        return replace(self, price=price)
