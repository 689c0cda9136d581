from __future__ import annotations

import logging
import threading
from decimal import Decimal

from tableside.domain.common.errors import (
    DuplicateIdError,
    DuplicateNameError,
    InvalidArgumentError,
    NotFoundError,
)
from tableside.domain.common.ids import MenuItemId
from tableside.domain.common.money import Money
from tableside.domain.menu.entities import MenuItem

logger = logging.getLogger(__name__)


def _name_key(name: str) -> str:
    return name.strip().casefold()


class MenuCatalog:
    """Menu items indexed by id and by name.

    Both indexes are only ever changed together under ``self._lock``.
    Names are unique ignoring case and surrounding whitespace. Every price
    is in the catalog's currency, the same one orders are taken in.
    """

    def __init__(self, currency: str = "USD") -> None:
        self._currency = currency
        self._items_by_id: dict[MenuItemId, MenuItem] = {}
        self._ids_by_name: dict[str, MenuItemId] = {}
        self._lock = threading.RLock()

    def add_item(self, item: MenuItem) -> MenuItem:
        if item.price.currency != self._currency:
            raise InvalidArgumentError(
                f"menu prices must be in {self._currency}",
                menu_item_id=item.item_id,
                currency=item.price.currency,
            )
        key = _name_key(item.name)
        with self._lock:
            if item.item_id in self._items_by_id:
                raise DuplicateIdError(
                    f"menu item {item.item_id} already exists", menu_item_id=item.item_id
                )
            if key in self._ids_by_name:
                raise DuplicateNameError(
                    f"menu item named {item.name!r} already exists",
                    name=item.name,
                    menu_item_id=self._ids_by_name[key],
                )
            self._items_by_id[item.item_id] = item
            self._ids_by_name[key] = item.item_id

        logger.info("menu_item_added", extra={"menu_item_id": item.item_id})
        return item

    def update_price(self, item_id: MenuItemId, new_price: Money | Decimal | int | str) -> MenuItem:
        with self._lock:
            current = self._items_by_id.get(item_id)
            if current is None:
                raise NotFoundError(f"menu item {item_id} not found", menu_item_id=item_id)

            if isinstance(new_price, Money):
                price = new_price
            else:
                price = Money(amount=new_price, currency=current.price.currency)
            if price.currency != current.price.currency:
                raise InvalidArgumentError(
                    "price currency must not change",
                    menu_item_id=item_id,
                    currency=price.currency,
                )

            updated = current.with_price(price)
            self._items_by_id[item_id] = updated

        logger.info("menu_price_updated", extra={"menu_item_id": item_id})
        return updated

    def find(self, item_id: MenuItemId | None = None, name: str | None = None) -> MenuItem:
        if (item_id is None) == (name is None):
            raise InvalidArgumentError("exactly one of item_id or name must be given")
        if name is not None and not isinstance(name, str):
            raise InvalidArgumentError("name must be a string", name=name)

        with self._lock:
            if name is not None:
                resolved = self._ids_by_name.get(_name_key(name))
                if resolved is None:
                    raise NotFoundError(f"menu item named {name!r} not found", name=name)
                item_id = resolved
            item = self._items_by_id.get(item_id)  # type: ignore[arg-type]
            if item is None:
                raise NotFoundError(f"menu item {item_id} not found", menu_item_id=item_id)
            return item

    def list(self) -> list[MenuItem]:
        with self._lock:
            return list(self._items_by_id.values())
