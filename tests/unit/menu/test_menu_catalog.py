from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tableside.application.stores.menu_catalog import MenuCatalog
from tableside.domain.common.errors import (
    DuplicateIdError,
    DuplicateNameError,
    InvalidArgumentError,
    NotFoundError,
)
from tableside.domain.common.ids import MenuItemId
from tableside.domain.common.money import Money
from tableside.domain.menu.entities import MenuCategory, MenuItem


def _item(item_id: int, name: str, price: str = "10.00") -> MenuItem:
    return MenuItem(
        item_id=MenuItemId(item_id),
        name=name,
        price=Money(amount=price),
        category=MenuCategory.MAIN_COURSE,
    )


def test_add_item_indexes_by_id_and_name() -> None:
    catalog = MenuCatalog()
    stored = catalog.add_item(_item(1, "Pizza"))

    assert catalog.find(item_id=MenuItemId(1)) == stored
    assert catalog.find(name="Pizza") == stored
    assert catalog.find(name="  pizza ") == stored


def test_add_item_rejects_duplicate_id() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    with pytest.raises(DuplicateIdError):
        catalog.add_item(_item(1, "Pasta"))
    with pytest.raises(NotFoundError):
        catalog.find(name="Pasta")


def test_add_item_rejects_duplicate_name() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    with pytest.raises(DuplicateNameError):
        catalog.add_item(_item(2, "PIZZA"))
    with pytest.raises(NotFoundError):
        catalog.find(item_id=MenuItemId(2))


def test_no_duplicates_after_many_inserts() -> None:
    catalog = MenuCatalog()
    attempts = [(1, "Pizza"), (2, "Soda"), (1, "Salad"), (3, "soda"), (4, "Cake"), (4, "Pie")]
    for item_id, name in attempts:
        try:
            catalog.add_item(_item(item_id, name))
        except (DuplicateIdError, DuplicateNameError):
            pass

    items = catalog.list()
    assert [item.item_id for item in items] == [1, 2, 4]
    assert len({item.name.casefold() for item in items}) == len(items)
    for item in items:
        assert catalog.find(item_id=item.item_id) == catalog.find(name=item.name)


def test_update_price_replaces_price() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    updated = catalog.update_price(MenuItemId(1), Decimal("12.50"))

    assert updated.price.amount == Decimal("12.50")
    assert catalog.find(name="Pizza").price.amount == Decimal("12.50")


def test_update_price_errors() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    with pytest.raises(NotFoundError):
        catalog.update_price(MenuItemId(99), Decimal("1.00"))
    with pytest.raises(InvalidArgumentError):
        catalog.update_price(MenuItemId(1), Decimal("-1.00"))
    with pytest.raises(InvalidArgumentError):
        catalog.update_price(MenuItemId(1), Money(amount="1.00", currency="EUR"))
    assert catalog.find(item_id=MenuItemId(1)).price.amount == Decimal("10.00")


def test_find_requires_exactly_one_key() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    with pytest.raises(InvalidArgumentError):
        catalog.find()
    with pytest.raises(InvalidArgumentError):
        catalog.find(item_id=MenuItemId(1), name="Pizza")


def test_list_is_a_snapshot_in_insertion_order() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(3, "Soup"))
    catalog.add_item(_item(1, "Pizza"))

    snapshot = catalog.list()
    catalog.add_item(_item(2, "Soda"))

    assert [item.item_id for item in snapshot] == [3, 1]
    assert [item.item_id for item in catalog.list()] == [3, 1, 2]


def test_add_item_requires_catalog_currency() -> None:
    catalog = MenuCatalog(currency="USD")
    wine = MenuItem(
        item_id=MenuItemId(1),
        name="Wine",
        price=Money(amount="5.00", currency="EUR"),
        category=MenuCategory.BEVERAGE,
    )

    with pytest.raises(InvalidArgumentError):
        catalog.add_item(wine)
    assert catalog.list() == []

    euro_catalog = MenuCatalog(currency="EUR")
    assert euro_catalog.add_item(wine) == wine


def test_find_rejects_non_string_name() -> None:
    catalog = MenuCatalog()
    catalog.add_item(_item(1, "Pizza"))

    with pytest.raises(InvalidArgumentError):
        catalog.find(name=5)  # type: ignore[arg-type]
