from __future__ import annotations

from collections.abc import Sequence

from tableside.application.dto.responses import MenuItemResponse, MenuResponse
from tableside.application.mappers.money_mapper import to_money_response
from tableside.domain.menu.entities import MenuItem


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=item.item_id,
        name=item.name,
        price=to_money_response(item.price),
        category=item.category.value,
    )


def to_menu_response(items: Sequence[MenuItem]) -> MenuResponse:
    categories: list[str] = []
    for item in items:
        if item.category.value not in categories:
            categories.append(item.category.value)
    return MenuResponse(
        categories=categories,
        items=[to_menu_item_response(item) for item in items],
    )
