from __future__ import annotations

import json
import os
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from tableside.domain.menu.entities import MenuCategory

SEED_PATH_ENV = "TABLESIDE_SEED_PATH"
CURRENCY_ENV = "TABLESIDE_CURRENCY"


class TableSeed(BaseModel):
    model_config = ConfigDict(extra="forbid")

    number: int
    capacity: int = Field(gt=0)


class MenuItemSeed(BaseModel):
    model_config = ConfigDict(extra="forbid")

    item_id: int
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    category: MenuCategory


class RestaurantConfig(BaseModel):
    """Construction-time settings. Tables and menu default to empty."""

    model_config = ConfigDict(extra="forbid")

    tables: list[TableSeed] = Field(default_factory=list)
    menu: list[MenuItemSeed] = Field(default_factory=list)
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    log_level: str = "INFO"
    configure_observability: bool = False

    @classmethod
    def from_env(cls) -> RestaurantConfig:
        values: dict[str, object] = {}
        seed_path = os.getenv(SEED_PATH_ENV)
        if seed_path:
            values.update(json.loads(Path(seed_path).read_text(encoding="utf-8")))
        currency = os.getenv(CURRENCY_ENV)
        if currency:
            values["currency"] = currency
        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level
        return cls.model_validate(values)
