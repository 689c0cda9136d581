from __future__ import annotations

import json
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tableside.bootstrap import build_restaurant
from tableside.config import RestaurantConfig
from tableside.domain.common.errors import DuplicateIdError
from tableside.domain.common.ids import MenuItemId
from tableside.infrastructure.messaging.in_memory_publisher import InMemoryEventPublisher


def test_default_config_is_empty() -> None:
    restaurant = build_restaurant()

    assert restaurant.menu_catalog.list() == []
    assert restaurant.table_registry.list() == []
    assert isinstance(restaurant.publisher, InMemoryEventPublisher)


def test_config_rejects_unknown_keys_and_bad_values() -> None:
    with pytest.raises(ValidationError):
        RestaurantConfig.model_validate({"tables": [], "waiters": []})
    with pytest.raises(ValidationError):
        RestaurantConfig.model_validate({"tables": [{"number": 1, "capacity": 0}]})
    with pytest.raises(ValidationError):
        RestaurantConfig.model_validate({"currency": "usd"})


def test_from_env_reads_seed_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seed = {
        "tables": [{"number": 5, "capacity": 4}],
        "menu": [{"item_id": 1, "name": "Pizza", "price": "10.00", "category": "MAIN_COURSE"}],
    }
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(json.dumps(seed), encoding="utf-8")
    monkeypatch.setenv("TABLESIDE_SEED_PATH", str(seed_path))
    monkeypatch.setenv("TABLESIDE_CURRENCY", "EUR")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = RestaurantConfig.from_env()
    restaurant = build_restaurant(config=config)

    assert config.log_level == "debug"
    pizza = restaurant.menu_catalog.find(item_id=MenuItemId(1))
    assert pizza.price.amount == Decimal("10.00")
    assert pizza.price.currency == "EUR"
    assert [table.number for table in restaurant.table_registry.list_free()] == [5]


def test_duplicate_seed_tables_fail() -> None:
    config = RestaurantConfig.model_validate(
        {"tables": [{"number": 1, "capacity": 2}, {"number": 1, "capacity": 4}]}
    )

    with pytest.raises(DuplicateIdError):
        build_restaurant(config=config)
