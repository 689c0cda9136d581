from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tableside.application.ports.publisher import EventPublisher
from tableside.application.stores.billing_engine import BillingEngine
from tableside.application.stores.menu_catalog import MenuCatalog
from tableside.application.stores.order_ledger import OrderLedger
from tableside.application.stores.table_registry import TableRegistry
from tableside.application.use_cases.operations import OperationsFacade
from tableside.config import RestaurantConfig
from tableside.domain.common.ids import MenuItemId, TableNumber
from tableside.domain.common.money import Money
from tableside.domain.menu.entities import MenuItem
from tableside.domain.table.entities import Table
from tableside.infrastructure.messaging.in_memory_publisher import InMemoryEventPublisher
from tableside.infrastructure.observability.logging_config import configure_logging
from tableside.infrastructure.observability.otel import configure_otel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Restaurant:
    """The long-lived stores plus the facade that coordinates them."""

    operations: OperationsFacade
    menu_catalog: MenuCatalog
    table_registry: TableRegistry
    order_ledger: OrderLedger
    billing_engine: BillingEngine
    publisher: EventPublisher


def build_restaurant(
    config: RestaurantConfig | None = None,
    publisher: EventPublisher | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Restaurant:
    config = config or RestaurantConfig()
    if config.configure_observability:
        configure_logging(config.log_level)
        configure_otel()

    menu_catalog = MenuCatalog(currency=config.currency)
    table_registry = TableRegistry(clock=clock)
    order_ledger = OrderLedger(
        menu_catalog=menu_catalog,
        table_registry=table_registry,
        clock=clock,
        currency=config.currency,
    )
    billing_engine = BillingEngine(
        order_ledger=order_ledger,
        table_registry=table_registry,
        clock=clock,
    )
    event_publisher = publisher or InMemoryEventPublisher()
    operations = OperationsFacade(
        menu_catalog=menu_catalog,
        table_registry=table_registry,
        order_ledger=order_ledger,
        billing_engine=billing_engine,
        publisher=event_publisher,
        clock=clock,
        currency=config.currency,
    )

    for table_seed in config.tables:
        table_registry.add_table(
            Table(number=TableNumber(table_seed.number), capacity=table_seed.capacity)
        )
    for item_seed in config.menu:
        menu_catalog.add_item(
            MenuItem(
                item_id=MenuItemId(item_seed.item_id),
                name=item_seed.name,
                price=Money(amount=item_seed.price, currency=config.currency),
                category=item_seed.category,
            )
        )

    logger.info("restaurant_ready")
    return Restaurant(
        operations=operations,
        menu_catalog=menu_catalog,
        table_registry=table_registry,
        order_ledger=order_ledger,
        billing_engine=billing_engine,
        publisher=event_publisher,
    )


def build_operations(
    config: RestaurantConfig | None = None,
    publisher: EventPublisher | None = None,
    clock: Callable[[], datetime] | None = None,
) -> OperationsFacade:
    return build_restaurant(config=config, publisher=publisher, clock=clock).operations
