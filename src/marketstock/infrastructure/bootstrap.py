"""Composition root: builds the configured repositories.

Only this module and the CLI know which store backs the application;
handlers receive repositories through their constructors.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Engine

from marketstock.domain.repository.item_repository import ItemRepository
from marketstock.domain.repository.stock_repository import StockRepository
from marketstock.infrastructure.config import get_settings
from marketstock.infrastructure.persistence.database import make_engine
from marketstock.infrastructure.persistence.json_item_repository import JsonItemRepository
from marketstock.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)
from marketstock.infrastructure.persistence.sql_stock_repository import (
    SqlStockRepository,
)


@lru_cache()
def _engine(database_url: str, busy_timeout_seconds: int) -> Engine:
    return make_engine(database_url, busy_timeout_seconds)


def item_repository() -> ItemRepository:
    return JsonItemRepository(get_settings().DATA_DIR / "items.json")


def stock_repository() -> StockRepository:
    settings = get_settings()
    if settings.STORE_BACKEND == "sql":
        return SqlStockRepository(
            _engine(settings.database_url, settings.SQLITE_BUSY_TIMEOUT_SECONDS)
        )
    return JsonStockRepository(settings.DATA_DIR / "stock.json")
