"""Application service: Remove Stock Line use case."""

from __future__ import annotations

import logging

from marketstock.domain.repository.stock_repository import StockRepository

logger = logging.getLogger(__name__)


class RemoveStockLineHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self, document_id: str, line_id: str) -> None:
        self._stock_repo.remove_line(document_id, line_id)
        logger.info("Removed line %s from stock document %s", line_id, document_id)
