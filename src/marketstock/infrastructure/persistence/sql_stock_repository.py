"""SQLAlchemy-backed implementation of StockRepository.

Quantity changes are single conditional UPDATE statements: the match
condition carries the precondition and the SET clause carries the clamp,
so the database serializes competing writers and no application-level
read precedes the write. When an UPDATE matches nothing, a read inside
the same transaction decides between "not found" and "insufficient".
"""

from __future__ import annotations

import logging
from datetime import date, timezone
from decimal import Decimal

from sqlalchemy import Connection, Engine, case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload, sessionmaker

from marketstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from marketstock.domain.model.stock import (
    LineStatus,
    ShiftName,
    StockDocument,
    StockKey,
    StockLine,
    as_kg,
)
from marketstock.domain.model.value_objects import KilogramDelta, Money
from marketstock.domain.repository.stock_repository import StockRepository
from marketstock.infrastructure.persistence.sql_models import StockDocumentRow, StockLineRow

logger = logging.getLogger(__name__)


class SqlStockRepository(StockRepository):

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    # --- StockRepository interface --------------------------------------------

    def get_by_id(self, document_id: str) -> StockDocument | None:
        with self._session_factory() as session:
            row = session.scalars(
                select(StockDocumentRow)
                .options(selectinload(StockDocumentRow.lines))
                .where(StockDocumentRow.id == document_id)
            ).one_or_none()
            return self._to_domain(row) if row is not None else None

    def get_by_key(self, key: StockKey) -> StockDocument | None:
        with self._session_factory() as session:
            row = session.scalars(self._select_by_key(key)).one_or_none()
            return self._to_domain(row) if row is not None else None

    def find_or_create(
        self, key: StockKey, created_by_id: str | None = None
    ) -> StockDocument:
        with self._session_factory() as session:
            row = session.scalars(self._select_by_key(key)).one_or_none()
            if row is not None:
                return self._to_domain(row)

            document = StockDocument.create(key, created_by_id=created_by_id)
            session.add(
                StockDocumentRow(
                    id=document.id,
                    logistics_center_id=key.logistics_center_id,
                    available_date=key.available_date,
                    shift=key.shift.value,
                    created_by_id=created_by_id,
                    created_at=document.created_at,
                )
            )
            try:
                session.commit()
            except IntegrityError:
                # Another writer created the same key first.
                session.rollback()
                row = session.scalars(self._select_by_key(key)).one()
                return self._to_domain(row)

        logger.info("Created stock document %s for %s", document.id, key)
        return document

    def list_upcoming(
        self, logistics_center_id: str, from_date: date, count: int
    ) -> list[StockDocument]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(StockDocumentRow)
                .options(selectinload(StockDocumentRow.lines))
                .where(
                    StockDocumentRow.logistics_center_id == logistics_center_id,
                    StockDocumentRow.available_date >= from_date,
                )
                .order_by(StockDocumentRow.available_date)
            ).all()
            documents = [self._to_domain(row) for row in rows]
        documents.sort(key=lambda d: d.key.sort_key)
        return documents[:count]

    def add_line(self, document_id: str, line: StockLine) -> StockLine:
        with self._session_factory.begin() as session:
            if session.get(StockDocumentRow, document_id) is None:
                raise EntityNotFoundError(f"Stock document '{document_id}' not found")
            last = session.scalar(
                select(func.max(StockLineRow.position)).where(
                    StockLineRow.document_id == document_id
                )
            )
            session.add(self._line_to_row(document_id, line, position=(last or 0) + 1))
        return line

    def remove_line(self, document_id: str, line_id: str) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                delete(StockLineRow).where(
                    StockLineRow.id == line_id,
                    StockLineRow.document_id == document_id,
                )
            )
            if result.rowcount == 0:
                self._raise_not_found(conn, document_id, line_id)

    def update_line(
        self,
        document_id: str,
        line_id: str,
        quantity_kg: float | None = None,
        status: LineStatus | None = None,
    ) -> StockLine:
        values: dict[str, object] = {}
        stmt = update(StockLineRow).where(
            StockLineRow.id == line_id,
            StockLineRow.document_id == document_id,
        )
        if quantity_kg is not None:
            qty = as_kg(quantity_kg)
            values["current_available_quantity_kg"] = qty
            stmt = stmt.where(StockLineRow.original_committed_quantity_kg >= qty)
        if status is not None:
            values["status"] = status.value

        with self._engine.begin() as conn:
            if values:
                result = conn.execute(stmt.values(**values))
                if result.rowcount == 0:
                    self._raise_not_found(conn, document_id, line_id)
                    raise ValidationError("Exceeds original committed quantity")
            row = conn.execute(
                select(StockLineRow).where(
                    StockLineRow.id == line_id,
                    StockLineRow.document_id == document_id,
                )
            ).one_or_none()
            if row is None:
                self._raise_not_found(conn, document_id, line_id)
        return self._line_to_domain(row)

    def adjust_quantity(
        self,
        document_id: str,
        line_id: str,
        delta: KilogramDelta,
        enforce_sufficiency: bool = True,
    ) -> None:
        current = StockLineRow.current_available_quantity_kg
        original = StockLineRow.original_committed_quantity_kg
        proposed = current + delta.value

        stmt = (
            update(StockLineRow)
            .where(
                StockLineRow.id == line_id,
                StockLineRow.document_id == document_id,
            )
            .values(
                current_available_quantity_kg=case(
                    (proposed < 0, 0.0),
                    (proposed > original, original),
                    else_=proposed,
                )
            )
        )
        if delta.is_reservation and enforce_sufficiency:
            stmt = stmt.where(current >= delta.magnitude)

        with self._engine.begin() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                self._raise_not_found(conn, document_id, line_id)
                available = conn.execute(
                    select(current).where(
                        StockLineRow.id == line_id,
                        StockLineRow.document_id == document_id,
                    )
                ).scalar_one()
                raise InsufficientStockError(
                    f"Not enough available quantity to reserve "
                    f"(need {delta.magnitude:g} kg, have {available:g} kg)",
                    requested=delta.magnitude,
                    available=available,
                )

    def mark_soldout_if_exhausted(self, document_id: str, line_id: str) -> StockLine:
        matches_line = (
            StockLineRow.id == line_id,
            StockLineRow.document_id == document_id,
        )
        with self._engine.begin() as conn:
            conn.execute(
                update(StockLineRow)
                .where(
                    *matches_line,
                    StockLineRow.current_available_quantity_kg == 0,
                    StockLineRow.status != LineStatus.SOLDOUT.value,
                )
                .values(status=LineStatus.SOLDOUT.value)
            )
            row = conn.execute(select(StockLineRow).where(*matches_line)).one_or_none()
            if row is None:
                self._raise_not_found(conn, document_id, line_id)
        return self._line_to_domain(row)

    # --- Helpers --------------------------------------------------------------

    @staticmethod
    def _select_by_key(key: StockKey):
        return (
            select(StockDocumentRow)
            .options(selectinload(StockDocumentRow.lines))
            .where(
                StockDocumentRow.logistics_center_id == key.logistics_center_id,
                StockDocumentRow.available_date == key.available_date,
                StockDocumentRow.shift == key.shift.value,
            )
        )

    @staticmethod
    def _raise_not_found(conn: Connection, document_id: str, line_id: str) -> None:
        """Raise EntityNotFoundError if the document or line is missing."""
        line_exists = conn.execute(
            select(StockLineRow.id).where(
                StockLineRow.id == line_id,
                StockLineRow.document_id == document_id,
            )
        ).first()
        if line_exists is not None:
            return
        doc_exists = conn.execute(
            select(StockDocumentRow.id).where(StockDocumentRow.id == document_id)
        ).first()
        if doc_exists is None:
            raise EntityNotFoundError(f"Stock document '{document_id}' not found")
        raise EntityNotFoundError(
            f"Line '{line_id}' not found in stock document '{document_id}'"
        )

    @staticmethod
    def _line_to_row(document_id: str, line: StockLine, position: int) -> StockLineRow:
        return StockLineRow(
            id=line.id,
            document_id=document_id,
            position=position,
            item_id=line.item_id,
            display_name=line.display_name,
            image_url=line.image_url,
            category=line.category,
            price_per_unit=str(line.price_per_unit.amount),
            currency=line.price_per_unit.currency,
            original_committed_quantity_kg=line.original_committed_quantity_kg,
            current_available_quantity_kg=line.current_available_quantity_kg,
            farmer_order_id=line.farmer_order_id,
            farmer_id=line.farmer_id,
            farmer_name=line.farmer_name,
            farm_name=line.farm_name,
            farm_logo=line.farm_logo,
            status=line.status.value,
        )

    @staticmethod
    def _line_to_domain(row) -> StockLine:
        # Works for ORM rows and Core result rows alike.
        return StockLine(
            id=row.id,
            item_id=row.item_id,
            display_name=row.display_name,
            image_url=row.image_url,
            category=row.category,
            price_per_unit=Money(Decimal(row.price_per_unit), row.currency),
            original_committed_quantity_kg=row.original_committed_quantity_kg,
            current_available_quantity_kg=row.current_available_quantity_kg,
            farmer_order_id=row.farmer_order_id,
            farmer_id=row.farmer_id,
            farmer_name=row.farmer_name,
            farm_name=row.farm_name,
            farm_logo=row.farm_logo,
            status=LineStatus(row.status),
        )

    def _to_domain(self, row: StockDocumentRow) -> StockDocument:
        created_at = row.created_at
        if created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC.
            created_at = created_at.replace(tzinfo=timezone.utc)
        return StockDocument(
            id=row.id,
            key=StockKey(
                logistics_center_id=row.logistics_center_id,
                available_date=row.available_date,
                shift=ShiftName(row.shift),
            ),
            created_by_id=row.created_by_id,
            created_at=created_at,
            lines=[self._line_to_domain(line) for line in row.lines],
        )
