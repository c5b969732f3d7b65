"""SQLAlchemy tables for the SQL stock store.

A stock document is one ``stock_documents`` row; its lines are
``stock_lines`` rows ordered by ``position``.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class StockDocumentRow(Base):
    __tablename__ = "stock_documents"
    __table_args__ = (
        UniqueConstraint(
            "logistics_center_id", "available_date", "shift", name="uniq_lc_date_shift"
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    logistics_center_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    available_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    shift: Mapped[str] = mapped_column(String(16), nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    lines: Mapped[list[StockLineRow]] = relationship(
        back_populates="document",
        order_by="StockLineRow.position",
        cascade="all, delete-orphan",
    )


class StockLineRow(Base):
    __tablename__ = "stock_lines"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    document_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("stock_documents.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    item_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    category: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    # Decimal text, same as the JSON store
    price_per_unit: Mapped[str] = mapped_column(String(32), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USD")

    original_committed_quantity_kg: Mapped[float] = mapped_column(Float, nullable=False)
    current_available_quantity_kg: Mapped[float] = mapped_column(Float, nullable=False)

    farmer_order_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    farmer_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    farmer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    farm_name: Mapped[str] = mapped_column(String(255), nullable=False)
    farm_logo: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    status: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default="active")

    document: Mapped[StockDocumentRow] = relationship(back_populates="lines")
