"""CLI commands for stock documents and their lines."""

from __future__ import annotations

from datetime import datetime

import click

from marketstock.application.add_stock_line import AddStockLineHandler
from marketstock.application.adjust_stock import AdjustStockHandler
from marketstock.application.dto import AdjustmentDTO, NewLineSpec, StockDocumentDTO
from marketstock.application.list_upcoming_stock import ListUpcomingStockHandler
from marketstock.application.open_stock import OpenStockHandler
from marketstock.application.remove_stock_line import RemoveStockLineHandler
from marketstock.application.show_stock import ShowStockHandler
from marketstock.application.update_stock_line import UpdateStockLineHandler
from marketstock.domain.exceptions import DomainException, InsufficientStockError
from marketstock.domain.model.stock import LineStatus, ShiftName
from marketstock.infrastructure.bootstrap import item_repository, stock_repository
from marketstock.infrastructure.config import get_settings

_SHIFTS = click.Choice([s.value for s in ShiftName], case_sensitive=False)
_STATUSES = click.Choice([s.value for s in LineStatus], case_sensitive=False)
_DATE = click.DateTime(formats=["%Y-%m-%d"])


def _display_document(dto: StockDocumentDTO) -> None:
    """Shared formatting for displaying a stock document."""
    click.echo(f"Stock {dto.id}")
    click.echo(f"Center: {dto.logistics_center_id}   {dto.date} ({dto.shift})")
    click.echo()

    if not dto.lines:
        click.echo("  No lines.")
        return

    click.echo(
        f"  {'Line':<34} {'Item':<16} {'Farm':<16} {'Price':>8} "
        f"{'Avail kg':>9} {'Of kg':>8} {'Status':<8}"
    )
    click.echo(f"  {'-'*104}")
    for line in dto.lines:
        click.echo(
            f"  {line.id:<34} {line.display_name:<16} {line.farm_name:<16} "
            f"{line.price_per_unit:>8} {line.available_kg:>9g} {line.original_kg:>8g} "
            f"{line.status:<8}"
        )


def _display_adjustment(dto: AdjustmentDTO) -> None:
    click.echo(f"Line {dto.line_id}: {dto.new_quantity_kg:g} kg available ({dto.status})")


def _run_adjustment(action) -> AdjustmentDTO:
    try:
        return action()
    except InsufficientStockError as exc:
        raise click.ClickException(f"Out of stock: {exc}")
    except DomainException as exc:
        raise click.ClickException(str(exc))


@click.command("open")
@click.option("--center", required=True, help="Logistics center ID.")
@click.option("--date", "available_date", required=True, type=_DATE, help="YYYY-MM-DD.")
@click.option("--shift", required=True, type=_SHIFTS, help="Shift name.")
@click.option("--created-by", default=None, help="ID of the user opening the shift.")
def stock_open(
    center: str, available_date: datetime, shift: str, created_by: str | None
) -> None:
    """Find or create the stock document for a center, date and shift."""
    handler = OpenStockHandler(stock_repo=stock_repository())

    try:
        dto = handler.handle(center, available_date, shift, created_by_id=created_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock {dto.id} open for {dto.logistics_center_id} {dto.date} ({dto.shift})")


@click.command("show")
@click.option("--id", "document_id", default=None, help="Stock document ID.")
@click.option("--center", default=None, help="Logistics center ID (with --date/--shift).")
@click.option("--date", "available_date", default=None, type=_DATE, help="YYYY-MM-DD.")
@click.option("--shift", default=None, type=_SHIFTS, help="Shift name.")
def stock_show(
    document_id: str | None,
    center: str | None,
    available_date: datetime | None,
    shift: str | None,
) -> None:
    """Show a stock document, by ID or by center/date/shift."""
    handler = ShowStockHandler(stock_repo=stock_repository())

    try:
        if document_id:
            dto = handler.handle(document_id)
        elif center and available_date and shift:
            dto = handler.handle_by_key(center, available_date, shift)
        else:
            raise click.UsageError("Give --id, or all of --center, --date and --shift.")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_document(dto)


@click.command("upcoming")
@click.option("--center", required=True, help="Logistics center ID.")
@click.option("--from", "from_date", default=None, type=_DATE, help="Start date (default today).")
@click.option("--count", default=None, type=int, help="Maximum documents to list.")
def stock_upcoming(center: str, from_date: datetime | None, count: int | None) -> None:
    """List a center's upcoming stock documents."""
    handler = ListUpcomingStockHandler(
        stock_repo=stock_repository(),
        default_count=get_settings().UPCOMING_COUNT,
    )

    try:
        documents = handler.handle(center, from_date=from_date, count=count)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not documents:
        click.echo("No upcoming stock.")
        return

    click.echo(f"{'Date':<12} {'Shift':<10} {'Lines':>5}  {'ID'}")
    click.echo("-" * 62)
    for dto in documents:
        click.echo(f"{dto.date:<12} {dto.shift:<10} {len(dto.lines):>5}  {dto.id}")


@click.command("add-line")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--item", "item_id", required=True, help="Catalog item ID.")
@click.option("--farmer-id", required=True, help="Farmer ID.")
@click.option("--farmer-name", required=True, help="Farmer display name.")
@click.option("--farm-name", required=True, help="Farm display name.")
@click.option("--kg", required=True, type=float, help="Committed kilograms.")
@click.option("--available-kg", default=None, type=float, help="Available now (default: --kg).")
@click.option("--price", default=None, help="Price per kg (default: catalog price x markup).")
@click.option("--farmer-order", "farmer_order_id", default=None, help="Farmer order ID.")
def stock_add_line(
    document_id: str,
    item_id: str,
    farmer_id: str,
    farmer_name: str,
    farm_name: str,
    kg: float,
    available_kg: float | None,
    price: str | None,
    farmer_order_id: str | None,
) -> None:
    """Publish a farmer's approved offering on a stock document."""
    handler = AddStockLineHandler(
        stock_repo=stock_repository(),
        item_repo=item_repository(),
        retail_markup=get_settings().RETAIL_MARKUP,
    )
    spec = NewLineSpec(
        item_id=item_id,
        farmer_id=farmer_id,
        farmer_name=farmer_name,
        farm_name=farm_name,
        original_committed_quantity_kg=kg,
        current_available_quantity_kg=available_kg,
        price_per_unit=price,
        farmer_order_id=farmer_order_id,
    )

    try:
        line = handler.handle(document_id, spec)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Line {line.id} added: {line.display_name} {line.available_kg:g} kg "
        f"at {line.price_per_unit}/kg"
    )


@click.command("update-line")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--line", "line_id", required=True, help="Line ID.")
@click.option("--kg", default=None, type=float, help="New available kilograms.")
@click.option("--status", default=None, type=_STATUSES, help="New line status.")
def stock_update_line(
    document_id: str, line_id: str, kg: float | None, status: str | None
) -> None:
    """Manually set a line's available quantity and/or status."""
    handler = UpdateStockLineHandler(stock_repo=stock_repository())

    try:
        line = handler.handle(document_id, line_id, quantity_kg=kg, status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line {line.id}: {line.available_kg:g} kg available ({line.status})")


@click.command("remove-line")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--line", "line_id", required=True, help="Line ID.")
def stock_remove_line(document_id: str, line_id: str) -> None:
    """Remove a line from a stock document."""
    handler = RemoveStockLineHandler(stock_repo=stock_repository())

    try:
        handler.handle(document_id, line_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Line {line_id} removed.")


@click.command("reserve")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--line", "line_id", required=True, help="Line ID.")
@click.option("--kg", required=True, type=float, help="Kilograms to reserve.")
@click.option("--no-auto-soldout", is_flag=True, default=False, help="Keep status when reaching zero.")
def stock_reserve(document_id: str, line_id: str, kg: float, no_auto_soldout: bool) -> None:
    """Reserve kilograms on a line (fails when not enough is left)."""
    handler = AdjustStockHandler(stock_repo=stock_repository())
    dto = _run_adjustment(
        lambda: handler.reserve(
            document_id, line_id, kg, auto_soldout_on_zero=not no_auto_soldout
        )
    )
    _display_adjustment(dto)


@click.command("release")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--line", "line_id", required=True, help="Line ID.")
@click.option("--kg", required=True, type=float, help="Kilograms to return.")
def stock_release(document_id: str, line_id: str, kg: float) -> None:
    """Return kilograms to a line (capped at the committed quantity)."""
    handler = AdjustStockHandler(stock_repo=stock_repository())
    dto = _run_adjustment(lambda: handler.release(document_id, line_id, kg))
    _display_adjustment(dto)


@click.command("adjust")
@click.option("--id", "document_id", required=True, help="Stock document ID.")
@click.option("--line", "line_id", required=True, help="Line ID.")
@click.option("--delta", "delta_kg", required=True, type=float, help="Signed kg (negative reserves).")
@click.option(
    "--enforce/--no-enforce",
    "enforce_sufficiency",
    default=True,
    help="Refuse reservations larger than what is available.",
)
@click.option("--no-auto-soldout", is_flag=True, default=False, help="Keep status when reaching zero.")
def stock_adjust(
    document_id: str,
    line_id: str,
    delta_kg: float,
    enforce_sufficiency: bool,
    no_auto_soldout: bool,
) -> None:
    """Apply a signed kilogram delta to a line."""
    handler = AdjustStockHandler(stock_repo=stock_repository())
    dto = _run_adjustment(
        lambda: handler.handle(
            document_id,
            line_id,
            delta_kg,
            enforce_sufficiency=enforce_sufficiency,
            auto_soldout_on_zero=not no_auto_soldout,
        )
    )
    _display_adjustment(dto)
