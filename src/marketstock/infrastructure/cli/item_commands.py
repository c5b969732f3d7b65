"""CLI commands for the Item catalog."""

from __future__ import annotations

import click

from marketstock.application.add_item import AddItemHandler
from marketstock.application.update_item_price import UpdateItemPriceHandler
from marketstock.domain.exceptions import DomainException
from marketstock.infrastructure.bootstrap import item_repository


@click.command("add")
@click.option("--name", required=True, help="Item name.")
@click.option("--category", required=True, help="Category (e.g. vegetables).")
@click.option("--price", required=True, help="Base price per kg (e.g. 3.00).")
@click.option("--image-url", default=None, help="Optional image URL.")
def item_add(name: str, category: str, price: str, image_url: str | None) -> None:
    """Add a new item to the catalog."""
    handler = AddItemHandler(item_repo=item_repository())

    try:
        item = handler.handle(name=name, category=category, price=price, image_url=image_url)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{item.id} '{item.name}' added at {item.base_price}/kg")


@click.command("list")
def item_list() -> None:
    """List all items in the catalog."""
    items = item_repository().list_all()

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Category':<14} {'Price/kg':>10}")
    click.echo("-" * 53)
    for i in items:
        click.echo(f"{i.id:<6} {i.name:<20} {i.category:<14} {str(i.base_price):>10}")


@click.command("update-price")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--price", required=True, help="New base price per kg (e.g. 2.75).")
def item_update_price(item_id: str, price: str) -> None:
    """Update an item's base price."""
    handler = UpdateItemPriceHandler(item_repo=item_repository())

    try:
        item = handler.handle(item_id=item_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{item.id} '{item.name}' now {item.base_price}/kg")
