import logging

import click

from marketstock.infrastructure.cli.item_commands import item_add, item_list, item_update_price
from marketstock.infrastructure.cli.stock_commands import (
    stock_add_line,
    stock_adjust,
    stock_open,
    stock_release,
    stock_remove_line,
    stock_reserve,
    stock_show,
    stock_update_line,
    stock_upcoming,
)
from marketstock.infrastructure.config import get_settings


@click.group()
@click.option("--log-level", default=None, help="Override MARKETSTOCK_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Available market stock per logistics center and shift."""
    level = (log_level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def item() -> None:
    """Manage the produce catalog."""


@cli.group()
def stock() -> None:
    """Manage stock documents and their lines."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_list)
item.add_command(item_update_price)
stock.add_command(stock_open)
stock.add_command(stock_show)
stock.add_command(stock_upcoming)
stock.add_command(stock_add_line)
stock.add_command(stock_update_line)
stock.add_command(stock_remove_line)
stock.add_command(stock_reserve)
stock.add_command(stock_release)
stock.add_command(stock_adjust)
