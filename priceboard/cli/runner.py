# priceboard/cli/runner.py

"""Headless entry points: the API server and a one-shot list dump."""

import logging

from rich.console import Console
from rich.table import Table

from priceboard.config.settings import Settings
from priceboard.models.errors import PriceBoardError
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.services.price_client import PriceClient
from priceboard.ui.formatting import format_price

logger = logging.getLogger("priceboard.cli")

# Stderr console for status messages so stdout stays clean
_err = Console(stderr=True)


def run_server(host: str | None = None, port: int | None = None) -> int:
    """Serve the price API with uvicorn until interrupted."""
    import uvicorn

    from priceboard.api.server import create_app

    bind_host = host or Settings.HOST
    bind_port = port or Settings.PORT
    logger.info("Starting API on %s:%d", bind_host, bind_port)
    _err.print(
        f"[dim]Serving {Settings.API_PATH} on "
        f"http://{bind_host}:{bind_port}[/dim]"
    )
    # log_config=None keeps the handlers installed by setup_logging
    uvicorn.run(
        create_app(), host=bind_host, port=bind_port, log_config=None,
    )
    return 0


def _print_table(snapshot: PriceSnapshot) -> None:
    """Render a Rich table of the price list to stdout."""
    table = Table(
        title=f"{Settings.SHOP_NAME.upper()}: {Settings.BOARD_TITLE}",
        caption=f"Updated {snapshot.updated_at:%H:%M:%S %d/%m/%Y} UTC",
        show_lines=True,
        title_style="bold yellow",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Item", max_width=40)
    table.add_column("Buy", justify="right", style="green")
    table.add_column("Sell", justify="right", style="red")

    for item in snapshot:
        table.add_row(
            str(item.id),
            item.name,
            format_price(item.buy),
            format_price(item.sell),
        )

    Console().print(table)


def dump_prices(client: PriceClient | None = None) -> int:
    """Fetch the list once and print it.  Returns an exit code."""
    price_client = client or PriceClient()
    try:
        snapshot = price_client.fetch()
    except PriceBoardError as exc:
        logger.error("Dump failed: %s", exc)
        _err.print(f"[red]Cannot load prices: {exc}[/red]")
        return 1
    finally:
        price_client.close()

    _print_table(snapshot)
    return 0
