# main.py

"""Entry point for priceboard (board TUI, API server or one-shot dump)."""

import argparse
import logging
import sys

from priceboard.config.logging_config import setup_logging
from priceboard.config.settings import Settings

logger = logging.getLogger("priceboard.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the launcher."""
    parser = argparse.ArgumentParser(
        prog="priceboard",
        description="Shop price board display with an admin editor.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        default=False,
        help="Run the price API server instead of the board.",
    )
    parser.add_argument(
        "--host",
        default=None,
        help=f"Bind address for --serve (default: {Settings.HOST}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port for --serve (default: {Settings.PORT}).",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        dest="api_url",
        help=f"Price API the board reads (default: {Settings.API_URL}).",
    )
    parser.add_argument(
        "-k",
        "--kiosk",
        action="store_true",
        default=False,
        help="Start the board in TV mode (auto-scroll).",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        default=False,
        help="Print the current price list once and exit.",
    )
    return parser


def _run_tui(args: argparse.Namespace) -> None:
    """Launch the interactive Textual board."""
    from priceboard.services.price_client import PriceClient
    from priceboard.ui.app import PriceBoardApp

    client = PriceClient(api_url=args.api_url)
    try:
        app = PriceBoardApp(client=client, kiosk=args.kiosk)
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        client.close()
        logger.info("priceboard TUI shutting down")


def _run_server(args: argparse.Namespace) -> None:
    """Serve the HTTP API."""
    from priceboard.cli.runner import run_server

    sys.exit(run_server(host=args.host, port=args.port))


def _run_dump(args: argparse.Namespace) -> None:
    """Print the list once."""
    from priceboard.cli.runner import dump_prices
    from priceboard.services.price_client import PriceClient

    sys.exit(dump_prices(PriceClient(api_url=args.api_url)))


def main() -> None:
    """Route to the server, the dump or the board."""
    log_file = setup_logging()
    logger.info("priceboard starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.serve:
        _run_server(args)
    elif args.dump:
        _run_dump(args)
    else:
        _run_tui(args)


if __name__ == "__main__":
    main()
