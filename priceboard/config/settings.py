# priceboard/config/settings.py

"""Central configuration for the priceboard display and admin editor."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the priceboard display and admin editor."""

    # --- Shop identity (shown in the board header) ---
    SHOP_NAME: str = os.getenv("SHOP_NAME", "Hiệu vàng Kiều Anh")
    SHOP_ADDRESS: str = os.getenv(
        "SHOP_ADDRESS", "442 Quang Trung, Vân Canh"
    )
    SHOP_HOTLINE: str = os.getenv("SHOP_HOTLINE", "0914012392")
    BOARD_TITLE: str = "TODAY'S GOLD PRICES"

    # --- Admin ---
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "password")
    MAX_LOGIN_ATTEMPTS: int = 3
    NEW_ITEM_NAME: str = "New item"

    # --- Server ---
    HOST: str = os.getenv("PRICEBOARD_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PRICEBOARD_PORT", "8000"))
    API_PATH: str = "/api/prices"
    API_URL: str = os.getenv(
        "PRICEBOARD_API_URL", f"http://127.0.0.1:{PORT}{API_PATH}"
    )

    # --- Transport ---
    REQUEST_TIMEOUT: int = 10           # Seconds before a request times out
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"

    # --- Sync ---
    POLL_INTERVAL: float = 3.0          # Seconds between board refreshes
    HIGHLIGHT_SECONDS: float = 2.5      # Changed-cell highlight lifetime

    # --- Kiosk auto-scroll (units are terminal lines) ---
    SCROLL_TICK: float = 0.05           # Seconds between scroll steps
    SCROLL_STEP: float = 0.1            # Lines advanced per tick
    SCROLL_PAUSE: float = 2.0           # Dwell at each end
    SCROLL_EPSILON: float = 0.25        # Boundary tolerance

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    PRICE_DB_PATH: Path = Path(
        os.getenv("PRICEBOARD_DB_PATH", str(DATA_DIR / "prices.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Seed data (written on first read of an empty store) ---
    DEFAULT_ITEMS: list[dict[str, object]] = [
        {"id": 1, "name": "SJC 9999", "buy": 82500000, "sell": 83500000},
        {"id": 2, "name": "SJC 980", "buy": 80200000, "sell": 82200000},
        {"id": 3, "name": "PNJ 9999", "buy": 82400000, "sell": 83400000},
        {"id": 4, "name": "DOJI 9999", "buy": 82300000, "sell": 83600000},
        {
            "id": 5,
            "name": "Bảo Tín 9999",
            "buy": 82100000,
            "sell": 83500000,
        },
    ]
