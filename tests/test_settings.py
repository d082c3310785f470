# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from priceboard.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and the default seed."""

    def test_poll_interval_is_positive_float(self) -> None:
        """POLL_INTERVAL must be a positive number."""
        self.assertIsInstance(Settings.POLL_INTERVAL, float)
        self.assertGreater(Settings.POLL_INTERVAL, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_scroll_timings_positive(self) -> None:
        """Kiosk tick, step and pause must all be > 0."""
        self.assertGreater(Settings.SCROLL_TICK, 0)
        self.assertGreater(Settings.SCROLL_STEP, 0)
        self.assertGreater(Settings.SCROLL_PAUSE, 0)
        self.assertGreaterEqual(Settings.SCROLL_EPSILON, 0)

    def test_max_login_attempts_is_three(self) -> None:
        """The admin modal locks after three misses."""
        self.assertEqual(Settings.MAX_LOGIN_ATTEMPTS, 3)

    def test_default_items_has_five(self) -> None:
        """The seed set contains exactly five items."""
        self.assertEqual(len(Settings.DEFAULT_ITEMS), 5)

    def test_default_item_ids_are_unique(self) -> None:
        """No duplicate ids in the seed set."""
        ids = [row["id"] for row in Settings.DEFAULT_ITEMS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_default_items_have_required_keys(self) -> None:
        """Every seed row has id, name, buy and sell."""
        for row in Settings.DEFAULT_ITEMS:
            with self.subTest(row=row.get("id", "?")):
                for key in ("id", "name", "buy", "sell"):
                    self.assertIn(key, row)

    def test_shop_identity_has_fallbacks(self) -> None:
        """Shop name, address and hotline are never empty."""
        self.assertTrue(Settings.SHOP_NAME)
        self.assertTrue(Settings.SHOP_ADDRESS)
        self.assertTrue(Settings.SHOP_HOTLINE)

    def test_api_url_ends_with_api_path(self) -> None:
        """The default API URL points at the prices endpoint."""
        self.assertTrue(Settings.API_PATH.startswith("/"))
        self.assertIsInstance(Settings.API_URL, str)

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.PRICE_DB_PATH, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)


if __name__ == "__main__":
    unittest.main()
