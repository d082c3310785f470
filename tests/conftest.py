# tests/conftest.py

"""Shared pytest fixtures for all priceboard tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from priceboard.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_price_db(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Generator[Path, None, None]:
    """Point the default store at a throwaway database for every test."""
    db_path = tmp_path / "prices.db"
    monkeypatch.setattr(Settings, "PRICE_DB_PATH", db_path)
    yield db_path
