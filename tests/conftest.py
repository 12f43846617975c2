import sqlite3
from pathlib import Path
from typing import Callable

import pytest

from litescan.config import get_settings
from litescan.logging import setup_logging
from litescan.session import Session

setup_logging("WARNING")


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_db(tmp_path: Path) -> Callable[..., str]:
    """Create a real database file with the sqlite3 module and return its path."""

    def _make(script: str, page_size: int = 4096, name: str = "test.db", rows=()) -> str:
        path = tmp_path / name
        connection = sqlite3.connect(path)
        try:
            connection.execute(f"PRAGMA page_size = {page_size}")
            connection.executescript(script)
            for statement, params in rows:
                connection.execute(statement, params)
            connection.commit()
        finally:
            connection.close()
        return str(path)

    return _make


@pytest.fixture
def fruit_db(make_db) -> str:
    return make_db(
        """
        CREATE TABLE apples
        (
            id integer primary key autoincrement,
            name text,
            color text
        );
        INSERT INTO apples (name, color) VALUES ('Granny Smith', 'Light Green');
        INSERT INTO apples (name, color) VALUES ('Fuji', 'Red');
        INSERT INTO apples (name, color) VALUES ('Golden Delicious', 'Yellow');

        CREATE TABLE carrots (id integer primary key, name text, color text, weight real, photo blob);
        INSERT INTO carrots (name, color, weight, photo) VALUES ('Nantes', 'Orange', 1.5, x'00ff');
        INSERT INTO carrots (name, color, weight, photo) VALUES ('Solar', 'Yellow', 2.25, NULL);
        INSERT INTO carrots (name, color, weight, photo) VALUES ('Purple Haze', 'Purple', NULL, NULL);
        INSERT INTO carrots (name, color, weight, photo) VALUES ('Yellowstone', 'Yellow', 3.5, x'01');

        CREATE INDEX idx_carrots_color ON carrots (color);
        """
    )


@pytest.fixture
def fruit_session(fruit_db):
    with Session.open(fruit_db) as session:
        yield session
