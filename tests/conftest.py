from __future__ import annotations

from typing import Generator

import pytest

from stockcount.db import connect, ensure_schema


@pytest.fixture
def conn(tmp_path) -> Generator:
    """Fresh file-backed SQLite database with the schema applied."""
    connection = connect(tmp_path / "stockcount.db")
    ensure_schema(connection)
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def bare_conn(tmp_path) -> Generator:
    """Database without any tables, for bootstrap tests."""
    connection = connect(tmp_path / "empty.db")
    try:
        yield connection
    finally:
        connection.close()
