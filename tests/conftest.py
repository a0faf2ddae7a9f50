"""
Pytest configuration and shared fixtures for the work hours tests.

This module provides:
- An empty ledger backed by an in-memory store
- A temporary SQLite database with the blob schema
"""

import pytest

import db
from ledger import Ledger
from tests.fakes import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ledger(store) -> Ledger:
    return Ledger(store)


@pytest.fixture
def db_file(tmp_path) -> str:
    path = str(tmp_path / "test.db")
    assert db.init_db(path)
    return path
