"""Tests for the SQLite blob storage."""

import json

import db
from ledger import Category, Ledger, ProjectList, Setting
from tests.fakes import make_entry


def test_missing_blob_reads_none(db_file):
    assert db.read_blob("entries", db_file=db_file) is None


def test_write_then_read_replaces_value(db_file):
    assert db.write_blob("owner", '"Sam"', db_file=db_file)
    assert db.write_blob("owner", '"Alex"', db_file=db_file)
    assert db.read_blob("owner", db_file=db_file) == '"Alex"'


def test_init_db_is_idempotent(db_file):
    db.write_blob("owner", '"Sam"', db_file=db_file)
    assert db.init_db(db_file)
    assert db.read_blob("owner", db_file=db_file) == '"Sam"'


def test_store_load_returns_copy_of_default(db_file):
    store = db.BlobStore("entries", default=[], db_file=db_file)
    first = store.load()
    first.append("x")
    assert store.load() == []


def test_store_malformed_json_falls_back_to_default(db_file):
    db.write_blob("projects", "{not json", db_file=db_file)
    store = db.BlobStore("projects", default=["General"], db_file=db_file)
    assert store.load() == ["General"]


def test_store_save_writes_json(db_file):
    store = db.BlobStore("projects", db_file=db_file)
    assert store.save(["Café", "Website"])
    assert json.loads(db.read_blob("projects", db_file=db_file)) == ["Café", "Website"]


def test_store_save_without_schema_fails_quietly(tmp_path):
    store = db.BlobStore("owner", db_file=str(tmp_path / "empty.db"))
    assert store.save("Sam") is False
    assert store.load() is None


def test_ledger_survives_reload(db_file):
    store = db.BlobStore("entries", default=[], db_file=db_file)
    ledger = Ledger(store)
    ledger.append(make_entry("09:00", "12:00"))
    ledger.append(make_entry("12:00", "12:30", Category.BREAK))

    restored = Ledger(db.BlobStore("entries", default=[], db_file=db_file))
    assert restored.entries == ledger.entries
    assert restored.total_minutes(Category.BREAK) == 30


def test_projects_and_owner_survive_reload(db_file):
    ProjectList(db.BlobStore("projects", db_file=db_file)).add("Website")
    Setting(db.BlobStore("owner", default="", db_file=db_file)).set("Sam")

    assert "Website" in ProjectList(db.BlobStore("projects", db_file=db_file))
    assert Setting(db.BlobStore("owner", default="", db_file=db_file)).value == "Sam"
