# db.py
# SQLite storage for the named JSON blobs (entries, projects, owner)

import copy
import datetime
import json
import logging
import sqlite3
from typing import Any, Optional

# Import configuration constants
from config import DATABASE_PATH

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS blob (
        name TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated TEXT NOT NULL
    );
"""


# --- Connection ---
def create_connection(db_file: str = str(DATABASE_PATH)) -> Optional[sqlite3.Connection]:
    """Creates a database connection."""
    try:
        conn = sqlite3.connect(db_file, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn
    except sqlite3.Error as e:
        logging.error(f'SQLite Error connecting to database {db_file}: {e}')
        return None


# --- Generic Helper ---
def _execute_query(query: str, params: tuple = (), fetch_one: bool = False, commit: bool = False,
                   db_file: str = str(DATABASE_PATH)) -> Any:
    """Executes a query with error handling."""
    conn = create_connection(db_file)
    if not conn:
        return None if fetch_one else False
    result = None
    try:
        cursor = conn.cursor()
        cursor.execute(query, params)
        if fetch_one:
            row = cursor.fetchone()
            result = dict(row) if row else None
        else:
            if commit:
                conn.commit()
            result = True
    except sqlite3.Error as e:
        logging.error(f'SQLite Error executing query:\nQuery: {query}\nParams: {params}\nError: {e}')
        if commit:
            try: conn.rollback()
            except sqlite3.Error as rb_err: logging.error(f'SQLite Error during rollback: {rb_err}')
        result = None if fetch_one else False
    finally:
        conn.close()
    return result


# --- Schema ---
def init_db(db_file: str = str(DATABASE_PATH)) -> bool:
    """Creates the blob table if it does not exist yet."""
    conn = create_connection(db_file)
    if not conn:
        return False
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        return True
    except sqlite3.Error as e:
        logging.error(f'SQLite Error creating schema in {db_file}: {e}')
        return False
    finally:
        conn.close()


# --- Blobs ---
def read_blob(name: str, db_file: str = str(DATABASE_PATH)) -> Optional[str]:
    """Returns the stored text for a blob, or None if it doesn't exist."""
    row = _execute_query('SELECT value FROM blob WHERE name = ?', (name,), fetch_one=True, db_file=db_file)
    return row['value'] if row else None


def write_blob(name: str, value: str, db_file: str = str(DATABASE_PATH)) -> bool:
    """Inserts or replaces a blob."""
    query = """
        INSERT INTO blob (name, value, updated) VALUES (?, ?, ?)
        ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated = excluded.updated
    """
    updated = datetime.datetime.now().isoformat(timespec='seconds')
    return _execute_query(query, (name, value, updated), commit=True, db_file=db_file)


class BlobStore:
    """Loads and saves one JSON value under a fixed blob name."""

    def __init__(self, name: str, default: Any = None, db_file: str = str(DATABASE_PATH)):
        self.name = name
        self.default = default
        self.db_file = db_file

    def load(self) -> Any:
        raw = read_blob(self.name, db_file=self.db_file)
        if raw is None:
            return copy.deepcopy(self.default)
        try:
            return json.loads(raw)
        except ValueError as e:
            logging.warning(f"Malformed JSON in blob '{self.name}', using default: {e}")
            return copy.deepcopy(self.default)

    def save(self, snapshot: Any) -> bool:
        success = write_blob(self.name, json.dumps(snapshot, ensure_ascii=False), db_file=self.db_file)
        if not success:
            logging.error(f"Failed to save blob '{self.name}'.")
        return success
