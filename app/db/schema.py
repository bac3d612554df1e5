"""Database schema DDL definitions and initialization utilities.

Tables:
  - currencies: one row per currency code with its rate against USD
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CURRENCIES_DDL = """
CREATE TABLE IF NOT EXISTS currencies (
    code TEXT PRIMARY KEY CHECK (length(code) = 3),
    rate REAL NOT NULL CHECK (rate > 0), -- units per 1 USD
    updated_at TEXT NOT NULL, -- ISO-8601 UTC
    updated_by TEXT
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

ALL_DDL: Sequence[str] = (CURRENCIES_DDL, METADATA_DDL)


def init_db(db_path: Path) -> None:
    """Create tables when missing (idempotent)."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for ddl in ALL_DDL:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
