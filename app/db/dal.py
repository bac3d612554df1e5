"""Data Access Layer for currency records.

Responsibilities
----------------
- Durable get / create / update / delete of `Currency` rows keyed by code.
- Signal contract conflicts (`DuplicateCurrencyError`, `MissingCurrencyError`)
  so services can map them to domain errors; any other sqlite error propagates.

A fresh connection is opened per call, so one `Database` can be shared by all
request threads.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
import sqlite3
from typing import Iterator, List, Optional

from app.models.currency import Currency
from app.services.rates.base import DuplicateCurrencyError, MissingCurrencyError


def _to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _row_to_currency(row: sqlite3.Row) -> Currency:
    return Currency(
        code=row["code"],
        rate=row["rate"],
        updated_at=datetime.fromisoformat(row["updated_at"]),
        updated_by=row["updated_by"],
    )


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success, rolls back on error, always closes."""
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Currency CRUD
    def get_by_code(self, code: str) -> Optional[Currency]:
        with self._session() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM currencies WHERE code = ?", (code.upper(),))
            row = cur.fetchone()
            return _row_to_currency(row) if row else None

    def list_currencies(self) -> List[Currency]:
        with self._session() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM currencies ORDER BY code ASC")
            return [_row_to_currency(r) for r in cur.fetchall()]

    def create(self, currency: Currency) -> None:
        try:
            with self._session() as conn:
                conn.execute(
                    """
                    INSERT INTO currencies (code, rate, updated_at, updated_by)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        currency.code,
                        currency.rate,
                        _to_iso(currency.updated_at),
                        currency.updated_by,
                    ),
                )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e) or "PRIMARY KEY" in str(e):
                raise DuplicateCurrencyError(currency.code) from e
            raise

    def update(self, currency: Currency) -> None:
        with self._session() as conn:
            cur = conn.execute(
                """
                UPDATE currencies
                SET rate = ?, updated_at = ?, updated_by = ?
                WHERE code = ?
                """,
                (
                    currency.rate,
                    _to_iso(currency.updated_at),
                    currency.updated_by,
                    currency.code,
                ),
            )
            if cur.rowcount == 0:
                raise MissingCurrencyError(currency.code)

    def delete(self, code: str) -> None:
        with self._session() as conn:
            cur = conn.execute("DELETE FROM currencies WHERE code = ?", (code.upper(),))
            if cur.rowcount == 0:
                raise MissingCurrencyError(code.upper())
