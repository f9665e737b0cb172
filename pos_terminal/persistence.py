"""SQLite persistence for cash drawer entries, completed sales and keybindings."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pos_terminal.errors import PersistenceError
from pos_terminal.models import (
    CashDrawerEntry,
    CashDrawerKind,
    CompletedTransaction,
    PaymentMethod,
    SaleLine,
)

_KEYBINDS_SETTING = "keybinds"


class SqliteStore:
    """Append-only logs scoped by session id, plus process-wide settings."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.execute("PRAGMA foreign_keys = ON")
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot open database {self.db_path}: {exc}") from exc
        return conn

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            with closing(self._connect()) as conn, conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS cash_drawer_entries (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        kind TEXT NOT NULL,
                        amount TEXT NOT NULL,
                        description TEXT NOT NULL DEFAULT '',
                        timestamp TEXT NOT NULL,
                        session_id TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS completed_transactions (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        total_amount TEXT NOT NULL,
                        payment_method TEXT NOT NULL,
                        timestamp TEXT NOT NULL,
                        session_id TEXT NOT NULL,
                        cashier_name TEXT NOT NULL,
                        amount_tendered TEXT NOT NULL,
                        change_amount TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS completed_transaction_lines (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        transaction_id TEXT NOT NULL,
                        line_index INTEGER NOT NULL,
                        sku TEXT NOT NULL,
                        name TEXT NOT NULL,
                        quantity INTEGER NOT NULL,
                        unit_price TEXT NOT NULL,
                        discount TEXT NOT NULL,
                        FOREIGN KEY(transaction_id) REFERENCES completed_transactions(id) ON DELETE CASCADE
                    );

                    CREATE TABLE IF NOT EXISTS settings (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_cash_drawer_entries_session
                        ON cash_drawer_entries(session_id, seq);

                    CREATE INDEX IF NOT EXISTS idx_completed_transactions_session
                        ON completed_transactions(session_id, seq);

                    CREATE INDEX IF NOT EXISTS idx_completed_transaction_lines_tx
                        ON completed_transaction_lines(transaction_id, line_index);
                    """
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot create schema: {exc}") from exc

    def append_cash_drawer_entry(self, entry: CashDrawerEntry) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO cash_drawer_entries (id, kind, amount, description, timestamp, session_id)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.id,
                        entry.kind.value,
                        str(entry.amount),
                        entry.description,
                        entry.timestamp.isoformat(),
                        entry.session_id,
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cash drawer entry not saved: {exc}") from exc

    def append_completed_transaction(self, tx: CompletedTransaction) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO completed_transactions (
                        id, total_amount, payment_method, timestamp, session_id,
                        cashier_name, amount_tendered, change_amount
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        tx.id,
                        str(tx.total_amount),
                        tx.payment_method.value,
                        tx.timestamp.isoformat(),
                        tx.session_id,
                        tx.cashier_name,
                        str(tx.amount_tendered),
                        str(tx.change),
                    ),
                )
                for idx, line in enumerate(tx.lines):
                    conn.execute(
                        """
                        INSERT INTO completed_transaction_lines (
                            transaction_id, line_index, sku, name, quantity, unit_price, discount
                        )
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (tx.id, idx, line.sku, line.name, line.quantity, str(line.unit_price), str(line.discount)),
                    )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Transaction not saved: {exc}") from exc

    def load_entries_for_session(self, session_id: str) -> list[CashDrawerEntry]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    """
                    SELECT id, kind, amount, description, timestamp, session_id
                    FROM cash_drawer_entries
                    WHERE session_id = ?
                    ORDER BY seq
                    """,
                    (session_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read cash drawer entries: {exc}") from exc

        return [
            CashDrawerEntry(
                id=row[0],
                kind=CashDrawerKind(row[1]),
                amount=Decimal(row[2]),
                description=row[3],
                timestamp=datetime.fromisoformat(row[4]),
                session_id=row[5],
            )
            for row in rows
        ]

    def load_transactions_for_session(self, session_id: str) -> list[CompletedTransaction]:
        try:
            with closing(self._connect()) as conn:
                tx_rows = conn.execute(
                    """
                    SELECT id, total_amount, payment_method, timestamp, session_id,
                           cashier_name, amount_tendered, change_amount
                    FROM completed_transactions
                    WHERE session_id = ?
                    ORDER BY seq
                    """,
                    (session_id,),
                ).fetchall()
                lines_by_tx: dict[str, list[SaleLine]] = {row[0]: [] for row in tx_rows}
                line_rows = conn.execute(
                    """
                    SELECT l.transaction_id, l.sku, l.name, l.quantity, l.unit_price, l.discount
                    FROM completed_transaction_lines l
                    JOIN completed_transactions t ON t.id = l.transaction_id
                    WHERE t.session_id = ?
                    ORDER BY l.transaction_id, l.line_index
                    """,
                    (session_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read transactions: {exc}") from exc

        for tx_id, sku, name, quantity, unit_price, discount in line_rows:
            lines_by_tx[tx_id].append(
                SaleLine(sku=sku, name=name, quantity=quantity, unit_price=Decimal(unit_price), discount=Decimal(discount))
            )

        return [
            CompletedTransaction(
                id=row[0],
                lines=tuple(lines_by_tx[row[0]]),
                total_amount=Decimal(row[1]),
                payment_method=PaymentMethod(row[2]),
                timestamp=datetime.fromisoformat(row[3]),
                session_id=row[4],
                cashier_name=row[5],
                amount_tendered=Decimal(row[6]),
                change=Decimal(row[7]),
            )
            for row in tx_rows
        ]

    def load_keybinds(self) -> dict[str, str] | None:
        """Return the saved action->key map, or None when nothing was saved."""
        try:
            with closing(self._connect()) as conn:
                row = conn.execute("SELECT value FROM settings WHERE key = ?", (_KEYBINDS_SETTING,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read keybindings: {exc}") from exc
        if row is None:
            return None
        try:
            loaded = json.loads(row[0])
        except ValueError:
            return None
        return loaded if isinstance(loaded, dict) else None

    def save_keybinds(self, keybinds: dict[str, str]) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (_KEYBINDS_SETTING, json.dumps(keybinds, sort_keys=True)),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Keybindings not saved: {exc}") from exc
