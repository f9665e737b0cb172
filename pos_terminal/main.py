"""Entry point for the POS terminal Textual app."""

from __future__ import annotations

import argparse
import sys

from pos_terminal import config
from pos_terminal.models import UserRole
from pos_terminal.persistence import SqliteStore
from pos_terminal.printer import emit_receipt
from pos_terminal.session import TerminalContext
from pos_terminal.terminal_app import PosTerminalApp


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pos-terminal", description="Keyboard-driven cashier terminal.")
    parser.add_argument("cashier", help="Cashier name recorded on every sale and drawer entry")
    parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.STAFF.value,
        help="Staff need a supervisor PIN to change unit prices",
    )
    parser.add_argument("--db", default=config.DB_PATH, help="SQLite database path")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Open a cashier session and run the terminal until logout."""
    args = _parse_args(argv)
    store = SqliteStore(args.db)
    started = TerminalContext.start(args.cashier, store, emit_receipt, role=UserRole(args.role))
    if not started.ok:
        print(started.error.message, file=sys.stderr)
        return 2
    PosTerminalApp(started.value).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
