"""Cash drawer movements recorded outside of sales."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pos_terminal.debug_log import log_debug
from pos_terminal.errors import PersistenceError, Result, ValidationError
from pos_terminal.models import CashDrawerEntry, CashDrawerKind, to_money
from pos_terminal.persistence import SqliteStore


class CashDrawerLedger:
    """Append-only log of opening floats and cash withdrawals.

    There is no way to edit or delete an entry; a mistake is corrected by
    recording a compensating entry.
    """

    def __init__(self, store: SqliteStore) -> None:
        self.store = store

    def record(self, kind: CashDrawerKind, amount: object, description: str, session_id: str) -> Result:
        try:
            parsed = to_money(amount, "Amount")
        except ValidationError as exc:
            return Result.failure(exc)
        if parsed <= 0:
            return Result.failure(ValidationError("Amount must be greater than zero."))

        entry = CashDrawerEntry(
            id=f"cd-{uuid4().hex}",
            kind=CashDrawerKind(kind),
            amount=parsed,
            description=description.strip(),
            timestamp=datetime.now(timezone.utc),
            session_id=session_id,
        )
        try:
            self.store.append_cash_drawer_entry(entry)
        except PersistenceError as exc:
            log_debug(f"ledger_append_failed kind={entry.kind.value} amount={parsed} error={exc!r}")
            return Result.failure(exc)

        log_debug(f"ledger_append id={entry.id} kind={entry.kind.value} amount={parsed} session={session_id}")
        return Result.success(entry)

    def entries_for_session(self, session_id: str) -> list[CashDrawerEntry]:
        return self.store.load_entries_for_session(session_id)
