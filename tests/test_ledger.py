from decimal import Decimal

import pytest

from pos_terminal.errors import PersistenceError, ValidationError
from pos_terminal.ledger import CashDrawerLedger
from pos_terminal.models import CashDrawerKind
from pos_terminal.persistence import SqliteStore

SESSION = "sesi-Budi-20261019-0830"


@pytest.mark.parametrize("amount", [0, -5, "-0.01", "abc", "", None, "NaN"])
def test_record_rejects_invalid_amounts(store, amount):
    ledger = CashDrawerLedger(store)
    before = len(ledger.entries_for_session(SESSION))

    result = ledger.record(CashDrawerKind.OPENING_FLOAT, amount, "float", SESSION)

    assert isinstance(result.error, ValidationError)
    assert len(ledger.entries_for_session(SESSION)) == before


def test_record_appends_entry(store):
    ledger = CashDrawerLedger(store)
    result = ledger.record(CashDrawerKind.OPENING_FLOAT, "100000", "  morning float ", SESSION)

    assert result.ok
    entry = result.value
    assert entry.id.startswith("cd-")
    assert entry.amount == Decimal("100000")
    assert entry.description == "morning float"
    assert ledger.entries_for_session(SESSION) == [entry]


def test_duplicate_entries_are_kept_in_append_order(store):
    ledger = CashDrawerLedger(store)
    first = ledger.record(CashDrawerKind.CASH_WITHDRAWAL, 20000, "supplier", SESSION).value
    second = ledger.record(CashDrawerKind.CASH_WITHDRAWAL, 20000, "supplier", SESSION).value

    entries = ledger.entries_for_session(SESSION)
    assert [e.id for e in entries] == [first.id, second.id]


def test_entries_are_scoped_by_session(store):
    ledger = CashDrawerLedger(store)
    ledger.record(CashDrawerKind.OPENING_FLOAT, 50000, "", SESSION)
    ledger.record(CashDrawerKind.OPENING_FLOAT, 70000, "", "sesi-Other-20261019-0900")

    assert [e.amount for e in ledger.entries_for_session(SESSION)] == [Decimal("50000")]


def test_store_failure_is_reported(tmp_path):
    ledger = CashDrawerLedger(SqliteStore(tmp_path))

    result = ledger.record(CashDrawerKind.OPENING_FLOAT, 1000, "", SESSION)

    assert isinstance(result.error, PersistenceError)
