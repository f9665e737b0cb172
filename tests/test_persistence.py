from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pos_terminal.errors import PersistenceError
from pos_terminal.models import (
    CashDrawerEntry,
    CashDrawerKind,
    CompletedTransaction,
    PaymentMethod,
    SaleLine,
)
from pos_terminal.persistence import SqliteStore

WHEN = datetime(2026, 10, 19, 9, 15, tzinfo=timezone.utc)


def make_tx(tx_id, session_id="sesi-Budi-20261019-0830"):
    return CompletedTransaction(
        id=tx_id,
        lines=(
            SaleLine(sku="A", name="Indomie Goreng", quantity=2, unit_price=Decimal("3500")),
            SaleLine(sku="B", name="Teh Botol", quantity=1, unit_price=Decimal("5000"), discount=Decimal("250.50")),
        ),
        total_amount=Decimal("11749.50"),
        payment_method=PaymentMethod.CASH,
        timestamp=WHEN,
        session_id=session_id,
        cashier_name="Budi",
        amount_tendered=Decimal("20000"),
        change=Decimal("8250.50"),
    )


def test_bootstrap_is_idempotent(store):
    store.bootstrap_schema()
    store.bootstrap_schema()
    assert store.load_transactions_for_session("nobody") == []


def test_transactions_load_back_with_lines(store):
    tx = make_tx("txn-1")
    store.append_completed_transaction(tx)

    [loaded] = store.load_transactions_for_session(tx.session_id)

    assert loaded == tx
    assert loaded.lines[1].total == Decimal("4749.50")


def test_transactions_keep_append_order_and_session_scope(store):
    for tx_id in ("txn-c", "txn-a", "txn-b"):
        store.append_completed_transaction(make_tx(tx_id))
    store.append_completed_transaction(make_tx("txn-other", session_id="sesi-Other-20261019-0900"))

    loaded = store.load_transactions_for_session("sesi-Budi-20261019-0830")

    assert [tx.id for tx in loaded] == ["txn-c", "txn-a", "txn-b"]


def test_duplicate_transaction_id_is_refused(store):
    store.append_completed_transaction(make_tx("txn-1"))
    with pytest.raises(PersistenceError):
        store.append_completed_transaction(make_tx("txn-1"))
    assert len(store.load_transactions_for_session("sesi-Budi-20261019-0830")) == 1


def test_cash_drawer_entries_round_trip(store):
    entry = CashDrawerEntry(
        id="cd-1",
        kind=CashDrawerKind.CASH_WITHDRAWAL,
        amount=Decimal("20000"),
        description="bank deposit",
        timestamp=WHEN,
        session_id="sesi-Budi-20261019-0830",
    )
    store.append_cash_drawer_entry(entry)

    assert store.load_entries_for_session(entry.session_id) == [entry]
    assert store.load_entries_for_session("sesi-Other-20261019-0900") == []


def test_keybinds_absent_until_saved(store):
    assert store.load_keybinds() is None
    store.save_keybinds({"pay": "f10"})
    store.save_keybinds({"pay": "f12"})
    assert store.load_keybinds() == {"pay": "f12"}


def test_unusable_path_raises_persistence_error(tmp_path):
    store = SqliteStore(tmp_path)
    with pytest.raises(PersistenceError):
        store.bootstrap_schema()
    with pytest.raises(PersistenceError):
        store.load_entries_for_session("sesi-x")
