from datetime import datetime, timezone
from decimal import Decimal

from pos_terminal.errors import PersistenceError
from pos_terminal.models import (
    CashDrawerEntry,
    CashDrawerKind,
    CompletedTransaction,
    PaymentMethod,
    Product,
)
from pos_terminal.persistence import SqliteStore
from pos_terminal.payment import PaymentWorkflow
from pos_terminal.report import build_shift_report, summarize

SESSION = "sesi-Budi-Santoso-20261019-0830"
WHEN = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def entry(kind, amount, session_id=SESSION, entry_id="cd-1"):
    return CashDrawerEntry(
        id=entry_id,
        kind=kind,
        amount=Decimal(amount),
        description="",
        timestamp=WHEN,
        session_id=session_id,
    )


def sale(method, total, session_id=SESSION, tx_id="txn-1"):
    return CompletedTransaction(
        id=tx_id,
        lines=(),
        total_amount=Decimal(total),
        payment_method=method,
        timestamp=WHEN,
        session_id=session_id,
        cashier_name="Budi Santoso",
        amount_tendered=Decimal(total),
        change=Decimal("0"),
    )


def test_expected_cash_combines_float_cash_sales_and_withdrawals():
    report = summarize(
        SESSION,
        [
            entry(CashDrawerKind.OPENING_FLOAT, "100000"),
            entry(CashDrawerKind.CASH_WITHDRAWAL, "20000"),
        ],
        [sale(PaymentMethod.CASH, "50000")],
    )

    assert report.opening_float == Decimal("100000")
    assert report.withdrawals == Decimal("20000")
    assert report.cash_sales == Decimal("50000")
    assert report.expected_cash_in_drawer == Decimal("130000")
    assert report.transaction_count == 1


def test_sales_are_split_by_method():
    sales = [
        sale(PaymentMethod.CASH, "10000"),
        sale(PaymentMethod.CASH, "2500"),
        sale(PaymentMethod.DEBIT, "30000"),
        sale(PaymentMethod.CREDIT, "45000"),
        sale(PaymentMethod.QRIS, "8000"),
    ]
    report = summarize(SESSION, [], sales)

    assert report.cash_sales == Decimal("12500")
    assert report.debit_sales == Decimal("30000")
    assert report.credit_sales == Decimal("45000")
    assert report.qris_sales == Decimal("8000")
    assert report.total_sales == sum(report.sales_for(m) for m in PaymentMethod)
    assert report.transaction_count == 5
    # Non-cash sales never reach the drawer.
    assert report.expected_cash_in_drawer == Decimal("12500")


def test_other_sessions_are_ignored():
    report = summarize(
        SESSION,
        [entry(CashDrawerKind.OPENING_FLOAT, "100000", session_id="sesi-Other-20261019-0700")],
        [sale(PaymentMethod.CASH, "5000", session_id="sesi-Other-20261019-0700")],
    )

    assert report.total_sales == Decimal("0")
    assert report.opening_float == Decimal("0")
    assert report.transaction_count == 0
    assert report.expected_cash_in_drawer == Decimal("0")


def test_build_shift_report_reads_fresh_every_time(context, product_a):
    context.ledger.record(CashDrawerKind.OPENING_FLOAT, 100000, "float", context.session.session_id)
    first = build_shift_report(context.store, context.session.session_id)
    assert first.ok
    assert first.value.expected_cash_in_drawer == Decimal("100000")

    context.order.add_or_increment(product_a, qty=3)
    assert PaymentWorkflow(context).finalize(PaymentMethod.CASH, "5000").ok
    context.ledger.record(CashDrawerKind.CASH_WITHDRAWAL, 1000, "change run", context.session.session_id)

    second = build_shift_report(context.store, context.session.session_id).value
    assert second.cash_sales == Decimal("3000")
    assert second.withdrawals == Decimal("1000")
    assert second.expected_cash_in_drawer == Decimal("102000")
    assert second.transaction_count == 1
    assert first.value.transaction_count == 0


def test_full_shift_through_the_engine(context):
    session_id = context.session.session_id
    assert context.ledger.record(CashDrawerKind.OPENING_FLOAT, 100000, "float", session_id).ok

    context.order.add_or_increment(Product("X", "Beras 5kg", Decimal("50000")))
    assert PaymentWorkflow(context).finalize(PaymentMethod.CASH, 50000).ok
    context.order.add_or_increment(Product("Y", "Minyak 2L", Decimal("36000")))
    assert PaymentWorkflow(context).finalize(PaymentMethod.QRIS).ok
    assert context.ledger.record(CashDrawerKind.CASH_WITHDRAWAL, 20000, "bank", session_id).ok

    report = build_shift_report(context.store, session_id).value
    assert report.total_sales == Decimal("86000")
    assert report.qris_sales == Decimal("36000")
    assert report.expected_cash_in_drawer == Decimal("130000")


def test_build_shift_report_surfaces_store_failure(tmp_path):
    result = build_shift_report(SqliteStore(tmp_path), SESSION)
    assert isinstance(result.error, PersistenceError)
