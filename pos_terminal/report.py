"""End-of-shift cash reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from pos_terminal.errors import PersistenceError, Result
from pos_terminal.models import (
    ZERO,
    CashDrawerEntry,
    CashDrawerKind,
    CompletedTransaction,
    PaymentMethod,
)
from pos_terminal.persistence import SqliteStore


@dataclass(frozen=True)
class ShiftReport:
    """Totals for one cashier session."""

    session_id: str
    total_sales: Decimal
    cash_sales: Decimal
    debit_sales: Decimal
    credit_sales: Decimal
    qris_sales: Decimal
    opening_float: Decimal
    withdrawals: Decimal
    transaction_count: int

    @property
    def expected_cash_in_drawer(self) -> Decimal:
        return self.opening_float + self.cash_sales - self.withdrawals

    def sales_for(self, method: PaymentMethod) -> Decimal:
        return {
            PaymentMethod.CASH: self.cash_sales,
            PaymentMethod.DEBIT: self.debit_sales,
            PaymentMethod.CREDIT: self.credit_sales,
            PaymentMethod.QRIS: self.qris_sales,
        }[method]


def _sum_sales(sales: list[CompletedTransaction], method: PaymentMethod) -> Decimal:
    return sum((tx.total_amount for tx in sales if tx.payment_method == method), ZERO)


def _sum_entries(entries: list[CashDrawerEntry], kind: CashDrawerKind) -> Decimal:
    return sum((entry.amount for entry in entries if entry.kind == kind), ZERO)


def summarize(
    session_id: str,
    entries: Iterable[CashDrawerEntry],
    sales: Iterable[CompletedTransaction],
) -> ShiftReport:
    """Aggregate already-loaded records; anything from another session is ignored."""
    session_entries = [entry for entry in entries if entry.session_id == session_id]
    session_sales = [tx for tx in sales if tx.session_id == session_id]
    return ShiftReport(
        session_id=session_id,
        total_sales=sum((tx.total_amount for tx in session_sales), ZERO),
        cash_sales=_sum_sales(session_sales, PaymentMethod.CASH),
        debit_sales=_sum_sales(session_sales, PaymentMethod.DEBIT),
        credit_sales=_sum_sales(session_sales, PaymentMethod.CREDIT),
        qris_sales=_sum_sales(session_sales, PaymentMethod.QRIS),
        opening_float=_sum_entries(session_entries, CashDrawerKind.OPENING_FLOAT),
        withdrawals=_sum_entries(session_entries, CashDrawerKind.CASH_WITHDRAWAL),
        transaction_count=len(session_sales),
    )


def build_shift_report(store: SqliteStore, session_id: str) -> Result:
    """Read both logs fresh and summarize them. Never cached."""
    try:
        entries = store.load_entries_for_session(session_id)
        sales = store.load_transactions_for_session(session_id)
    except PersistenceError as exc:
        return Result.failure(exc)
    return Result.success(summarize(session_id, entries, sales))
