"""Payment completion: tender validation, change, and the completed-sale record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pos_terminal.debug_log import log_debug
from pos_terminal.errors import InsufficientTenderError, PersistenceError, Result, ValidationError
from pos_terminal.models import ZERO, CompletedTransaction, PaymentMethod, SaleLine, to_money
from pos_terminal.session import TerminalContext


class PaymentState(str, Enum):
    AWAITING_TENDER = "awaiting_tender"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class PaymentOutcome:
    """A finalized sale plus the printer's verdict."""

    transaction: CompletedTransaction
    receipt_error: str | None = None

    @property
    def receipt_printed(self) -> bool:
        return self.receipt_error is None


class PaymentWorkflow:
    """One payment attempt for the context's active order.

    Every successful `finalize` writes a new record, so the terminal opens a
    single workflow per payment dialog and never reuses a finalized one.
    """

    def __init__(self, context: TerminalContext) -> None:
        self.context = context
        self.state = PaymentState.AWAITING_TENDER
        self.outcome: PaymentOutcome | None = None

    @property
    def amount_due(self) -> Decimal:
        return self.context.order.grand_total()

    def quote(self, method: PaymentMethod, tendered: object = None) -> tuple[Decimal, Decimal]:
        """Preview (amount tendered, change) while the cashier is still typing."""
        due = self.amount_due
        if method != PaymentMethod.CASH:
            return (due, ZERO)
        try:
            paid = to_money(tendered, "Amount tendered")
        except ValidationError:
            paid = ZERO
        return (paid, max(ZERO, paid - due))

    def _tender(self, method: PaymentMethod, tendered: object, due: Decimal) -> Result:
        if method != PaymentMethod.CASH:
            return Result.success((due, ZERO))
        try:
            paid = to_money(tendered, "Amount tendered")
        except ValidationError:
            return Result.failure(InsufficientTenderError("Enter the cash amount received."))
        if paid < due:
            return Result.failure(InsufficientTenderError(f"Amount tendered is {due - paid} short of the total."))
        return Result.success((paid, paid - due))

    def finalize(self, method: PaymentMethod, tendered: object = None) -> Result:
        if self.state == PaymentState.FINALIZED:
            return Result.failure(ValidationError("This payment is already finalized."))
        if self.context.order.is_empty:
            return Result.failure(ValidationError("Order is empty."))

        method = PaymentMethod(method)
        due = self.amount_due
        tender = self._tender(method, tendered, due)
        if not tender.ok:
            log_debug(f"payment_rejected method={method.value} due={due} error={tender.error.message!r}")
            return tender
        amount_tendered, change = tender.value

        session = self.context.session
        tx = CompletedTransaction(
            id=f"txn-{uuid4().hex}",
            lines=tuple(SaleLine.from_order_line(line) for line in self.context.order.lines),
            total_amount=due,
            payment_method=method,
            timestamp=datetime.now(timezone.utc),
            session_id=session.session_id,
            cashier_name=session.cashier_name,
            amount_tendered=amount_tendered,
            change=change,
        )
        try:
            self.context.store.append_completed_transaction(tx)
        except PersistenceError as exc:
            # The order is left as-is so the cashier can retry.
            log_debug(f"payment_not_saved id={tx.id} error={exc!r}")
            return Result.failure(exc)

        receipt_error = None
        try:
            self.context.emit_receipt(tx)
        except Exception as exc:
            receipt_error = str(exc) or type(exc).__name__
            log_debug(f"receipt_failed id={tx.id} error={exc!r}")

        self.context.order.clear()
        self.context.held_orders.reset_selection()
        self.state = PaymentState.FINALIZED
        self.outcome = PaymentOutcome(transaction=tx, receipt_error=receipt_error)
        log_debug(
            f"payment_finalized id={tx.id} method={method.value} total={due} tendered={amount_tendered} change={change}"
        )
        return Result.success(self.outcome)
