from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from pos_terminal.errors import InsufficientTenderError, PersistenceError, ValidationError
from pos_terminal.models import PaymentMethod
from pos_terminal.payment import PaymentState, PaymentWorkflow
from pos_terminal.persistence import SqliteStore


class FailingStore(SqliteStore):
    def __init__(self, db_path):
        super().__init__(db_path)
        self.fail = True

    def append_completed_transaction(self, tx):
        if self.fail:
            raise PersistenceError("disk full")
        super().append_completed_transaction(tx)


def order_of_2400(context, product_a, product_b):
    context.order.add_or_increment(product_a, qty=2)
    context.order.add_or_increment(product_b)
    context.order.update_line(1, discount=100)
    assert context.order.grand_total() == Decimal("2400")


def saved_transactions(context):
    return context.store.load_transactions_for_session(context.session.session_id)


def test_cash_payment_with_change(context, receipts, product_a, product_b):
    order_of_2400(context, product_a, product_b)
    workflow = PaymentWorkflow(context)

    result = workflow.finalize(PaymentMethod.CASH, "3000")

    assert result.ok
    tx = result.value.transaction
    assert tx.total_amount == Decimal("2400")
    assert tx.amount_tendered == Decimal("3000")
    assert tx.change == Decimal("600")
    assert tx.session_id == "sesi-Budi-Santoso-20261019-0830"
    assert tx.cashier_name == "Budi Santoso"
    assert result.value.receipt_printed
    assert receipts == [tx]
    assert context.order.is_empty
    assert workflow.state == PaymentState.FINALIZED

    saved = saved_transactions(context)
    assert [t.id for t in saved] == [tx.id]
    assert saved[0].total_amount == Decimal("2400")
    assert [line.sku for line in saved[0].lines] == ["A", "B"]


def test_exact_cash_gives_zero_change(context, product_a):
    context.order.add_or_increment(product_a)
    result = PaymentWorkflow(context).finalize(PaymentMethod.CASH, 1000)
    assert result.value.transaction.change == Decimal("0")


@pytest.mark.parametrize("tendered", ["2000", None, "", "abc"])
def test_insufficient_or_missing_cash_is_rejected(context, receipts, product_a, product_b, tendered):
    order_of_2400(context, product_a, product_b)
    workflow = PaymentWorkflow(context)

    result = workflow.finalize(PaymentMethod.CASH, tendered)

    assert isinstance(result.error, InsufficientTenderError)
    assert isinstance(result.error, ValidationError)
    assert saved_transactions(context) == []
    assert receipts == []
    assert context.order.grand_total() == Decimal("2400")
    assert workflow.state == PaymentState.AWAITING_TENDER


@pytest.mark.parametrize("method", [PaymentMethod.DEBIT, PaymentMethod.CREDIT, PaymentMethod.QRIS])
def test_non_cash_methods_ignore_tendered_amount(context, product_a, method):
    context.order.add_or_increment(product_a, qty=2)

    result = PaymentWorkflow(context).finalize(method, "1")

    tx = result.value.transaction
    assert tx.payment_method == method
    assert tx.amount_tendered == Decimal("2000")
    assert tx.change == Decimal("0")


def test_empty_order_cannot_be_paid(context):
    result = PaymentWorkflow(context).finalize(PaymentMethod.QRIS)
    assert isinstance(result.error, ValidationError)
    assert saved_transactions(context) == []


def test_second_finalize_is_rejected(context, product_a, product_b):
    workflow = PaymentWorkflow(context)
    context.order.add_or_increment(product_a)
    assert workflow.finalize(PaymentMethod.DEBIT).ok

    context.order.add_or_increment(product_b)
    result = workflow.finalize(PaymentMethod.DEBIT)

    assert isinstance(result.error, ValidationError)
    assert len(saved_transactions(context)) == 1


def test_receipt_failure_keeps_the_sale(context, product_a):
    def broken_printer(tx):
        raise OSError("printer offline")

    context.emit_receipt = broken_printer
    context.order.add_or_increment(product_a)

    result = PaymentWorkflow(context).finalize(PaymentMethod.CASH, "1000")

    assert result.ok
    assert not result.value.receipt_printed
    assert result.value.receipt_error == "printer offline"
    assert context.order.is_empty
    assert len(saved_transactions(context)) == 1


def test_persistence_failure_leaves_order_for_retry(context, receipts, product_a, product_b):
    store = FailingStore(context.store.db_path)
    context.store = store
    order_of_2400(context, product_a, product_b)
    workflow = PaymentWorkflow(context)

    failed = workflow.finalize(PaymentMethod.CASH, "3000")

    assert isinstance(failed.error, PersistenceError)
    assert context.order.grand_total() == Decimal("2400")
    assert receipts == []
    assert workflow.state == PaymentState.AWAITING_TENDER

    store.fail = False
    retried = workflow.finalize(PaymentMethod.CASH, "3000")

    assert retried.ok
    assert len(saved_transactions(context)) == 1
    assert len(receipts) == 1


def test_quote_previews_change(context, product_a):
    context.order.add_or_increment(product_a, qty=2)
    workflow = PaymentWorkflow(context)

    assert workflow.quote(PaymentMethod.CASH, "5000") == (Decimal("5000"), Decimal("3000"))
    assert workflow.quote(PaymentMethod.CASH, "500") == (Decimal("500"), Decimal("0"))
    assert workflow.quote(PaymentMethod.CASH, "") == (Decimal("0"), Decimal("0"))
    assert workflow.quote(PaymentMethod.QRIS, "1") == (Decimal("2000"), Decimal("0"))


def test_recorded_sale_lines_cannot_be_changed(context, product_a):
    context.order.add_or_increment(product_a, qty=2)

    tx = PaymentWorkflow(context).finalize(PaymentMethod.DEBIT).value.transaction

    with pytest.raises(FrozenInstanceError):
        tx.lines[0].quantity = 99
    assert tx.lines[0].total == Decimal("2000")
    assert tx.total_amount == Decimal("2000")

    [saved] = saved_transactions(context)
    with pytest.raises(FrozenInstanceError):
        saved.lines[0].unit_price = Decimal("1")


def test_sale_lines_are_independent_of_the_next_order(context, product_a):
    context.order.add_or_increment(product_a)
    tx = PaymentWorkflow(context).finalize(PaymentMethod.QRIS).value.transaction

    context.order.add_or_increment(product_a, qty=5)

    assert tx.lines[0].quantity == 1
