"""Keystroke -> action dispatch with single-modal exclusivity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from pos_terminal.debug_log import log_debug
from pos_terminal.errors import AuthorizationError, NotFoundError, Result
from pos_terminal.keybinds import KeybindingMap
from pos_terminal.line_edit import LineEditDraft
from pos_terminal.models import Action, CashDrawerKind
from pos_terminal.payment import PaymentWorkflow
from pos_terminal.session import TerminalContext


class ModalKind(str, Enum):
    EDIT_LINE = "edit_line"
    RECALL = "recall"
    CASHIER_MENU = "cashier_menu"
    CASH_DRAWER = "cash_drawer"
    SHIFT_REPORT = "shift_report"
    PAYMENT = "payment"
    KEYBIND_SETTINGS = "keybind_settings"
    LOCK_SCREEN = "lock_screen"


@dataclass(frozen=True)
class DispatchOutcome:
    """What one dispatched action did.

    `opened` names the modal the shell should show; `noop` marks an action
    that had nothing to act on; `result` carries a direct mutation's result.
    """

    action: Action
    opened: ModalKind | None = None
    noop: bool = False
    result: Result | None = None


class CommandDispatcher:
    """Routes global keys to engine actions while no modal is open."""

    def __init__(self, context: TerminalContext, keybinds: KeybindingMap) -> None:
        self.context = context
        self.keybinds = keybinds
        self.active_modal: ModalKind | None = None
        self.locked = False
        self.line_edit: LineEditDraft | None = None
        self.payment: PaymentWorkflow | None = None
        self.cash_drawer_kind: CashDrawerKind | None = None
        self._handlers: dict[Action, Callable[[], DispatchOutcome]] = {
            Action.HOLD: self._hold,
            Action.RECALL: self._recall,
            Action.OPEN_CASHIER_MENU: self._open_cashier_menu,
            Action.CLEAR: self._clear,
            Action.EDIT_SELECTED_LINE: self._edit_selected_line,
            Action.DELETE_SELECTED_LINE: self._delete_selected_line,
            Action.PAY: self._pay,
            Action.LOCK_SCREEN: self._lock_screen,
        }
        unhandled = set(Action) - set(self._handlers)
        if unhandled:
            raise RuntimeError(f"No handler for actions: {sorted(a.value for a in unhandled)}")

    @property
    def accepts_global_keys(self) -> bool:
        return not self.locked and self.active_modal is None

    def handle_key(self, key: str) -> DispatchOutcome | None:
        """Dispatch a global key; None when the key is suppressed or unbound."""
        if not self.accepts_global_keys:
            return None
        action = self.keybinds.action_for_key(key)
        if action is None:
            return None
        return self.dispatch(action)

    def dispatch(self, action: Action) -> DispatchOutcome:
        """Run `action`; suppressed as a no-op while locked or while a modal is open."""
        if not self.accepts_global_keys:
            log_debug(f"dispatch_suppressed action={action.value} locked={self.locked}")
            return DispatchOutcome(action, noop=True)
        outcome = self._handlers[action]()
        log_debug(
            f"dispatch action={action.value} opened={outcome.opened.value if outcome.opened else None} noop={outcome.noop}"
        )
        return outcome

    # Modal bookkeeping

    def open_modal(self, kind: ModalKind) -> bool:
        if self.active_modal is not None:
            return False
        self.active_modal = kind
        return True

    def switch_modal(self, kind: ModalKind) -> bool:
        """Replace the open modal with `kind` (e.g. cashier menu -> cash drawer)."""
        if self.locked and kind != ModalKind.LOCK_SCREEN:
            return False
        self._release_modal_state()
        self.active_modal = kind
        return True

    def close_modal(self, kind: ModalKind | None = None) -> None:
        """Close the active modal. Closing the lock screen requires `unlock`."""
        if self.active_modal is None:
            return
        if kind is not None and kind != self.active_modal:
            return
        if self.active_modal == ModalKind.LOCK_SCREEN and self.locked:
            return
        self._release_modal_state()
        self.active_modal = None

    def _release_modal_state(self) -> None:
        self.line_edit = None
        self.payment = None
        self.cash_drawer_kind = None

    def open_cash_drawer_dialog(self, kind: CashDrawerKind) -> bool:
        if self.locked:
            return False
        if self.active_modal not in (None, ModalKind.CASHIER_MENU):
            return False
        self.switch_modal(ModalKind.CASH_DRAWER)
        self.cash_drawer_kind = CashDrawerKind(kind)
        return True

    def open_shift_report(self) -> bool:
        if self.locked or self.active_modal not in (None, ModalKind.CASHIER_MENU):
            return False
        return self.switch_modal(ModalKind.SHIFT_REPORT)

    def open_keybind_settings(self) -> bool:
        if self.locked:
            return False
        return self.open_modal(ModalKind.KEYBIND_SETTINGS)

    def lock(self) -> None:
        self.switch_modal(ModalKind.LOCK_SCREEN)
        self.locked = True
        log_debug("terminal_locked")

    def unlock(self, pin: str) -> Result:
        if not self.locked:
            return Result.success(True)
        if not self.context.access_authorizer.check_pin(pin):
            log_debug("terminal_unlock_denied")
            return Result.failure(AuthorizationError("Wrong PIN. Try again."))
        self.locked = False
        self.active_modal = None
        log_debug("terminal_unlocked")
        return Result.success(True)

    # Action handlers

    def _hold(self) -> DispatchOutcome:
        result = self.context.held_orders.hold(self.context.order)
        return DispatchOutcome(Action.HOLD, noop=not result.ok, result=result)

    def _recall(self) -> DispatchOutcome:
        if not self.open_modal(ModalKind.RECALL):
            return DispatchOutcome(Action.RECALL, noop=True)
        return DispatchOutcome(Action.RECALL, opened=ModalKind.RECALL)

    def _open_cashier_menu(self) -> DispatchOutcome:
        if not self.open_modal(ModalKind.CASHIER_MENU):
            return DispatchOutcome(Action.OPEN_CASHIER_MENU, noop=True)
        return DispatchOutcome(Action.OPEN_CASHIER_MENU, opened=ModalKind.CASHIER_MENU)

    def _clear(self) -> DispatchOutcome:
        self.context.order.clear()
        return DispatchOutcome(Action.CLEAR)

    def _edit_selected_line(self) -> DispatchOutcome:
        order = self.context.order
        line = order.selected_line()
        if line is None:
            return DispatchOutcome(Action.EDIT_SELECTED_LINE, noop=True)
        if not self.open_modal(ModalKind.EDIT_LINE):
            return DispatchOutcome(Action.EDIT_SELECTED_LINE, noop=True)
        self.line_edit = LineEditDraft(order.selected_line_index, line, self.context.role)
        return DispatchOutcome(Action.EDIT_SELECTED_LINE, opened=ModalKind.EDIT_LINE)

    def _delete_selected_line(self) -> DispatchOutcome:
        order = self.context.order
        if order.selected_line_index is None:
            return DispatchOutcome(Action.DELETE_SELECTED_LINE, noop=True)
        result = order.remove_line(order.selected_line_index)
        return DispatchOutcome(Action.DELETE_SELECTED_LINE, noop=not result.ok, result=result)

    def _pay(self) -> DispatchOutcome:
        if self.context.order.is_empty:
            return DispatchOutcome(Action.PAY, noop=True)
        if not self.open_modal(ModalKind.PAYMENT):
            return DispatchOutcome(Action.PAY, noop=True)
        self.payment = PaymentWorkflow(self.context)
        return DispatchOutcome(Action.PAY, opened=ModalKind.PAYMENT)

    def _lock_screen(self) -> DispatchOutcome:
        self.lock()
        return DispatchOutcome(Action.LOCK_SCREEN, opened=ModalKind.LOCK_SCREEN)

    # Modal commits

    def commit_line_edit(self) -> Result:
        """Apply the open edit dialog's draft; the dialog closes only on success."""
        if self.active_modal != ModalKind.EDIT_LINE or self.line_edit is None:
            return Result.failure(NotFoundError("No line is being edited."))
        result = self.line_edit.commit(self.context.order)
        if result.ok:
            self.close_modal(ModalKind.EDIT_LINE)
        return result

    def recall(self, held_id: int) -> Result:
        if self.locked or self.active_modal != ModalKind.RECALL:
            return Result.failure(NotFoundError("Recall dialog is not open."))
        result = self.context.held_orders.recall(held_id, self.context.order)
        if result.ok:
            self.close_modal(ModalKind.RECALL)
        return result

    def record_cash_drawer(self, amount: object, description: str) -> Result:
        if self.active_modal != ModalKind.CASH_DRAWER or self.cash_drawer_kind is None:
            return Result.failure(NotFoundError("Cash drawer dialog is not open."))
        result = self.context.ledger.record(
            self.cash_drawer_kind, amount, description, self.context.session.session_id
        )
        if result.ok:
            self.close_modal(ModalKind.CASH_DRAWER)
        return result

    def finalize_payment(self, method: object, tendered: object = None) -> Result:
        if self.active_modal != ModalKind.PAYMENT or self.payment is None:
            return Result.failure(NotFoundError("Payment dialog is not open."))
        result = self.payment.finalize(method, tendered)
        if result.ok:
            self.close_modal(ModalKind.PAYMENT)
        return result
