"""Textual shell for the cashier: product search, the active order and the dialogs the dispatcher opens."""

from __future__ import annotations

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from pos_terminal.cash_drawer_modal import CashDrawerModal
from pos_terminal.cashier_menu_modal import CashierMenuChoice, CashierMenuModal
from pos_terminal.constant import ACTION_LABELS
from pos_terminal.data import DEFAULT_CATALOG, ProductCatalog
from pos_terminal.debug_log import log_debug
from pos_terminal.dispatcher import CommandDispatcher, DispatchOutcome, ModalKind
from pos_terminal.edit_line_modal import EditLineModal
from pos_terminal.errors import PersistenceError, Result
from pos_terminal.keybind_modal import KeybindModal
from pos_terminal.keybinds import KeybindingMap, load_keybinds
from pos_terminal.models import Action, CashDrawerKind, Product
from pos_terminal.payment import PaymentOutcome
from pos_terminal.payment_modal import PaymentModal
from pos_terminal.pin_modal import LockScreen
from pos_terminal.printer import check_printer_dependencies, open_cash_drawer
from pos_terminal.recall_modal import RecallModal
from pos_terminal.rendering import format_money, format_order_line, format_total
from pos_terminal.session import TerminalContext
from pos_terminal.shift_report_modal import ShiftReportModal


class PosTerminalApp(App):
    """Keyboard-driven cashier terminal: build an order, hold it, take payment."""

    TITLE = "POS Terminal"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #order-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-total {
        height: 3;
        border: heavy $primary;
        padding: 0 1;
        text-style: bold;
    }

    #keybind-hints {
        height: auto;
        color: #dddddd;
        margin-top: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    search_query = reactive("")
    selected_index = reactive(0)

    BINDINGS = [
        Binding("ctrl+k", "keybind_settings", "Keybindings"),
        Binding("ctrl+q", "logout", "Logout"),
    ]

    def __init__(
        self,
        context: TerminalContext,
        keybinds: KeybindingMap | None = None,
        catalog: ProductCatalog | None = None,
    ) -> None:
        super().__init__()
        self.context = context
        self.catalog = catalog or DEFAULT_CATALOG
        self.dispatcher = CommandDispatcher(context, keybinds or load_keybinds(context.store))
        self.system_status = ""
        self.sub_title = f"{context.session.cashier_name} · {context.session.session_id}"
        log_debug("app_init")

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="order-pane"):
                yield Static("Current Order", classes="pane-title")
                yield Static("(no items yet)", id="order-list")
                yield Static(id="order-total")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")
                yield Static(id="keybind-hints")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        self.system_status = msg
        try:
            self.context.store.bootstrap_schema()
        except PersistenceError as exc:
            self.system_status = exc.message
            log_debug(f"on_mount bootstrap_failed error={exc!r}")
        log_debug(f"on_mount printer_status={msg!r}")
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if not self.dispatcher.accepts_global_keys:
            return

        outcome = self.dispatcher.handle_key(event.key)
        if outcome is not None:
            event.stop()
            self._apply_outcome(outcome)
            return

        if event.key == "enter":
            self._submit_search()
            event.stop()
            return

        if event.key in {"up", "down"}:
            delta = -1 if event.key == "up" else 1
            if self.search_query:
                self._cycle_results(delta)
            else:
                self.context.order.move_selection(delta)
                self._refresh_order()
            event.stop()
            return

        if event.key == "backspace":
            if self.search_query:
                self.search_query = self.search_query[:-1]
                self.selected_index = 0
                self._refresh_search()
            event.stop()
            return

        if event.key == "escape":
            self.search_query = ""
            self.selected_index = 0
            self._refresh_search()
            event.stop()
            return

        if event.is_printable and event.character and len(event.character) == 1:
            self.search_query += event.character
            self.selected_index = 0
            self._refresh_search()
            event.stop()

    def _apply_outcome(self, outcome: DispatchOutcome) -> None:
        if outcome.result is not None and not outcome.result.ok:
            self.system_status = outcome.result.error.message
        elif outcome.action == Action.HOLD:
            self.system_status = "Order held"
        elif outcome.action == Action.CLEAR:
            self.system_status = "Order cleared"

        if outcome.opened == ModalKind.RECALL:
            self.push_screen(RecallModal(self.dispatcher), self._after_recall)
        elif outcome.opened == ModalKind.CASHIER_MENU:
            self.push_screen(CashierMenuModal(self.dispatcher), self._after_cashier_menu)
        elif outcome.opened == ModalKind.EDIT_LINE:
            self.push_screen(EditLineModal(self.dispatcher), self._after_modal)
        elif outcome.opened == ModalKind.PAYMENT:
            self.push_screen(PaymentModal(self.dispatcher), self._after_payment)
        elif outcome.opened == ModalKind.LOCK_SCREEN:
            self.push_screen(LockScreen(self.dispatcher), self._after_modal)
        self._refresh_all()

    def _after_modal(self, _result: object = None) -> None:
        self._refresh_all()

    def _after_recall(self, result: Result | None) -> None:
        if result is not None and result.ok:
            self.system_status = f"Recalled {result.value.customer_label}"
        self._refresh_all()

    def _after_payment(self, outcome: PaymentOutcome | None) -> None:
        if outcome is None:
            self.system_status = "Payment cancelled"
        elif outcome.receipt_printed:
            self.system_status = (
                f"Paid {format_money(outcome.transaction.total_amount)}, "
                f"change {format_money(outcome.transaction.change)}"
            )
        else:
            self.system_status = f"Paid {outcome.transaction.id[:12]} but receipt failed: {outcome.receipt_error}"
        self._refresh_all()

    def _after_cashier_menu(self, choice: CashierMenuChoice | None) -> None:
        if choice == CashierMenuChoice.OPENING_FLOAT:
            self.dispatcher.open_cash_drawer_dialog(CashDrawerKind.OPENING_FLOAT)
            self.push_screen(CashDrawerModal(self.dispatcher), self._after_cash_drawer)
        elif choice == CashierMenuChoice.CASH_WITHDRAWAL:
            self.dispatcher.open_cash_drawer_dialog(CashDrawerKind.CASH_WITHDRAWAL)
            self.push_screen(CashDrawerModal(self.dispatcher), self._after_cash_drawer)
        elif choice == CashierMenuChoice.SHIFT_REPORT:
            self.dispatcher.open_shift_report()
            self.push_screen(ShiftReportModal(self.dispatcher), self._after_modal)
        elif choice == CashierMenuChoice.LOCK:
            self.dispatcher.lock()
            self.push_screen(LockScreen(self.dispatcher), self._after_modal)
        elif choice == CashierMenuChoice.OPEN_DRAWER:
            self.dispatcher.close_modal(ModalKind.CASHIER_MENU)
            try:
                open_cash_drawer()
                self.system_status = "Cash drawer opened"
            except Exception as exc:
                self.system_status = f"Cash drawer failed: {exc}"
                log_debug(f"open_drawer_failed error={exc!r}")
        else:
            self.dispatcher.close_modal(ModalKind.CASHIER_MENU)
        self._refresh_all()

    def _after_cash_drawer(self, result: Result | None) -> None:
        if result is not None and result.ok:
            self.system_status = f"Recorded {format_money(result.value.amount)}"
        self._refresh_all()

    def action_keybind_settings(self) -> None:
        if not self.dispatcher.open_keybind_settings():
            return
        self.push_screen(KeybindModal(self.dispatcher), self._after_keybinds)

    def _after_keybinds(self, keybinds: KeybindingMap | None) -> None:
        if keybinds is not None:
            self.dispatcher.keybinds = keybinds
            self.system_status = "Keybindings saved"
        self._refresh_all()

    def action_logout(self) -> None:
        if not self.dispatcher.accepts_global_keys:
            return
        self.context.teardown()
        self.exit()

    def _filtered_results(self) -> list[Product]:
        if not self.search_query:
            return []
        return self.catalog.search(self.search_query)

    def _cycle_results(self, delta: int) -> None:
        results = self._filtered_results()
        if not results:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def _submit_search(self) -> None:
        if not self.search_query.strip():
            return
        product = self.catalog.find_by_sku_or_name(self.search_query)
        if product is None:
            results = self._filtered_results()
            if not results:
                self.system_status = f"No product matches {self.search_query!r}"
                self._refresh_search()
                return
            product = results[min(self.selected_index, len(results) - 1)]

        result = self.context.order.add_or_increment(product)
        self.system_status = f"Added {product.name}" if result.ok else result.error.message
        self.search_query = ""
        self.selected_index = 0
        self._refresh_all()

    def _refresh_all(self) -> None:
        self._refresh_order()
        self._refresh_search()
        self._refresh_hints()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_order(self) -> None:
        try:
            order_widget = self.query_one("#order-list", Static)
            total_widget = self.query_one("#order-total", Static)
        except NoMatches:
            return

        order = self.context.order
        total_widget.update(format_total("TOTAL", order.grand_total()))
        if order.is_empty:
            order_widget.update("(no items yet)")
            return

        start, end = self._window_bounds(len(order.lines), self._visible_rows(order_widget), order.selected_line_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append_text(format_order_line(idx, order.lines[idx], idx == order.selected_line_index))
        if end < len(order.lines):
            lines.append("\n⋮", style="dim")
        order_widget.update(lines)

    def _refresh_search(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        text = Text()
        text.append("SKU / name: ", style="bold")
        text.append(self.search_query or "")
        text.append("|", style="blink")
        text.append(f"\n{self.system_status or 'Ready'}", style="dim")
        held = len(self.context.held_orders)
        if held:
            text.append(f"  · {held} held", style="dim")
        bar.update(text)
        self._refresh_results(self._filtered_results())

    def _refresh_results(self, results: list[Product]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if not self.search_query:
            results_widget.update("Type a SKU or product name, Enter to add.")
            return
        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            product = results[idx]
            lines.append(f"{pointer}{product.name}  ")
            lines.append(f"{product.sku}  {format_money(product.price)}", style="dim")
        if end < len(results):
            lines.append("\n⋮", style="dim")
        results_widget.update(lines)

    def _refresh_hints(self) -> None:
        try:
            hints = self.query_one("#keybind-hints", Static)
        except NoMatches:
            return
        text = Text()
        for idx, action in enumerate(Action):
            if idx > 0:
                text.append("  ")
            text.append(self.dispatcher.keybinds.key_for(action).upper(), style="bold")
            text.append(f" {ACTION_LABELS[action.value]}")
        text.append("\nCtrl+K keybindings  Ctrl+Q logout", style="dim")
        hints.update(text)
