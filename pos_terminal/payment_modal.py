"""Payment dialog: choose a method, enter cash tendered, finish the sale."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.models import PaymentMethod
from pos_terminal.payment import PaymentOutcome
from pos_terminal.rendering import format_money, payment_method_label

_METHODS = tuple(PaymentMethod)
_MAX_TENDER_DIGITS = 12


class PaymentModal(ModalScreen[PaymentOutcome | None]):
    """Closing the dialog without finishing leaves the order untouched."""

    CSS = """
    PaymentModal {
        align: center middle;
        background: $background 60%;
    }

    #payment-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #payment-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #payment-body {
        color: white;
        margin-bottom: 1;
    }

    #payment-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #payment-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.workflow = dispatcher.payment
        self.method = PaymentMethod.CASH
        self.tendered = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="payment-dialog"):
            yield Static("Payment", id="payment-title")
            yield Static(id="payment-body")
            yield Static(id="payment-error")
            yield Static("←/→ method. Digits cash tendered. Enter finish. Esc cancel.", id="payment-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key == "escape":
            self.dispatcher.close_modal(ModalKind.PAYMENT)
            self.dismiss(None)
            return

        if event.key == "enter":
            self._finish()
            return

        if event.key in {"left", "right", "tab"}:
            delta = -1 if event.key == "left" else 1
            self.method = _METHODS[(_METHODS.index(self.method) + delta) % len(_METHODS)]
            self.tendered = ""
            self.error = ""
            self._refresh_content()
            return

        if self.method != PaymentMethod.CASH:
            return

        if event.key == "backspace":
            self.tendered = self.tendered[:-1]
            self.error = ""
            self._refresh_content()
            return

        if event.is_printable and event.character and (event.character.isdigit() or event.character == "."):
            if len(self.tendered) < _MAX_TENDER_DIGITS:
                self.tendered += event.character
            self.error = ""
            self._refresh_content()

    def _finish(self) -> None:
        result = self.dispatcher.finalize_payment(self.method, self.tendered or None)
        if result.ok:
            self.dismiss(result.value)
            return
        self.error = result.error.message
        self._refresh_content()

    def _refresh_content(self) -> None:
        paid, change = self.workflow.quote(self.method, self.tendered or None)
        body = Text(style="white")
        body.append("Total       ")
        body.append(format_money(self.workflow.amount_due), style="bold")
        body.append("\n\nMethod      ")
        for idx, method in enumerate(_METHODS):
            if idx > 0:
                body.append("  ")
            label = payment_method_label(method)
            if method == self.method:
                body.append(f"[{label}]", style="bold reverse")
            else:
                body.append(label, style="dim")
        body.append("\nTendered    ")
        if self.method == PaymentMethod.CASH:
            body.append(f"{self.tendered}|")
        else:
            body.append(format_money(paid), style="dim")
        body.append("\nChange      ")
        body.append(format_money(change), style="bold")
        self.query_one("#payment-body", Static).update(body)
        self.query_one("#payment-error", Static).update(self.error)
