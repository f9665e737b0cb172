"""Edit quantity, price and discount of the selected order line."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.errors import Result
from pos_terminal.models import UserRole
from pos_terminal.pin_modal import PinModal
from pos_terminal.rendering import format_money

_FIELDS = ("quantity", "unit_price", "discount_percent", "discount")
_FIELD_LABELS = {
    "quantity": "Quantity",
    "unit_price": "Unit price",
    "discount_percent": "Discount %",
    "discount": "Discount / unit",
}


def _plain(value: Decimal | int) -> str:
    if isinstance(value, int):
        return str(value)
    return format(value.quantize(Decimal("0.01")).normalize(), "f")


class EditLineModal(ModalScreen[Result | None]):
    """Line edit dialog; nothing reaches the order until Enter commits."""

    CSS = """
    EditLineModal {
        align: center middle;
        background: $background 60%;
    }

    #edit-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #edit-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #edit-body {
        color: white;
        margin-bottom: 1;
    }

    #edit-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #edit-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.draft = dispatcher.line_edit
        self.cursor_index = 0
        self.error = ""
        self.buffers: dict[str, str] = {}
        self._sync_buffers()

    def compose(self) -> ComposeResult:
        with Container(id="edit-dialog"):
            yield Static("Edit Line", id="edit-title")
            yield Static(id="edit-body")
            yield Static(id="edit-error")
            yield Static(
                "↑/↓/Tab field. Digits edit. U unlock price. Enter OK. Esc cancel.",
                id="edit-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key == "escape":
            self.dispatcher.close_modal(ModalKind.EDIT_LINE)
            self.dismiss(None)
            return

        if event.key == "enter":
            self._confirm()
            return

        if event.key in {"up", "down", "tab", "shift+tab"}:
            delta = -1 if event.key in {"up", "shift+tab"} else 1
            self.cursor_index = (self.cursor_index + delta) % len(_FIELDS)
            self._refresh_content()
            return

        if event.key == "u":
            self._unlock_price()
            return

        field = _FIELDS[self.cursor_index]
        if field == "unit_price" and self.draft.price_locked:
            return

        if event.key == "backspace":
            self.buffers[field] = self.buffers[field][:-1]
            self._apply(field)
            return

        if event.is_printable and event.character and (event.character.isdigit() or event.character == "."):
            if field == "quantity" and event.character == ".":
                return
            self.buffers[field] += event.character
            self._apply(field)

    def _apply(self, field: str) -> None:
        raw = self.buffers[field]
        if field == "quantity":
            result = self.draft.set_quantity(raw)
        elif field == "unit_price":
            result = self.draft.set_unit_price(raw)
        elif field == "discount_percent":
            result = self.draft.set_discount_percent(raw)
        else:
            result = self.draft.set_discount(raw)
        self.error = "" if result.ok else result.error.message
        if result.ok:
            self._sync_buffers(keep=field)
        self._refresh_content()

    def _sync_buffers(self, keep: str | None = None) -> None:
        values = {
            "quantity": self.draft.quantity,
            "unit_price": self.draft.unit_price,
            "discount_percent": self.draft.discount_percent,
            "discount": self.draft.discount,
        }
        for field in _FIELDS:
            if field != keep:
                self.buffers[field] = _plain(values[field])

    def _unlock_price(self) -> None:
        if not self.draft.price_locked:
            return
        authorizer = self.dispatcher.context.auth_authorizer
        if self.draft.role != UserRole.STAFF:
            self.draft.unlock_price(authorizer)
            self._refresh_content()
            return
        self.app.push_screen(
            PinModal(check=lambda pin: self.draft.unlock_price(authorizer, pin), prompt="Supervisor PIN to change price"),
            lambda _granted: self._refresh_content(),
        )

    def _confirm(self) -> None:
        result = self.dispatcher.commit_line_edit()
        if result.ok:
            self.dismiss(result)
            return
        self.error = result.error.message
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = Text(style="white")
        body.append(f"{self.draft.original.name}\n", style="bold")
        body.append(f"SKU {self.draft.original.sku}\n\n", style="dim")
        for idx, field in enumerate(_FIELDS):
            pointer = "➤ " if idx == self.cursor_index else "  "
            body.append(f"{pointer}{_FIELD_LABELS[field]:<16}")
            body.append(self.buffers[field], style="bold" if idx == self.cursor_index else "")
            if field == "unit_price":
                body.append("  [locked]" if self.draft.price_locked else "  [unlocked]", style="dim")
            body.append("\n")
        body.append(f"\n  {'Line total':<16}{format_money(self.draft.total)}", style="bold")
        self.query_one("#edit-body", Static).update(body)
        self.query_one("#edit-error", Static).update(self.error)
