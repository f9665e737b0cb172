"""Record an opening float or a cash withdrawal."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.errors import Result
from pos_terminal.rendering import cash_drawer_kind_label

_MAX_DESCRIPTION_LENGTH = 120


class CashDrawerModal(ModalScreen[Result | None]):
    """Amount + description form; invalid amounts are reported inline."""

    CSS = """
    CashDrawerModal {
        align: center middle;
        background: $background 60%;
    }

    #drawer-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #drawer-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #drawer-body {
        color: white;
        margin-bottom: 1;
    }

    #drawer-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #drawer-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.amount = ""
        self.description = ""
        self.editing_description = False
        self.error = ""

    def compose(self) -> ComposeResult:
        title = cash_drawer_kind_label(self.dispatcher.cash_drawer_kind)
        with Container(id="drawer-dialog"):
            yield Static(title, id="drawer-title")
            yield Static(id="drawer-body")
            yield Static(id="drawer-error")
            yield Static("Tab switch field. Enter save. Esc cancel.", id="drawer-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key == "escape":
            self.dispatcher.close_modal(ModalKind.CASH_DRAWER)
            self.dismiss(None)
            return

        if event.key == "enter":
            self._confirm()
            return

        if event.key in {"tab", "shift+tab", "up", "down"}:
            self.editing_description = not self.editing_description
            self._refresh_content()
            return

        if event.key == "backspace":
            if self.editing_description:
                self.description = self.description[:-1]
            else:
                self.amount = self.amount[:-1]
            self.error = ""
            self._refresh_content()
            return

        if not (event.is_printable and event.character):
            return

        if self.editing_description:
            if len(self.description) < _MAX_DESCRIPTION_LENGTH:
                self.description += event.character
        elif event.character.isdigit() or event.character == ".":
            self.amount += event.character
        self.error = ""
        self._refresh_content()

    def _confirm(self) -> None:
        if not self.amount:
            self.error = "Amount is required."
            self._refresh_content()
            return

        result = self.dispatcher.record_cash_drawer(self.amount, self.description)
        if result.ok:
            self.dismiss(result)
            return
        self.error = result.error.message
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = Text(style="white")
        amount_pointer = "  " if self.editing_description else "➤ "
        description_pointer = "➤ " if self.editing_description else "  "
        body.append(f"{amount_pointer}Amount       {self.amount}")
        if not self.editing_description:
            body.append("|")
        body.append(f"\n{description_pointer}Description  {self.description}")
        if self.editing_description:
            body.append("|")
        self.query_one("#drawer-body", Static).update(body)
        self.query_one("#drawer-error", Static).update(self.error)
