"""Cashier menu: drawer movements, shift report and lock."""

from __future__ import annotations

from enum import Enum

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher, ModalKind


class CashierMenuChoice(str, Enum):
    OPENING_FLOAT = "opening_float"
    CASH_WITHDRAWAL = "cash_withdrawal"
    OPEN_DRAWER = "open_drawer"
    SHIFT_REPORT = "shift_report"
    LOCK = "lock"


_MENU_ROWS = (
    (CashierMenuChoice.OPENING_FLOAT, "Record opening float"),
    (CashierMenuChoice.CASH_WITHDRAWAL, "Record cash withdrawal"),
    (CashierMenuChoice.OPEN_DRAWER, "Open cash drawer"),
    (CashierMenuChoice.SHIFT_REPORT, "End-of-shift report"),
    (CashierMenuChoice.LOCK, "Lock terminal"),
)


class CashierMenuModal(ModalScreen[CashierMenuChoice | None]):
    """Pick one cashier operation; the app opens the follow-up dialog."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Choose"),
        ("1", "choose(0)", "Opening float"),
        ("2", "choose(1)", "Withdrawal"),
        ("3", "choose(2)", "Open drawer"),
        ("4", "choose(3)", "Shift report"),
        ("5", "choose(4)", "Lock"),
    ]

    CSS = """
    CashierMenuModal {
        align: center middle;
        background: $background 60%;
    }

    #menu-dialog {
        width: 48;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #menu-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #menu-body {
        color: white;
        margin-bottom: 1;
    }

    #menu-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        with Container(id="menu-dialog"):
            yield Static("Cashier Menu", id="menu-title")
            yield Static(id="menu-body")
            yield Static("1-5 or J/K/↑/↓ + Enter choose. Esc close.", id="menu-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(_MENU_ROWS)
        self._refresh_content()

    def action_choose_current(self) -> None:
        self.action_choose(self.cursor_index)

    def action_choose(self, index: int) -> None:
        if self.dispatcher.active_modal != ModalKind.CASHIER_MENU:
            return
        self.dismiss(_MENU_ROWS[index][0])

    def _refresh_content(self) -> None:
        body = Text(style="white")
        for idx, (_, label) in enumerate(_MENU_ROWS):
            if idx > 0:
                body.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            body.append(f"{pointer}{idx + 1}. {label}", style="bold white" if idx == self.cursor_index else "white")
        self.query_one("#menu-body", Static).update(body)
