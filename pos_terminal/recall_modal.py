"""Search and recall a held order."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.errors import Result
from pos_terminal.models import HeldOrder
from pos_terminal.rendering import format_held_order


class RecallModal(ModalScreen[Result | None]):
    """Filter held orders by customer or first item and recall one."""

    CSS = """
    RecallModal {
        align: center middle;
        background: $background 60%;
    }

    #recall-dialog {
        width: 72;
        height: auto;
        max-height: 80%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #recall-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #recall-search {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #recall-body {
        color: white;
        margin-bottom: 1;
    }

    #recall-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.registry = dispatcher.context.held_orders
        self.search = ""
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        with Container(id="recall-dialog"):
            yield Static("Recall Held Order", id="recall-title")
            yield Static(id="recall-search")
            yield Static(id="recall-body")
            yield Static("Type to filter. ↑/↓ move. Enter recall. Esc close.", id="recall-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key == "escape":
            self.dispatcher.close_modal(ModalKind.RECALL)
            self.dismiss(None)
            return

        if event.key == "enter":
            self._recall_current()
            return

        if event.key in {"up", "down"}:
            matches = self._matches()
            if matches:
                delta = -1 if event.key == "up" else 1
                self.cursor_index = (self.cursor_index + delta) % len(matches)
            self._refresh_content()
            return

        if event.key == "backspace":
            self.search = self.search[:-1]
            self.cursor_index = 0
            self._refresh_content()
            return

        if event.is_printable and event.character:
            self.search += event.character
            self.cursor_index = 0
            self._refresh_content()

    def _matches(self) -> list[HeldOrder]:
        return self.registry.search(self.search)

    def _recall_current(self) -> None:
        matches = self._matches()
        if not matches:
            return
        result = self.dispatcher.recall(matches[self.cursor_index].id)
        if result.ok:
            self.dismiss(result)
            return
        self._refresh_content()

    def _refresh_content(self) -> None:
        matches = self._matches()
        if self.cursor_index >= len(matches):
            self.cursor_index = max(0, len(matches) - 1)
        self.registry.selected_id = matches[self.cursor_index].id if matches else None

        self.query_one("#recall-search", Static).update(f"Search: {self.search}|")
        body = Text(style="white")
        if not matches:
            body.append("No held orders" if not self.search else "No matches", style="dim")
        for idx, held in enumerate(matches):
            if idx > 0:
                body.append("\n")
            body.append_text(format_held_order(held, idx == self.cursor_index))
        self.query_one("#recall-body", Static).update(body)
