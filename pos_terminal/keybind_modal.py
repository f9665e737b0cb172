"""Rebind the terminal's action keys."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.constant import ACTION_LABELS
from pos_terminal.dispatcher import CommandDispatcher, ModalKind
from pos_terminal.keybinds import KeybindingMap, save_keybinds
from pos_terminal.models import Action

_ACTIONS = tuple(Action)


class KeybindModal(ModalScreen[KeybindingMap | None]):
    """Edit a working copy of the bindings; only Ctrl+S persists it."""

    CSS = """
    KeybindModal {
        align: center middle;
        background: $background 60%;
    }

    #keybind-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #keybind-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #keybind-body {
        color: white;
        margin-bottom: 1;
    }

    #keybind-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #keybind-help {
        color: #dddddd;
    }
    """

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__()
        self.dispatcher = dispatcher
        self.editing = dispatcher.keybinds
        self.cursor_index = 0
        self.capturing = False
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="keybind-dialog"):
            yield Static("Keybindings", id="keybind-title")
            yield Static(id="keybind-body")
            yield Static(id="keybind-error")
            yield Static(id="keybind-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if self.capturing:
            if event.key != "escape":
                self.editing = self.editing.with_binding(_ACTIONS[self.cursor_index], event.key)
            self.capturing = False
            self.error = ""
            self._refresh_content()
            return

        if event.key == "escape":
            self.dispatcher.close_modal(ModalKind.KEYBIND_SETTINGS)
            self.dismiss(None)
            return

        if event.key == "ctrl+s":
            self._save()
            return

        if event.key == "enter":
            self.capturing = True
            self._refresh_content()
            return

        if event.key in {"up", "down", "j", "k"}:
            delta = -1 if event.key in {"up", "k"} else 1
            self.cursor_index = (self.cursor_index + delta) % len(_ACTIONS)
            self._refresh_content()

    def _save(self) -> None:
        result = save_keybinds(self.dispatcher.context.store, self.editing)
        if not result.ok:
            self.error = result.error.message
            self._refresh_content()
            return
        self.dispatcher.close_modal(ModalKind.KEYBIND_SETTINGS)
        self.dismiss(result.value)

    def _refresh_content(self) -> None:
        body = Text(style="white")
        duplicates = set(self.editing.duplicate_keys())
        for idx, action in enumerate(_ACTIONS):
            if idx > 0:
                body.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            key = self.editing.key_for(action)
            shown_key = "press a key…" if self.capturing and idx == self.cursor_index else key.upper()
            body.append(f"{pointer}{ACTION_LABELS[action.value]:<18}")
            body.append(shown_key, style="bold #ffb3b3" if key in duplicates else "bold")
        self.query_one("#keybind-body", Static).update(body)
        self.query_one("#keybind-error", Static).update(self.error)
        help_text = (
            "Press the new key. Esc keeps the old one."
            if self.capturing
            else "↑/↓ move. Enter rebind. Ctrl+S save. Esc discard."
        )
        self.query_one("#keybind-help", Static).update(help_text)
