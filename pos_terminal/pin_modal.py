"""PIN entry screens: price authorization and the terminal lock."""

from __future__ import annotations

from typing import Callable

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_terminal.dispatcher import CommandDispatcher
from pos_terminal.errors import Result

_MAX_PIN_LENGTH = 8


class PinModal(ModalScreen[bool]):
    """Prompt for a PIN; a wrong PIN is shown inline and the prompt stays open."""

    CSS = """
    PinModal {
        align: center middle;
        background: $background 60%;
    }

    PinModal.locked {
        background: $background;
    }

    #pin-dialog {
        width: 44;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #pin-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #pin-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #pin-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #pin-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        check: Callable[[str], Result],
        title: str = "Authorization",
        prompt: str = "Supervisor PIN",
        cancellable: bool = True,
    ) -> None:
        super().__init__()
        self.check = check
        self.title_text = title
        self.prompt = prompt
        self.cancellable = cancellable
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="pin-dialog"):
            yield Static(self.title_text, id="pin-title")
            yield Static(self.prompt)
            yield Static(id="pin-value")
            yield Static(id="pin-error")
            help_text = "Enter confirm. Backspace delete."
            if self.cancellable:
                help_text += " Esc cancel."
            yield Static(help_text, id="pin-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key == "escape":
            if self.cancellable:
                self.dismiss(False)
            return

        if event.key == "enter":
            self._confirm()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self._refresh_content()
            return

        if event.is_printable and event.character and event.character.isdigit():
            if len(self.value) < _MAX_PIN_LENGTH:
                self.value += event.character
            self.error = ""
            self._refresh_content()

    def _confirm(self) -> None:
        if not self.value:
            self.error = "PIN is required."
            self._refresh_content()
            return

        result = self.check(self.value)
        if result.ok:
            self.dismiss(True)
            return
        self.error = result.error.message
        self.value = ""
        self._refresh_content()

    def _refresh_content(self) -> None:
        self.query_one("#pin-value", Static).update("•" * len(self.value))
        self.query_one("#pin-error", Static).update(self.error)


class LockScreen(PinModal):
    """Covers the terminal until the access PIN is entered."""

    def __init__(self, dispatcher: CommandDispatcher) -> None:
        super().__init__(
            check=dispatcher.unlock,
            title="Terminal locked",
            prompt="Enter the access PIN to unlock",
            cancellable=False,
        )
        self.add_class("locked")
