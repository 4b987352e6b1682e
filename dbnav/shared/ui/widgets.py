"""Small widgets shared by the explorer and results panes."""

from __future__ import annotations

from textual.binding import Binding
from textual.message import Message
from textual.widgets import Input


class PromptInput(Input):
    """Single-line prompt that reports Escape as a cancel."""

    DEFAULT_CSS = """
    PromptInput {
        height: 1;
        border: none;
        padding: 0 1;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False)]

    class Cancelled(Message):
        """Escape was pressed in the prompt."""

        def __init__(self, prompt: PromptInput) -> None:
            super().__init__()
            self.prompt = prompt

        @property
        def control(self) -> PromptInput:
            return self.prompt

    def action_cancel(self) -> None:
        self.post_message(self.Cancelled(self))


class SearchPrompt(PromptInput):
    """Hidden ``/`` prompt; ``target`` says what the query applies to."""

    DEFAULT_CSS = """
    SearchPrompt {
        display: none;
    }

    SearchPrompt.visible {
        display: block;
    }
    """

    TARGETS = {"tree": "/", "grid": "/", "table": "?"}

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.target = ""

    def open(self, target: str) -> None:
        """Show the prompt for target and focus it."""
        self.target = target
        self.value = ""
        self.placeholder = f"{self.TARGETS.get(target, '/')} search {target}"
        self.add_class("visible")
        self.focus()

    def close(self) -> None:
        self.target = ""
        self.remove_class("visible")

    @property
    def is_open(self) -> bool:
        return "visible" in self.classes
