"""Scrollable pane showing the decoded leaf value."""

from rich.text import Text
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import Static

from vstlib.decoder import DecodedValue, ValueStatus


def render_value(value: DecodedValue) -> Text:
    """Status tag, path and body. The body is plain text, never markup."""
    text = Text()
    if value.ok:
        text.append(" OK ", style="bold black on green")
    else:
        text.append(" ERROR ", style="bold white on red")
    text.append(f" {value.path}\n", style="bold")
    if value.status is ValueStatus.DECODE_ERROR and value.error:
        text.append(f"{value.error}\n", style="red")
        text.append(value.text)
    else:
        text.append(value.text, style="green" if value.ok else "red")
    return text


def render_loading(path: str) -> Text:
    return Text(f"Loading {path}...", style="dim")


class DataPane(VerticalScroll):
    """Focusable, scrollable container for the data view."""

    can_focus = True

    class Activated(Message):
        """Message sent when the pane receives focus."""

    def compose(self):
        yield Static(id="data-view")

    def show_value(self, value: DecodedValue) -> None:
        self.query_one("#data-view", Static).update(render_value(value))
        self.scroll_home(animate=False)

    def show_loading(self, path: str) -> None:
        self.query_one("#data-view", Static).update(render_loading(path))

    def on_focus(self) -> None:
        self.post_message(self.Activated())
