"""One column of the browser: a list of child labels."""

from typing import Sequence, Tuple

from rich.text import Text
from textual.message import Message
from textual.widgets import Label, ListItem, ListView


class ColumnList(ListView):
    """List view bound to a fixed depth level."""

    class Activated(Message):
        """Message sent when the column receives focus."""

        def __init__(self, level: int) -> None:
            super().__init__()
            self.level = level

    def __init__(self, level: int, **kwargs):
        super().__init__(**kwargs)
        self.level = level
        self._labels: Tuple[str, ...] = ()
        # empty columns are skipped by Tab and never take focus
        self.can_focus = False

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    async def set_labels(self, labels: Sequence[str], title: str = "") -> None:
        """Replace the listed labels; a no-op when they are unchanged."""
        self.border_title = title
        labels = tuple(labels)
        self.can_focus = bool(labels)
        if labels == self._labels:
            return
        self._labels = labels
        await self.clear()
        if labels:
            # Text avoids markup interpretation of labels
            await self.extend(ListItem(Label(Text(label))) for label in labels)
            self.index = 0

    def on_focus(self) -> None:
        self.post_message(self.Activated(self.level))
