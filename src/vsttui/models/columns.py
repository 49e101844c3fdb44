"""Column bookkeeping for the Miller-column browser."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class Column:
    """One depth level: its child labels and which one is selected."""

    labels: List[str] = field(default_factory=list)
    selected: Optional[int] = None
    populated: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.labels

    @property
    def selected_label(self) -> Optional[str]:
        if self.selected is None:
            return None
        return self.labels[self.selected]

    def clear(self) -> None:
        self.labels = []
        self.selected = None
        self.populated = False


class ColumnModel:
    """The K visible columns and the paths they compose.

    Purely structural: no network, no rendering.
    """

    def __init__(self, root_path: str, count: int):
        if count < 1:
            raise ValueError("column count must be at least 1")
        self.root_path = root_path
        self.columns: List[Column] = [Column() for _ in range(count)]

    def __len__(self) -> int:
        return len(self.columns)

    def __getitem__(self, level: int) -> Column:
        return self.columns[level]

    def clear_from(self, level: int) -> None:
        """Empty every column at index >= level."""
        for column in self.columns[max(level, 0):]:
            column.clear()

    def populate(self, level: int, labels: Sequence[str]) -> None:
        """Clear stale columns, then fill ``level`` with ``labels``, nothing selected."""
        self.clear_from(level)
        column = self.columns[level]
        column.labels = list(labels)
        column.selected = None
        column.populated = True

    def select(self, level: int, label: str) -> None:
        column = self.columns[level]
        try:
            column.selected = column.labels.index(label)
        except ValueError:
            raise ValueError(f"{label!r} is not listed in column {level}") from None

    def path_at(self, level: int) -> str:
        """Path of the node whose children belong in column ``level``."""
        parts = [self.root_path]
        for index in range(level):
            label = self.columns[index].selected_label
            if label is None:
                raise ValueError(f"column {index} has no selection; path at level {level} is undefined")
            parts.append(label)
        return ".".join(parts)

    def child_path(self, level: int, label: str) -> str:
        return f"{self.path_at(level)}.{label}"

    def is_empty(self, level: int) -> bool:
        return self.columns[level].is_empty
