"""Navigation state for the vstorage browser."""

import enum
from dataclasses import dataclass
from typing import Optional

from vstlib.decoder import DecodedValue

from .columns import ColumnModel


class FocusTarget(enum.Enum):
    COLUMNS = "columns"
    DATA_PANE = "data_pane"


class NavMode(enum.Enum):
    BROWSING = "browsing"          # a column has focus
    LEAF_DISPLAY = "leaf_display"  # a leaf is shown, focus stays on its column
    DATA_FOCUS = "data_focus"      # the user moved focus to the data pane


@dataclass
class BrowserState:
    """Everything the screen renders: columns, active column, focus and value."""

    columns: ColumnModel
    current_column: int = 0
    focus: FocusTarget = FocusTarget.COLUMNS
    mode: NavMode = NavMode.BROWSING
    value: Optional[DecodedValue] = None
    loading_path: Optional[str] = None

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def get_breadcrumb(self) -> str:
        """Generate breadcrumb string for the deepest selection."""
        parts = [self.columns.root_path]
        for column in self.columns.columns:
            label = column.selected_label
            if label is None:
                break
            parts.append(label)
        return ".".join(parts)
