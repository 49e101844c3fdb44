"""Navigation state machine for the column browser.

A selection is split in three steps so the network round trip can run off
the event loop: ``begin_select`` records the selection and issues a request
(event loop), ``resolve`` performs the fetches (any thread, touches no
state), and ``apply`` folds the result back into the state (event loop).
Every request carries an id; a result whose id is no longer the latest for
its column is dropped.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from vstlib.clients import TreeClient
from vstlib.decoder import DecodedValue, ValueStatus, decode_leaf
from vstlib.errors import VstorageError

from .models.columns import ColumnModel
from .models.navigation_state import BrowserState, FocusTarget, NavMode

logger = logging.getLogger(__name__)


ROOT_LEVEL = -1


@dataclass(frozen=True)
class FetchRequest:
    """A pending fetch for ``path``, issued by a selection in column ``level``."""

    request_id: int
    level: int
    path: str
    label: Optional[str] = None


@dataclass(frozen=True)
class FetchResult:
    request: FetchRequest
    children: Optional[List[str]] = None
    value: Optional[DecodedValue] = None


class NavigationController:
    """Drive BrowserState from user input and fetch results."""

    def __init__(self, client: TreeClient, root_path: str, column_count: int):
        self.client = client
        self.state = BrowserState(columns=ColumnModel(root_path, column_count))
        self._ids = itertools.count(1)
        self._latest: Dict[int, int] = {}

    @property
    def columns(self) -> ColumnModel:
        return self.state.columns

    def _issue(self, level: int, path: str, label: Optional[str] = None) -> FetchRequest:
        request = FetchRequest(next(self._ids), level, path, label)
        self._latest[level] = request.request_id
        # A new selection at ``level`` makes anything pending deeper obsolete
        for pending in [lvl for lvl in self._latest if lvl > level]:
            del self._latest[pending]
        self.state.loading_path = path
        return request

    def is_current(self, request: FetchRequest) -> bool:
        return self._latest.get(request.level) == request.request_id

    def begin_root(self) -> FetchRequest:
        """Request the children of the root path for column 0."""
        self.columns.clear_from(0)
        self.state.current_column = 0
        logger.info(f"Loading root path '{self.columns.root_path}'")
        return self._issue(ROOT_LEVEL, self.columns.root_path)

    def begin_select(self, level: int, label: str) -> FetchRequest:
        """Record the selection of ``label`` in column ``level`` and issue its fetch."""
        self.columns.select(level, label)
        self.columns.clear_from(level + 1)
        path = self.columns.path_at(level + 1)
        self.state.current_column = level
        self.state.focus = FocusTarget.COLUMNS
        logger.info(f"Selected '{label}' in column {level}: {path}")
        return self._issue(level, path, label)

    def resolve(self, request: FetchRequest) -> FetchResult:
        """Fetch children, falling back to the leaf value. Safe off the event loop."""
        if request.level + 1 < len(self.columns):
            try:
                children = self.client.fetch_children(request.path)
            except VstorageError as e:
                logger.warning(f"Children fetch for '{request.path}' failed, trying leaf: {e}")
                children = []
            if children:
                return FetchResult(request, children=children)
        else:
            logger.debug(f"'{request.path}' is at the column limit; fetching as leaf")

        try:
            raw = self.client.fetch_leaf(request.path)
        except VstorageError as e:
            logger.error(f"Leaf fetch for '{request.path}' failed: {e}")
            value = DecodedValue(
                path=request.path,
                text=f"Error fetching data: {e}",
                status=ValueStatus.FETCH_ERROR,
                error=str(e),
            )
            return FetchResult(request, value=value)
        return FetchResult(request, value=decode_leaf(request.path, raw))

    def apply(self, result: FetchResult) -> bool:
        """Fold ``result`` into the state. Returns False for a stale result."""
        request = result.request
        if not self.is_current(request):
            logger.debug(f"Dropping stale result #{request.request_id} for '{request.path}'")
            return False
        del self._latest[request.level]
        self.state.loading_path = None

        target = request.level + 1
        if result.children:
            self.columns.populate(target, result.children)
            self.state.current_column = target
            self.state.mode = NavMode.BROWSING
            logger.info(f"Populated column {target} with {len(result.children)} children of '{request.path}'")
        else:
            if target < len(self.columns):
                self.columns.clear_from(target)
            self.state.value = result.value
            self.state.current_column = max(request.level, 0)
            self.state.mode = NavMode.LEAF_DISPLAY
            logger.info(f"Displayed leaf '{request.path}' ({result.value.status.value})")
        self.state.focus = FocusTarget.COLUMNS
        return True

    def fail(self, request: FetchRequest, error: BaseException) -> bool:
        """Show an unexpected worker failure for ``request`` in the data pane."""
        value = DecodedValue(
            path=request.path,
            text=f"Error fetching data: {error}",
            status=ValueStatus.FETCH_ERROR,
            error=str(error),
        )
        return self.apply(FetchResult(request, value=value))

    def select(self, level: int, label: str) -> bool:
        """Run a whole selection synchronously."""
        return self.apply(self.resolve(self.begin_select(level, label)))

    def load_root(self) -> bool:
        return self.apply(self.resolve(self.begin_root()))

    def retry(self) -> FetchRequest:
        """Re-issue the deepest selection, or the root load when nothing is selected."""
        for level in reversed(range(len(self.columns))):
            label = self.columns[level].selected_label
            if label is not None:
                return self.begin_select(level, label)
        return self.begin_root()

    def move_left(self) -> bool:
        if self.state.focus is not FocusTarget.COLUMNS or self.state.current_column == 0:
            return False
        self.state.current_column -= 1
        self.state.mode = NavMode.BROWSING
        return True

    def move_right(self) -> bool:
        if self.state.focus is not FocusTarget.COLUMNS:
            return False
        target = self.state.current_column + 1
        if target >= len(self.columns) or self.columns.is_empty(target):
            return False
        self.state.current_column = target
        self.state.mode = NavMode.BROWSING
        return True

    def focus_column(self, level: int) -> bool:
        """Make ``level`` the active column, e.g. after a mouse click."""
        if not 0 <= level < len(self.columns) or self.columns.is_empty(level):
            return False
        self.state.current_column = level
        self.state.focus = FocusTarget.COLUMNS
        self.state.mode = NavMode.BROWSING
        return True

    def switch_to_data_pane(self) -> bool:
        if self.state.focus is not FocusTarget.COLUMNS:
            return False
        self.state.focus = FocusTarget.DATA_PANE
        self.state.mode = NavMode.DATA_FOCUS
        return True

    def switch_to_columns(self) -> bool:
        if self.state.focus is not FocusTarget.DATA_PANE:
            return False
        self.state.focus = FocusTarget.COLUMNS
        self.state.mode = NavMode.BROWSING
        return True
