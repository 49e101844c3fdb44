"""Miller-column browser screen."""

from functools import partial
from typing import Dict, List
import logging

from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, ListView
from textual.worker import Worker, WorkerState

from ..controller import FetchRequest, NavigationController
from ..models.navigation_state import FocusTarget
from ..widgets.column_list import ColumnList
from ..widgets.data_pane import DataPane

logger = logging.getLogger(__name__)


class BrowserScreen(Screen):
    """Columns of vstorage children above a data pane for leaf values."""

    BINDINGS = [
        Binding("left", "move_left", "Left", show=False),
        Binding("right", "move_right", "Right", show=False),
        ("s", "focus_data", "Data"),
        ("w", "focus_columns", "Columns"),
        ("r", "refresh", "Retry"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, controller: NavigationController, **kwargs):
        super().__init__(**kwargs)
        self.controller = controller
        self.column_lists: List[ColumnList] = []
        self.data_pane: DataPane
        self._pending: Dict[Worker, FetchRequest] = {}

    def compose(self):
        """Compose the screen layout."""
        yield Header()
        with Vertical(id="browser"):
            with Horizontal(id="columns"):
                for level in range(self.controller.state.column_count):
                    yield ColumnList(level, id=f"column-{level}", classes="column")
            yield DataPane(id="data-pane")
        yield Footer()

    def on_mount(self) -> None:
        """Wire up widgets and load the root path."""
        self.column_lists = list(self.query(ColumnList))
        self.data_pane = self.query_one("#data-pane", DataPane)
        self.data_pane.border_title = "Data"
        self.start_fetch(self.controller.begin_root())

    def start_fetch(self, request: FetchRequest) -> None:
        """Run the fetch for ``request`` on a worker thread."""
        self.data_pane.show_loading(request.path)
        worker = self.run_worker(
            partial(self.controller.resolve, request),
            name=f"fetch-{request.request_id}",
            group="fetch",
            thread=True,
        )
        self._pending[worker] = request

    async def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Apply fetch results on the event loop."""
        request = self._pending.get(event.worker)
        if request is None:
            return

        if event.state == WorkerState.SUCCESS:
            del self._pending[event.worker]
            applied = self.controller.apply(event.worker.result)
        elif event.state == WorkerState.ERROR:
            del self._pending[event.worker]
            logger.error(f"Fetch worker for '{request.path}' failed", exc_info=event.worker.error)
            applied = self.controller.fail(request, event.worker.error)
        elif event.state == WorkerState.CANCELLED:
            del self._pending[event.worker]
            return
        else:
            return

        if applied:
            await self.sync_view()

    async def sync_view(self) -> None:
        """Bring widgets in line with the controller state."""
        state = self.controller.state
        for level, column_list in enumerate(self.column_lists):
            column = state.columns[level]
            title = state.columns.path_at(level) if column.populated else ""
            await column_list.set_labels(column.labels, title)

        if state.loading_path:
            self.data_pane.show_loading(state.loading_path)
        elif state.value is not None:
            self.data_pane.show_value(state.value)

        self.app.sub_title = state.get_breadcrumb()

        if state.focus is FocusTarget.DATA_PANE or state.columns.is_empty(state.current_column):
            self.data_pane.focus()
        else:
            self.column_lists[state.current_column].focus()

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        """Drill into the activated entry."""
        column_list = event.list_view
        if not isinstance(column_list, ColumnList) or column_list.index is None:
            return
        labels = self.controller.columns[column_list.level].labels
        if not 0 <= column_list.index < len(labels):
            return
        request = self.controller.begin_select(column_list.level, labels[column_list.index])
        await self.sync_view()
        self.start_fetch(request)

    async def on_column_list_activated(self, message: ColumnList.Activated) -> None:
        if not self.controller.focus_column(message.level):
            await self.sync_view()

    def on_data_pane_activated(self, message: DataPane.Activated) -> None:
        self.controller.switch_to_data_pane()

    async def action_move_left(self) -> None:
        if self.controller.move_left():
            await self.sync_view()

    async def action_move_right(self) -> None:
        if self.controller.move_right():
            await self.sync_view()

    async def action_focus_data(self) -> None:
        if self.controller.switch_to_data_pane():
            await self.sync_view()

    async def action_focus_columns(self) -> None:
        if self.controller.switch_to_columns():
            await self.sync_view()

    async def action_refresh(self) -> None:
        """Re-fetch the deepest selection."""
        request = self.controller.retry()
        logger.info(f"Retrying '{request.path}'")
        await self.sync_view()
        self.start_fetch(request)

    def action_quit(self) -> None:
        """Quit the application."""
        self.app.exit()
