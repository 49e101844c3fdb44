"""Main TUI application."""

import logging
from typing import Optional

from textual.app import App

from vstlib.clients import TreeClient
from vstlib.config import Config
from vstlib.errors import DisplaySurfaceFailed

from .controller import NavigationController
from .screens.browser_screen import BrowserScreen


logger = logging.getLogger(__name__)


class VStorageApp(App):
    """Column browser for the vstorage tree."""

    TITLE = "VStorage Viewer"

    CSS = """
    Screen {
        layout: vertical;
    }

    Header {
        dock: top;
    }

    Footer {
        dock: bottom;
    }

    #columns {
        height: 1fr;
    }

    .column {
        width: 1fr;
        border: round $primary;
    }

    .column:focus {
        border: round $accent;
    }

    #data-pane {
        height: 2fr;
        border: round $primary;
    }

    #data-pane:focus {
        border: round $accent;
    }
    """

    def __init__(self, config: Config, client: Optional[TreeClient] = None):
        super().__init__()
        self.config = config
        self.client = client or TreeClient.from_config(config)
        self.controller = NavigationController(self.client, config.root_path, config.column_count)

    def on_mount(self) -> None:
        """Initialize the app on mount."""
        self.sub_title = self.config.root_path
        logger.info(f"Browsing {self.config.api_base_url} from '{self.config.root_path}'")
        self.push_screen(BrowserScreen(self.controller))


def run_tui(config: Config) -> None:
    """Entry point for running the TUI."""
    # Log to file only; the terminal belongs to the UI
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.FileHandler(config.log_file, mode='w')
        ],
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logger.info(f"Starting TUI, debug log at: {config.log_file}")

    app = VStorageApp(config)
    try:
        app.run()
    except Exception as e:
        logger.exception("TUI failed to run")
        raise DisplaySurfaceFailed(f"display surface failed: {e}") from e
    finally:
        app.client.close()

    if app.return_code:
        logger.error(f"TUI exited with return code {app.return_code}")
        raise DisplaySurfaceFailed(f"display surface exited with status {app.return_code}")
