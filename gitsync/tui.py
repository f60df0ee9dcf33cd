"""Interactive TUI for gitsync using Textual."""

import asyncio
from typing import Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key
from textual.widgets import Footer, Static

from .__version__ import __version__
from .core.session import Action, Session, SessionState
from .exceptions import GitSyncError
from .logging_config import get_logger
from .ui.views import render_body, render_status_bar
from .ui.widgets import BodyScroll, NonExpandingHeader, SessionView

logger = get_logger(__name__)


def translate_key(key: str, character: Optional[str]) -> str:
    """Map a Textual key event to the key name the session understands."""
    if character and len(character) == 1 and character.isprintable():
        return character
    return key


class GitSyncApp(App):
    """Interactive TUI for gitsync."""

    ENABLE_COMMAND_PALETTE = False
    TITLE = "gitsync"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    #body {
        height: 1fr;
    }

    #status-bar {
        dock: bottom;
        height: auto;
        background: $panel;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "session_quit", "Quit", priority=True),
    ]

    def __init__(self, session: Session):
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        yield NonExpandingHeader(show_clock=True, icon="")
        with BodyScroll(id="body"):
            yield SessionView(id="session-view")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.set_interval(0.4, self._tick)
        self._render()
        self.load_repository()  # @work decorator handles Worker creation

    def _tick(self) -> None:
        if self.session.state is SessionState.LOADING:
            self.session.tick()
            self._render()

    def _render(self) -> None:
        self.query_one("#session-view", SessionView).update(render_body(self.session))
        self.query_one("#status-bar", Static).update(render_status_bar(self.session))

    def on_key(self, event: Key) -> None:
        """Forward every key press to the session."""
        event.stop()
        event.prevent_default()
        self._dispatch(translate_key(event.key, event.character))

    def action_session_quit(self) -> None:
        self._dispatch("ctrl+c")

    def _dispatch(self, key: str) -> None:
        logger.debug(f"Key {key!r} in state {self.session.state.value}")
        self._apply(self.session.handle_key(key))

    def _apply(self, action: Action) -> None:
        """Run the work a transition asked for and redraw."""
        self._render()
        if action is Action.LOAD:
            self.load_repository()
        elif action is Action.REFRESH:
            self.refresh_branches()
        elif action is Action.RUN_NEXT:
            self.run_next_branch()
        elif action is Action.QUIT:
            self.exit(return_code=1 if self.session.startup_failed else 0)

    @work(exclusive=True, thread=False)
    async def load_repository(self) -> None:
        """Load configuration and branch information (runs in background)."""
        try:
            # Use asyncio.to_thread since keeper methods are sync but we're in async worker
            loaded = await asyncio.to_thread(self.session.run_load)
        except GitSyncError as e:
            self._apply(self.session.on_error(e))
            return
        except Exception as e:
            logger.error(f"Error loading repository: {e}", exc_info=True)
            self._apply(self.session.on_error(e))
            return
        self._apply(self.session.on_loaded(loaded))

    @work(exclusive=True, thread=False)
    async def refresh_branches(self) -> None:
        """Re-collect branch information without fetching (runs in background)."""
        try:
            branches = await asyncio.to_thread(self.session.run_refresh)
        except Exception as e:
            logger.error(f"Error refreshing: {e}", exc_info=True)
            self._apply(self.session.on_refresh_failed(e))
            return
        self.session.message = ""
        self._apply(self.session.on_refreshed(branches, len(self.session.keeper.collector.skipped)))

    @work(group="workflow", thread=False)
    async def run_next_branch(self) -> None:
        """Run one queued branch operation off the UI thread."""
        try:
            outcome = await asyncio.to_thread(self.session.run_step)
        except Exception as e:
            logger.error(f"Error running workflow step: {e}", exc_info=True)
            self._apply(self.session.on_error(e))
            return
        self._apply(self.session.on_branch_complete(outcome))
