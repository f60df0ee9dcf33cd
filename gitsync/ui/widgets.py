"""Custom widgets for the gitsync TUI."""

from textual.app import ComposeResult, RenderResult
from textual.containers import VerticalScroll
from textual.events import Click
from textual.widgets import Header, Static
from textual.widgets._header import HeaderIcon, HeaderTitle, HeaderClockSpace
from rich.text import Text

from gitsync.__version__ import __version__


class VersionDisplay(HeaderClockSpace):
    """Shows the version where the header clock would be."""

    DEFAULT_CSS = """
    VersionDisplay {
        width: auto;
        dock: right;
        padding: 0 1;
        background: $foreground 5%;
        color: $text;
        text-align: center;
        text-opacity: 85%;
    }
    """

    def render(self) -> RenderResult:
        return Text(f"v{__version__}")


class NonExpandingHeader(Header):
    """Header that ignores click-to-expand and shows the version instead of a clock."""

    def compose(self) -> ComposeResult:
        yield HeaderIcon().data_bind(Header.icon)
        yield HeaderTitle()
        yield VersionDisplay() if self._show_clock else HeaderClockSpace()

    def on_click(self, event: Click) -> None:
        event.stop()


class SessionView(Static):
    """Scrollable body that re-renders from session state."""

    DEFAULT_CSS = """
    SessionView {
        height: auto;
        padding: 1 2;
    }
    """


class BodyScroll(VerticalScroll):
    """Scroll container that never takes focus, so every key reaches the app."""

    can_focus = False
