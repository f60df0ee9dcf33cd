"""Interactive session state machine.

The session holds every piece of UI-facing state in one object. Each key press
and each background result is one call on the session; the call mutates the
state and returns an Action telling the presentation layer what to run next.
Nothing here touches the terminal.
"""

from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from gitsync.constants import (
    KEY_BACKSPACE,
    KEY_DELETE_MODE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_HELP,
    KEY_MANUAL_MODE,
    KEY_NO,
    KEY_QUIT,
    KEY_REFRESH,
    KEY_SEARCH,
    KEY_SELECT_ALL,
    KEY_SELECT_NONE,
    KEY_TAG,
    KEY_TOGGLE,
    KEY_UP,
    KEY_YES,
)
from gitsync.exceptions import GitOperationError, StashError, WorkflowInProgressError
from gitsync.formatters.summary import build_command_preview
from gitsync.logging_config import get_logger
from gitsync.models.branch import Branch
from gitsync.models.workflow import BranchOutcome, SyncResult, WorkflowMode

if TYPE_CHECKING:
    from gitsync.config import Config
    from gitsync.core.sync_keeper import LoadedRepository, SyncKeeper

logger = get_logger(__name__)


class SessionState(Enum):
    LOADING = "loading"
    BROWSING = "browsing"
    SEARCHING = "searching"
    TAGGING = "tagging"
    HELP = "help"
    CONFIRMING_STASH = "confirming_stash"
    CONFIRMING_UPDATE = "confirming_update"
    CONFIRMING_DELETE = "confirming_delete"
    UPDATING = "updating"
    DELETING = "deleting"
    DONE = "done"
    ERROR = "error"


class Action(Enum):
    """Work the presentation layer must start after a transition."""
    NONE = "none"
    LOAD = "load"
    REFRESH = "refresh"
    RUN_NEXT = "run_next"
    QUIT = "quit"


CONFIRM_STATES = {
    WorkflowMode.UPDATE: SessionState.CONFIRMING_UPDATE,
    WorkflowMode.DELETE: SessionState.CONFIRMING_DELETE,
}
RUNNING_STATES = {
    WorkflowMode.UPDATE: SessionState.UPDATING,
    WorkflowMode.DELETE: SessionState.DELETING,
}


def _is_text_input(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class Session:
    """UI-facing state of one gitsync run."""

    def __init__(self, keeper: "SyncKeeper", manual_mode: bool = False):
        self.keeper = keeper
        self.manual_mode = manual_mode
        self.state = SessionState.LOADING
        self.config: Optional["Config"] = None
        self.branches: List[Branch] = []
        self.current_branch: Optional[str] = None
        self.original_branch: Optional[str] = None
        self.skipped_count = 0
        self.loaded = False

        self.cursor = 0
        self.message = "Loading repository information"
        self.error = ""
        self.loading_dots = ""

        self.search_query = ""
        self.tag_input = ""
        self.tag_target: Optional[str] = None
        self.delete_mode = False

        self.pending_mode: Optional[WorkflowMode] = None
        self.active_mode: Optional[WorkflowMode] = None
        self.result: Optional[SyncResult] = None
        self.command_preview: List[str] = []
        self.stash_restored = False
        self.exit_message: Optional[str] = None

    # Derived views

    @property
    def filtered_branches(self) -> List[Branch]:
        """Branches matching the search query, in list order."""
        if not self.search_query:
            return self.branches
        return [branch for branch in self.branches if branch.matches(self.search_query)]

    @property
    def selected_branches(self) -> List[Branch]:
        return [branch for branch in self.branches if branch.selected]

    @property
    def cursor_branch(self) -> Optional[Branch]:
        filtered = self.filtered_branches
        if 0 <= self.cursor < len(filtered):
            return filtered[self.cursor]
        return None

    @property
    def workflow(self):
        return self.keeper.workflow

    @property
    def startup_failed(self) -> bool:
        """An error was hit before any branch list was shown."""
        return self.state is SessionState.ERROR and not self.loaded

    def _clamp_cursor(self) -> None:
        count = len(self.filtered_branches)
        self.cursor = max(0, min(self.cursor, count - 1)) if count else 0

    # Background results

    def tick(self) -> None:
        """Advance the loading animation."""
        if self.state is SessionState.LOADING:
            self.loading_dots = "" if len(self.loading_dots) >= 3 else self.loading_dots + "."

    def on_loaded(self, loaded: "LoadedRepository") -> Action:
        self.config = loaded.config
        self.branches = loaded.branches
        self.current_branch = loaded.current_branch
        self.original_branch = loaded.current_branch
        self.skipped_count = len(loaded.skipped)
        self.loaded = True
        self.cursor = 0
        self.message = ""
        self.state = SessionState.BROWSING
        return Action.NONE

    def on_refreshed(self, branches: List[Branch], skipped: int = 0) -> Action:
        """Replace the branch list, keeping selections that still exist."""
        if self.state in (SessionState.LOADING, SessionState.UPDATING, SessionState.DELETING):
            logger.debug(f"Ignoring refresh result in state {self.state.value}")
            return Action.NONE
        selected = {branch.name for branch in self.branches if branch.selected}
        for branch in branches:
            branch.selected = branch.name in selected
        self.branches = branches
        self.skipped_count = skipped
        self._clamp_cursor()
        return Action.NONE

    def on_refresh_failed(self, error: Exception) -> Action:
        """A background refresh failed; report it without leaving the current state."""
        if self.state in (SessionState.LOADING, SessionState.UPDATING, SessionState.DELETING):
            logger.warning(f"Refresh failed in state {self.state.value}: {error}")
            return Action.NONE
        logger.warning(f"Refresh failed: {error}")
        self.message = f"Refresh failed: {error}"
        return Action.NONE

    def on_branch_complete(self, outcome: BranchOutcome) -> Action:
        """Apply one completion event from the workflow driver."""
        if self.state not in RUNNING_STATES.values():
            logger.warning(f"Ignoring outcome for {outcome.branch} in state {self.state.value}")
            return Action.NONE
        if not self.workflow.complete(outcome):
            return Action.RUN_NEXT
        self._finish_workflow()
        return Action.NONE

    def on_error(self, error: Exception) -> Action:
        """Enter the Error state; a running workflow is aborted and the tree restored."""
        logger.error(f"{error}")
        message = str(error)
        if self.state in RUNNING_STATES.values():
            self.workflow.abort(message)
            self.result = self.workflow.result
            message = self._restore_working_tree(message)
        elif self.keeper.stash_guard.stash_owed:
            message = self._restore_working_tree(message)
        self._enter_error(message)
        return Action.NONE

    # Key handling

    def handle_key(self, key: str) -> Action:
        """Dispatch one key press to the handler of the current state."""
        handlers = {
            SessionState.LOADING: self._handle_loading_keys,
            SessionState.BROWSING: self._handle_browsing_keys,
            SessionState.SEARCHING: self._handle_search_keys,
            SessionState.TAGGING: self._handle_tagging_keys,
            SessionState.HELP: self._handle_help_keys,
            SessionState.CONFIRMING_STASH: self._handle_confirming_stash_keys,
            SessionState.CONFIRMING_UPDATE: self._handle_confirming_keys,
            SessionState.CONFIRMING_DELETE: self._handle_confirming_keys,
            SessionState.UPDATING: self._handle_running_keys,
            SessionState.DELETING: self._handle_running_keys,
            SessionState.DONE: self._handle_finished_keys,
            SessionState.ERROR: self._handle_finished_keys,
        }
        return handlers[self.state](key)

    def _handle_loading_keys(self, key: str) -> Action:
        if key in KEY_QUIT:
            return Action.QUIT
        return Action.NONE

    def _handle_browsing_keys(self, key: str) -> Action:
        filtered = self.filtered_branches

        if key in KEY_QUIT:
            return Action.QUIT

        if key in KEY_UP:
            self.cursor = max(self.cursor - 1, 0)
            self._clamp_cursor()
        elif key in KEY_DOWN:
            if self.cursor < len(filtered) - 1:
                self.cursor += 1
        elif key == KEY_TOGGLE:
            branch = self.cursor_branch
            if branch:
                branch.selected = not branch.selected
        elif key == KEY_SELECT_ALL:
            for branch in filtered:
                branch.selected = True
        elif key == KEY_SELECT_NONE:
            for branch in filtered:
                branch.selected = False
        elif key == KEY_DELETE_MODE:
            return self._handle_delete_key()
        elif key == KEY_MANUAL_MODE:
            self.manual_mode = not self.manual_mode
            self.message = f"Manual mode {'on' if self.manual_mode else 'off'}"
        elif key == KEY_HELP:
            self.state = SessionState.HELP
        elif key == KEY_TAG:
            branch = self.cursor_branch
            if branch:
                self.tag_target = branch.name
                self.tag_input = branch.description
                self.state = SessionState.TAGGING
        elif key == KEY_SEARCH:
            self.search_query = ""
            self.cursor = 0
            self.state = SessionState.SEARCHING
        elif key == KEY_REFRESH:
            self.message = "Refreshing branch information"
            return Action.REFRESH
        elif key == KEY_ESCAPE:
            if self.search_query:
                self.search_query = ""
                self.cursor = 0
            elif self.delete_mode:
                self.delete_mode = False
                self.message = ""
                self._deselect_all()
        elif key == KEY_ENTER:
            if self.delete_mode:
                return Action.NONE
            return self._request_workflow(WorkflowMode.UPDATE)

        return Action.NONE

    def _handle_delete_key(self) -> Action:
        if not self.delete_mode:
            self.delete_mode = True
            self.message = "DELETE MODE: select branches and press 'd' to confirm deletion."
            return Action.NONE
        return self._request_workflow(WorkflowMode.DELETE)

    def _handle_search_keys(self, key: str) -> Action:
        if key in (KEY_ENTER, KEY_ESCAPE):
            self.state = SessionState.BROWSING
        elif key == KEY_BACKSPACE:
            if self.search_query:
                self.search_query = self.search_query[:-1]
                self.cursor = 0
        elif key == "ctrl+c":
            return Action.QUIT
        elif _is_text_input(key):
            self.search_query += key
            self.cursor = 0
        return Action.NONE

    def _handle_tagging_keys(self, key: str) -> Action:
        if key == KEY_ENTER:
            self._save_tag()
            self.state = SessionState.BROWSING
            self.tag_input = ""
            self.tag_target = None
            self._clamp_cursor()
        elif key in (KEY_ESCAPE, "ctrl+c"):
            self.state = SessionState.BROWSING
            self.tag_input = ""
            self.tag_target = None
        elif key == KEY_BACKSPACE:
            self.tag_input = self.tag_input[:-1]
        elif _is_text_input(key):
            self.tag_input += key
        return Action.NONE

    def _save_tag(self) -> None:
        branch = next((b for b in self.branches if b.name == self.tag_target), None)
        if branch is None:
            return
        try:
            branch.description = self.keeper.tag_store.set(branch.name, self.tag_input)
        except GitOperationError as e:
            logger.warning(f"Could not save tag for {branch.name}: {e}")
            self.message = f"Could not save tag: {e.message}"

    def _handle_help_keys(self, key: str) -> Action:
        if key in (KEY_HELP, KEY_ESCAPE, "q"):
            self.state = SessionState.BROWSING
        return Action.NONE

    def _handle_confirming_stash_keys(self, key: str) -> Action:
        if key in KEY_YES:
            try:
                self.keeper.stash_guard.stash()
            except StashError as e:
                self.pending_mode = None
                self._enter_error(str(e))
                return Action.NONE
            return self._proceed()
        if key in KEY_NO or key in KEY_QUIT or key == KEY_ESCAPE:
            mode = self.pending_mode
            self.pending_mode = None
            self.state = SessionState.BROWSING
            if mode is WorkflowMode.DELETE:
                self.delete_mode = False
                self._deselect_all()
                self.message = "Deletion cancelled"
            else:
                self.message = "Update cancelled"
        return Action.NONE

    def _handle_confirming_keys(self, key: str) -> Action:
        if key in KEY_YES:
            return self._start_workflow()
        if key in KEY_NO or key in KEY_QUIT or key == KEY_ESCAPE:
            mode = self.pending_mode
            self.pending_mode = None
            self.state = SessionState.BROWSING
            if mode is WorkflowMode.DELETE:
                self.delete_mode = False
                self._deselect_all()
                self.message = "Deletion cancelled"
            else:
                self.message = "Update cancelled"
            if self.keeper.stash_guard.stash_owed:
                try:
                    self.stash_restored = self.keeper.stash_guard.restore()
                except StashError as e:
                    self._enter_error(str(e))
        return Action.NONE

    def _handle_running_keys(self, key: str) -> Action:
        if key in KEY_QUIT:
            # The in-flight operation finishes on its own; nothing is rolled back
            logger.warning("Quit requested while a workflow is running")
            if self.keeper.stash_guard.stash_owed:
                self.exit_message = (
                    "Quit during a running workflow: your changes are still in the stash. "
                    "Run 'git stash pop' once you are back on your branch."
                )
            return Action.QUIT
        return Action.NONE

    def _handle_finished_keys(self, key: str) -> Action:
        if key in KEY_QUIT:
            if self.keeper.stash_guard.stash_owed:
                try:
                    self.keeper.stash_guard.restore()
                except StashError as e:
                    self.exit_message = f"{e}\nYour changes are still in the stash. Run 'git stash pop' manually."
            return Action.QUIT
        return self._reset()

    # Workflow transitions

    def _request_workflow(self, mode: WorkflowMode) -> Action:
        if not self.selected_branches:
            self.message = (
                "No branches selected for deletion." if mode is WorkflowMode.DELETE else "No branches selected"
            )
            return Action.NONE

        try:
            needs_stash = self.keeper.stash_guard.needs_stash()
            # The stash is popped onto whatever branch is checked out now
            self.original_branch = self.keeper.operations.get_current_branch()
        except GitOperationError as e:
            self._enter_error(str(e))
            return Action.NONE

        self.pending_mode = mode
        if needs_stash:
            self.state = SessionState.CONFIRMING_STASH
            self.message = "You have uncommitted changes. Stash them and proceed? (y/n)"
            return Action.NONE
        return self._proceed()

    def _proceed(self) -> Action:
        mode = self.pending_mode
        count = len(self.selected_branches)
        if self.manual_mode:
            self.state = CONFIRM_STATES[mode]
            verb = "update" if mode is WorkflowMode.UPDATE else "delete"
            self.command_preview = build_command_preview(
                self.config, [b.name for b in self.selected_branches], mode
            )
            self.message = f"Ready to {verb} {count} branch(es). Press 'y' to continue, 'n' to cancel."
            return Action.NONE
        return self._start_workflow()

    def _start_workflow(self) -> Action:
        mode = self.pending_mode
        queue = self.selected_branches
        try:
            self.result = self.workflow.start(queue, mode, stash_created=self.keeper.stash_guard.stash_owed)
        except (WorkflowInProgressError, ValueError) as e:
            self.message = str(e)
            self.state = SessionState.BROWSING
            return Action.NONE

        self.active_mode = mode
        self.pending_mode = None
        self.stash_restored = False
        self.command_preview = build_command_preview(self.config, [b.name for b in queue], mode)
        self.state = RUNNING_STATES[mode]
        self.message = ""
        return Action.RUN_NEXT

    def _finish_workflow(self) -> None:
        self.result = self.workflow.result
        message = self._restore_working_tree()
        if self.result.fatal_error:
            self._enter_error(self.result.fatal_error if message is None else f"{self.result.fatal_error}\n{message}")
        elif message:
            self._enter_error(message)
        else:
            self.state = SessionState.DONE

    def _restore_working_tree(self, message: Optional[str] = None) -> Optional[str]:
        """Return to the original branch and pop any owed stash.

        Returns:
            The error message to show, extended with a stash failure if one occurred
        """
        try:
            self.stash_restored = self.keeper.finish_run(self.original_branch, self.result)
        except StashError as e:
            stash_message = f"{e}\nYour changes are still in the stash. Run 'git stash pop' manually."
            message = f"{message}\n{stash_message}" if message else stash_message
        try:
            self.current_branch = self.keeper.operations.get_current_branch()
        except GitOperationError as e:
            logger.debug(f"Could not read current branch: {e}")
        return message

    def _enter_error(self, message: str) -> None:
        self.error = message
        self.state = SessionState.ERROR

    def _reset(self) -> Action:
        """Leave Done/Error for Browsing with a clean slate."""
        if self.workflow is not None and not self.workflow.is_running:
            self.workflow.reset()
        self.message = ""
        self.error = ""
        self.result = None
        self.active_mode = None
        self.pending_mode = None
        self.command_preview = []
        self.stash_restored = False
        self.delete_mode = False
        self.search_query = ""
        self.cursor = 0
        self._deselect_all()

        if not self.loaded:
            self.state = SessionState.LOADING
            self.message = "Loading repository information"
            return Action.LOAD

        self.state = SessionState.BROWSING
        return Action.REFRESH

    def _deselect_all(self) -> None:
        for branch in self.branches:
            branch.selected = False

    # Background work, run off the UI thread by the presentation layer

    def run_load(self) -> "LoadedRepository":
        return self.keeper.load()

    def run_refresh(self) -> List[Branch]:
        return self.keeper.collect()

    def run_step(self) -> BranchOutcome:
        return self.workflow.run_next()

    def describe(self) -> str:
        """Short status line for logs and the status bar."""
        parts = [f"state={self.state.value}", f"branches={len(self.branches)}"]
        if self.delete_mode:
            parts.append("delete-mode")
        if self.manual_mode:
            parts.append("manual")
        if self.keeper.stash_guard.stash_owed:
            parts.append("stash-owed")
        return " ".join(parts)
