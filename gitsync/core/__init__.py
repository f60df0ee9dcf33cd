"""Engine: workflow driver, interactive session and the SyncKeeper facade."""

from .sync_keeper import LoadedRepository, SyncKeeper
from .session import Action, Session, SessionState
from .workflow import SyncWorkflow

__all__ = ["Action", "LoadedRepository", "Session", "SessionState", "SyncKeeper", "SyncWorkflow"]
