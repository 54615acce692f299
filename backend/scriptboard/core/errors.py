"""
Error taxonomy shared by the editor library, the persistence client and the API.

- InvalidInputError: the user asked for something malformed; nothing changed.
- PersistenceError / StaleSnapshotError: the remote write failed; local state stays.
- NothingToDoError: informational, e.g. every shot is already correlated.
"""

from typing import Optional


class ScriptboardError(Exception):
    """Base class for all scriptboard errors."""


class InvalidInputError(ScriptboardError):
    pass


class PersistenceError(ScriptboardError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StaleSnapshotError(PersistenceError):
    """The server already holds a snapshot with an equal or newer version."""

    def __init__(self, message: str, stored_version: Optional[int] = None):
        super().__init__(message, status_code=409)
        self.stored_version = stored_version


class NothingToDoError(ScriptboardError):
    """Not a failure: surfaced to the user as a notice."""


class NoUncorrelatedShotError(NothingToDoError):
    def __init__(self, message: str = "All shots have been correlated with script text."):
        super().__init__(message)


class NothingToAssembleError(NothingToDoError):
    pass


class RealtimeUnavailableError(ScriptboardError):
    """The realtime channel stayed down after every reconnect attempt."""
