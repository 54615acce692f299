from .assembler import assemble_final, assemble_script
from .document import Document
from .navigator import ShotNavigator
from .notices import LoggingNotifier, RecordingNotifier
from .session import Identity, ScriptEditorSession
from .store import CorrelationStore
from .sync import DebouncedSyncEngine

__all__ = [
    "assemble_final",
    "assemble_script",
    "Document",
    "ShotNavigator",
    "LoggingNotifier",
    "RecordingNotifier",
    "Identity",
    "ScriptEditorSession",
    "CorrelationStore",
    "DebouncedSyncEngine",
]
