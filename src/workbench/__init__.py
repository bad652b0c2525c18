"""Non-visual model of a small Java teaching IDE: documents, compilation and interactions."""

from .errors import (
    AlreadyOpenError,
    InvalidPackageError,
    NoBackingFileError,
    OperationCancelled,
    UnexpectedStateError,
    WorkbenchError,
)
from .events import GlobalModelListener, ListenerBus, SaveReason
from .model import GlobalModel

__all__ = [
    "AlreadyOpenError",
    "GlobalModel",
    "GlobalModelListener",
    "InvalidPackageError",
    "ListenerBus",
    "NoBackingFileError",
    "OperationCancelled",
    "SaveReason",
    "UnexpectedStateError",
    "WorkbenchError",
]

__version__ = "0.1.0"
