"""Exception hierarchy shared by the workbench model."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from .editor.workspace import OpenDocument

__all__ = [
    "WorkbenchError",
    "OperationCancelled",
    "AlreadyOpenError",
    "InvalidPackageError",
    "NoBackingFileError",
    "UnexpectedStateError",
]


class WorkbenchError(Exception):
    """Base class for every error raised by the workbench model."""


class OperationCancelled(WorkbenchError):
    """Raised by a file selector when the user backs out of the choice."""


class AlreadyOpenError(WorkbenchError):
    """Raised when a file is already held by an open document.

    The existing document is carried on :attr:`document` so callers can
    switch to it instead of opening a duplicate.
    """

    def __init__(self, document: OpenDocument) -> None:
        self.document = document
        super().__init__(f"{document.title} is already open")


class InvalidPackageError(WorkbenchError):
    """The declared package of a document does not match its location on disk."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        directory: str | None = None,
        component: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = -1
        self.path = path
        self.directory = directory
        self.component = component


class NoBackingFileError(WorkbenchError):
    """Raised when a path is requested from an untitled document."""


class UnexpectedStateError(WorkbenchError):
    """A condition the model treats as impossible was observed."""
