"""Open documents and the workspace that owns them.

:class:`DocumentWorkspace` is the single source of truth for which source
files are open. It keeps documents in the order they were added and never
holds two documents backed by the same resolved file path.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator

from ..compiler.source_root import resolve_source_root
from ..errors import AlreadyOpenError, InvalidPackageError, NoBackingFileError, OperationCancelled
from ..events import (
    AbandonQuery,
    DocumentClosed,
    DocumentCreated,
    DocumentOpened,
    DocumentSaved,
    ListenerBus,
    SaveReason,
    SaveRequested,
)
from .document_model import SourceBuffer, TextBuffer

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..compiler.models import CompileResult

__all__ = ["OpenDocument", "DocumentWorkspace", "FileSelector", "fixed_selector"]

LOGGER = logging.getLogger(__name__)

FileSelector = Callable[[], "Path | str"]
"""Returns the file to open or save to, or raises :class:`OperationCancelled`."""

CompileHandler = Callable[["OpenDocument"], "CompileResult | None"]


def fixed_selector(path: Path | str) -> FileSelector:
    """Return a selector that always picks ``path``."""

    def _select() -> Path | str:
        return path

    return _select


def _normalize_path(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


class OpenDocument:
    """The model's record of one open source file, independent of any view."""

    def __init__(
        self,
        workspace: DocumentWorkspace,
        buffer: TextBuffer,
        *,
        path: Path | None = None,
        untitled_index: int | None = None,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.buffer = buffer
        self.untitled_index = untitled_index
        self._workspace = workspace
        self._path = path

    def __repr__(self) -> str:
        return f"OpenDocument(id={self.id!r}, path={self._path!r}, modified={self.is_modified})"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @property
    def is_untitled(self) -> bool:
        return self._path is None

    @property
    def path(self) -> Path:
        """The backing file.

        Raises:
            NoBackingFileError: The document has never been saved.
        """
        if self._path is None:
            raise NoBackingFileError(f"{self.title} has no backing file")
        return self._path

    @property
    def file_path(self) -> Path | None:
        return self._path

    @property
    def title(self) -> str:
        if self._path is not None:
            name = self._path.name
        else:
            suffix = f" {self.untitled_index}" if self.untitled_index else ""
            name = f"Untitled{suffix}"
        return f"*{name}" if self.is_modified else name

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def is_modified(self) -> bool:
        return self.buffer.is_modified()

    @property
    def cursor(self) -> int:
        return self.buffer.cursor

    @cursor.setter
    def cursor(self, offset: int) -> None:
        self.buffer.cursor = offset

    def goto_line(self, line: int) -> int:
        """Move to ``line`` (past-the-end lands on the last line) and return the offset."""

        return self.buffer.goto_line(line)

    def balance_backward(self) -> int:
        return self.buffer.balance_backward()

    def set_indent(self, width: int) -> None:
        self.buffer.set_indent(width)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    def save(self, selector: FileSelector) -> bool:
        """Save to the backing file, or ask ``selector`` when the document is untitled."""

        if self._path is None:
            return self.save_as(selector)
        return self.save_as(fixed_selector(self._path))

    def save_as(self, selector: FileSelector) -> bool:
        """Write the document to the file picked by ``selector``.

        Returns ``False`` when the selector was cancelled. IO errors propagate
        and leave the document modified.

        Raises:
            AlreadyOpenError: Another open document is backed by the chosen file.
        """

        try:
            target = _normalize_path(selector())
        except OperationCancelled:
            LOGGER.debug("Save of %s cancelled", self.title)
            return False

        other = self._workspace.find_by_path(target)
        if other is not None and other is not self:
            raise AlreadyOpenError(other)

        self.buffer.write(target)
        self.buffer.mark_saved()
        self._workspace._rebind_path(self, target)
        self._path = target
        LOGGER.debug("Saved document %s to %s", self.id, target)
        self._workspace.bus.notify(DocumentSaved(self))
        return True

    def request_save(self, reason: SaveReason) -> None:
        """Ask listeners to save this document; only fires when it is modified."""

        if self.is_modified:
            self._workspace.bus.notify(SaveRequested(self, reason))

    def can_abandon(self) -> bool:
        """Return whether unsaved changes may be discarded, polling listeners if needed."""

        if not self.is_modified:
            return True
        return self._workspace.bus.poll(AbandonQuery(self))

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------
    def source_root(self) -> Path:
        """Directory that must be on the classpath for this document's package.

        Raises:
            InvalidPackageError: The document is untitled or its package does
                not match its directory.
        """

        return resolve_source_root(self._path, self.buffer.package_name())

    def start_compile(self) -> CompileResult | None:
        return self._workspace.compile(self)


class DocumentWorkspace:
    """Ordered collection of :class:`OpenDocument` with no duplicate backing files.

    Documents are stored in an insertion-ordered mapping keyed by id, with a
    second index from resolved path to id for duplicate detection. Internal
    state changes happen under a lock that is never held while listeners or
    file IO run.
    """

    def __init__(
        self,
        bus: ListenerBus,
        *,
        buffer_factory: Callable[[], TextBuffer] | None = None,
        compile_handler: CompileHandler | None = None,
    ) -> None:
        self.bus = bus
        self._buffer_factory = buffer_factory or SourceBuffer
        self._compile_handler = compile_handler
        self._documents: dict[str, OpenDocument] = {}
        self._paths: dict[Path, str] = {}
        self._lock = threading.RLock()
        self._untitled_counter = 1

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_document(self) -> OpenDocument:
        """Add a new untitled document and announce it."""

        with self._lock:
            document = OpenDocument(
                self, self._buffer_factory(), untitled_index=self._untitled_counter
            )
            self._untitled_counter += 1
            self._documents[document.id] = document
        LOGGER.debug("Created untitled document %s", document.id)
        self.bus.notify(DocumentCreated(document))
        return document

    def open_document(self, selector: FileSelector) -> OpenDocument:
        """Read the file picked by ``selector`` into a new document.

        Raises:
            OperationCancelled: The selector was cancelled.
            AlreadyOpenError: The file is already open; the existing document
                is attached to the error.
            OSError: The file could not be read.
        """

        target = _normalize_path(selector())
        existing = self.find_by_path(target)
        if existing is not None:
            raise AlreadyOpenError(existing)

        buffer = self._buffer_factory()
        buffer.read(target)
        buffer.mark_saved()

        with self._lock:
            existing = self._find_locked(target)
            if existing is not None:
                raise AlreadyOpenError(existing)
            document = OpenDocument(self, buffer, path=target)
            self._documents[document.id] = document
            self._paths[target] = document.id
        LOGGER.debug("Opened %s as document %s", target, document.id)
        self.bus.notify(DocumentOpened(document))
        return document

    def document_for_file(self, path: Path | str) -> OpenDocument:
        """Return the document backed by ``path``, opening it if needed."""

        existing = self.find_by_path(path)
        if existing is not None:
            return existing
        try:
            return self.open_document(fixed_selector(path))
        except AlreadyOpenError as exc:
            return exc.document

    def close_document(self, document: OpenDocument) -> bool:
        """Close ``document`` if its changes may be abandoned.

        Returns ``True`` only when the document was actually removed.
        """

        if not document.can_abandon():
            LOGGER.debug("Close of %s vetoed by a listener", document.id)
            return False
        with self._lock:
            if self._documents.pop(document.id, None) is None:
                return False
            if document.file_path is not None:
                self._paths.pop(document.file_path, None)
        LOGGER.debug("Closed document %s", document.id)
        self.bus.notify(DocumentClosed(document))
        return True

    def close_all(self) -> bool:
        """Close the first open document until none remain or one refuses.

        Documents that listeners open or close while this runs are taken
        into account: the result is ``True`` only when the workspace is empty.
        """

        while True:
            with self._lock:
                first = next(iter(self._documents.values()), None)
            if first is None:
                return True
            if not self.close_document(first) and first in self:
                return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def find_by_path(self, path: Path | str) -> OpenDocument | None:
        with self._lock:
            return self._find_locked(_normalize_path(path))

    def documents(self) -> tuple[OpenDocument, ...]:
        with self._lock:
            return tuple(self._documents.values())

    def source_roots_distinct(self) -> tuple[list[Path], list[InvalidPackageError]]:
        """Resolve every document's source root.

        Returns the distinct roots in first-seen order together with the
        failures for documents that could not be resolved; one failure does
        not stop the others from being resolved.
        """

        roots: dict[Path, None] = {}
        failures: list[InvalidPackageError] = []
        for document in self.documents():
            try:
                roots.setdefault(document.source_root(), None)
            except InvalidPackageError as exc:
                failures.append(exc)
        return list(roots), failures

    def set_indent(self, width: int) -> None:
        for document in self.documents():
            document.set_indent(width)

    def compile(self, document: OpenDocument) -> CompileResult | None:
        if self._compile_handler is None:
            raise RuntimeError("No compiler attached to this workspace")
        return self._compile_handler(document)

    def attach_compiler(self, handler: CompileHandler) -> None:
        self._compile_handler = handler

    def __iter__(self) -> Iterator[OpenDocument]:
        return iter(self.documents())

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document: object) -> bool:
        return isinstance(document, OpenDocument) and document.id in self._documents

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _find_locked(self, target: Path) -> OpenDocument | None:
        document_id = self._paths.get(target)
        if document_id is None:
            return None
        return self._documents.get(document_id)

    def _rebind_path(self, document: OpenDocument, target: Path) -> None:
        with self._lock:
            if document.id not in self._documents:
                return
            if document.file_path is not None:
                self._paths.pop(document.file_path, None)
            self._paths[target] = document.id
