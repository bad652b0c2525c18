"""The global model: the single entry point a front-end talks to.

A view calls the public methods below and learns about the outcome through
the listeners it registered with :meth:`GlobalModel.add_listener`. The model
never refers to any view.
"""

from __future__ import annotations

import logging
import sys
from concurrent.futures import Future
from functools import partial
from pathlib import Path
from typing import Any, Callable

from .compiler.javac import JavacCompiler
from .compiler.models import CompileResult
from .compiler.orchestrator import CompileOrchestrator
from .compiler.registry import CompilerRegistry, CompilerService
from .editor.document_model import SourceBuffer, TextBuffer
from .editor.workspace import DocumentWorkspace, FileSelector, OpenDocument
from .events import DocumentOpened, DocumentSaved, GlobalModelListener, ListenerBus
from .interactions.console import Console
from .interactions.interpreter import InterpreterFactory
from .interactions.session import InteractionsSession
from .services.background import BackgroundRunner
from .services.settings import Settings, remember_recent_file

__all__ = ["GlobalModel", "default_compilers"]

LOGGER = logging.getLogger(__name__)


def default_compilers(settings: Settings) -> CompilerRegistry:
    """Build the compiler registry described by ``settings``."""

    output_dir = Path(settings.compile_output_dir) if settings.compile_output_dir else None
    registry = CompilerRegistry(
        [
            JavacCompiler(
                settings.javac_path,
                output_dir=output_dir,
                extra_classpath=settings.extra_classpath,
            )
        ]
    )
    if settings.active_compiler:
        try:
            registry.select(settings.active_compiler)
        except ValueError as exc:
            LOGGER.warning("Ignoring configured compiler: %s", exc)
    return registry


class _RecentFiles(GlobalModelListener):
    """Keeps ``settings.recent_files`` in step with opened and saved documents."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def on_document_opened(self, event: DocumentOpened) -> None:
        self._remember(event.document)

    def on_document_saved(self, event: DocumentSaved) -> None:
        self._remember(event.document)

    def _remember(self, document: OpenDocument) -> None:
        if document.file_path is not None:
            self._settings.recent_files = remember_recent_file(self._settings, document.file_path).recent_files


class GlobalModel:
    """Owns the open documents, the console and the interactions session."""

    def __init__(
        self,
        interpreter_factory: InterpreterFactory,
        *,
        compilers: CompilerRegistry | None = None,
        settings: Settings | None = None,
        buffer_factory: Callable[[], TextBuffer] | None = None,
        bus: ListenerBus | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.bus = bus or ListenerBus()
        self.compilers = compilers or default_compilers(self.settings)
        self.console = Console(self.bus)
        self.interactions = InteractionsSession(
            self.bus,
            interpreter_factory,
            launcher_keyword=self.settings.launcher_keyword,
            history_limit=self.settings.history_limit,
        )
        self.orchestrator = CompileOrchestrator(
            self.bus, self.compilers, on_success=self._after_clean_compile
        )
        self.workspace = DocumentWorkspace(
            self.bus,
            buffer_factory=buffer_factory or partial(SourceBuffer, indent=self.settings.indent_width),
            compile_handler=self.orchestrator.compile,
        )
        self.bus.subscribe(_RecentFiles(self.settings))

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: Any) -> None:
        self.bus.subscribe(listener)

    def remove_listener(self, listener: Any) -> None:
        self.bus.unsubscribe(listener)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    @property
    def documents(self) -> tuple[OpenDocument, ...]:
        return self.workspace.documents()

    def new_file(self) -> OpenDocument:
        return self.workspace.create_document()

    def open_file(self, selector: FileSelector) -> OpenDocument:
        """Open the file picked by ``selector``; see :meth:`DocumentWorkspace.open_document`."""

        return self.workspace.open_document(selector)

    def document_for_file(self, path: Path | str) -> OpenDocument:
        return self.workspace.document_for_file(path)

    def close_file(self, document: OpenDocument) -> bool:
        return self.workspace.close_document(document)

    def close_all_files(self) -> bool:
        return self.workspace.close_all()

    def quit(self, exit_fn: Callable[[int], Any] = sys.exit) -> bool:
        """Exit through ``exit_fn`` once every document closed; return ``False`` otherwise."""

        if not self.close_all_files():
            LOGGER.info("Quit cancelled: a document could not be closed")
            return False
        exit_fn(0)
        return True

    def set_indent(self, width: int) -> None:
        self.settings.indent_width = width
        self.workspace.set_indent(width)

    def source_root_set(self) -> list[Path]:
        """Distinct source roots of all open documents.

        Raises:
            InvalidPackageError: The first document whose root could not be
                resolved.
        """

        roots, failures = self.workspace.source_roots_distinct()
        if failures:
            raise failures[0]
        return roots

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------
    def available_compilers(self) -> list[CompilerService]:
        return self.compilers.available()

    @property
    def active_compiler(self) -> CompilerService:
        return self.compilers.active

    @active_compiler.setter
    def active_compiler(self, compiler: CompilerService) -> None:
        self.compilers.active = compiler

    def compile(self, document: OpenDocument) -> CompileResult | None:
        return self.orchestrator.compile(document)

    def compile_in_background(
        self, document: OpenDocument, runner: BackgroundRunner
    ) -> Future[CompileResult | None]:
        return self.orchestrator.compile_in_background(document, runner)

    # ------------------------------------------------------------------
    # Console and interactions
    # ------------------------------------------------------------------
    def reset_console(self) -> None:
        self.console.reset()

    def reset_interactions(self) -> None:
        """Restart the interpreter with the open documents' source roots on its classpath.

        When any document's package does not match its location, the session
        is reset with only the configured extra classpath.
        """

        roots, failures = self.workspace.source_roots_distinct()
        if failures:
            LOGGER.warning("Resetting interactions without source roots: %s", failures[0].message)
            roots = []
        self.interactions.reset([*roots, *self.settings.extra_classpath])

    def interpret_current_interaction(self) -> None:
        self.interactions.submit()

    def recall_previous_interaction(self, on_failure: Callable[[], Any]) -> bool:
        return self.interactions.recall_previous(on_failure)

    def recall_next_interaction(self, on_failure: Callable[[], Any]) -> bool:
        return self.interactions.recall_next(on_failure)

    def _after_clean_compile(self) -> None:
        self.reset_console()
        self.reset_interactions()
