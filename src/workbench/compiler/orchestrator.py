"""Save-before-compile protocol and the compile event sequence.

A compile goes through these steps, strictly in order:

1. Listeners are asked to save the document if it is modified.
2. If the document is still modified, or has no backing file, nothing else
   happens: no compile, no events.
3. ``CompileStarted`` fires, the source root is resolved and the active
   compiler runs. A package that does not match the file's directory becomes
   a single unlocated :class:`CompileError` and the compiler is skipped.
4. ``CompileEnded`` fires, whatever happened in step 3.
5. Only when the result is empty is the success hook run (console reset, then
   interactions reset), so errors stay visible next to the output that
   produced them.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from ..errors import InvalidPackageError
from ..events import CompileEnded, CompileStarted, ListenerBus, SaveReason
from .models import CompileError, CompileResult, compile_result
from .registry import CompilerRegistry

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..editor.workspace import OpenDocument
    from ..services.background import BackgroundRunner

__all__ = ["CompileOrchestrator"]

LOGGER = logging.getLogger(__name__)


def _nothing() -> None:
    return None


class CompileOrchestrator:
    """Runs the compile protocol for one document at a time."""

    def __init__(
        self,
        bus: ListenerBus,
        compilers: CompilerRegistry,
        *,
        on_success: Callable[[], None] | None = None,
    ) -> None:
        self._bus = bus
        self._compilers = compilers
        self._on_success = on_success or _nothing

    def compile(self, document: OpenDocument) -> CompileResult | None:
        """Compile ``document`` and return its diagnostics.

        Returns ``None`` when the compile did not start because the document
        was left unsaved.
        """

        if not self._ready(document):
            return None

        self._bus.notify(CompileStarted())
        result: CompileResult = ()
        try:
            source_root, result = self._locate(document)
            if source_root is not None:
                compiler = self._compilers.active
                result = compile_result(compiler.compile(source_root, [document.path]))
        finally:
            self._bus.notify(CompileEnded())

        self._after(result)
        return result

    def compile_in_background(
        self, document: OpenDocument, runner: BackgroundRunner
    ) -> Future[CompileResult | None]:
        """Same protocol as :meth:`compile` with the compiler call on ``runner``'s pool.

        ``CompileStarted`` fires before this method returns; ``CompileEnded``
        and the success hook run through the runner's dispatcher. The returned
        future resolves once they have run.
        """

        outcome: Future[CompileResult | None] = Future()
        if not self._ready(document):
            outcome.set_result(None)
            return outcome

        self._bus.notify(CompileStarted())
        try:
            source_root, errors = self._locate(document)
            if source_root is None:
                self._finish(outcome, errors, None)
                return outcome
            path = document.path
            compiler = self._compilers.active
            runner.submit(
                lambda: compile_result(compiler.compile(source_root, [path])),
                lambda result, error: self._finish(outcome, result, error),
            )
        except Exception as exc:
            self._finish(outcome, (), exc)
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ready(self, document: OpenDocument) -> bool:
        document.request_save(SaveReason.COMPILE)
        if document.is_modified:
            LOGGER.debug("Compile of %s skipped: document left unsaved", document.id)
            return False
        if document.is_untitled:
            LOGGER.debug("Compile of %s skipped: no backing file", document.id)
            return False
        return True

    def _locate(self, document: OpenDocument) -> tuple[Path | None, CompileResult]:
        """Return the source root, or ``None`` with the error standing in for a compile."""

        try:
            return document.source_root(), ()
        except InvalidPackageError as exc:
            LOGGER.info("Cannot compile %s: %s", document.path, exc.message)
            return None, (CompileError.unlocated(document.path, exc.message),)

    def _finish(
        self,
        outcome: Future[CompileResult | None],
        result: CompileResult | None,
        error: BaseException | None,
    ) -> None:
        try:
            self._bus.notify(CompileEnded())
            if error is None:
                self._after(result or ())
        except Exception as exc:
            outcome.set_exception(exc)
            return
        if error is not None:
            outcome.set_exception(error)
        else:
            outcome.set_result(result or ())

    def _after(self, result: CompileResult) -> None:
        if result:
            LOGGER.debug("Compile finished with %d diagnostic(s)", len(result))
            return
        LOGGER.debug("Compile succeeded; resetting console and interactions")
        self._on_success()
