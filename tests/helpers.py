"""Shared test helpers and stub classes.

Import from here instead of duplicating these stubs in individual test files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from workbench.compiler.models import CompileError, CompileResult
from workbench.editor.workspace import fixed_selector
from workbench.events import (
    AbandonQuery,
    Event,
    GlobalModelListener,
    SaveRequested,
)
from workbench.interactions.interpreter import NO_RESULT


class RecordingListener(GlobalModelListener):
    """Listener that records every event it receives.

    ``abandon`` is the answer given to abandon queries. When ``save_to`` is
    set, save requests are honoured by saving there (or to the document's own
    file when it already has one).
    """

    def __init__(self, *, abandon: bool = True, save_to: Path | None = None, honour_saves: bool = False) -> None:
        self.events: list[Event] = []
        self.abandon = abandon
        self.save_to = save_to
        self.honour_saves = honour_saves or save_to is not None

    def _record(self, event: Event) -> None:
        self.events.append(event)

    on_document_created = _record
    on_document_opened = _record
    on_document_closed = _record
    on_document_saved = _record
    on_compile_started = _record
    on_compile_ended = _record
    on_console_reset = _record
    on_interactions_reset = _record

    def on_save_requested(self, event: SaveRequested) -> None:
        self.events.append(event)
        if self.honour_saves:
            document = event.document
            target = document.file_path or self.save_to
            document.save(fixed_selector(target))

    def on_abandon_query(self, event: AbandonQuery) -> bool:
        self.events.append(event)
        return self.abandon

    def kinds(self) -> list[str]:
        return [type(event).__name__ for event in self.events]

    def clear(self) -> None:
        self.events.clear()


class FakeInterpreter:
    """Interpreter stub answering from a table of canned results."""

    syntax_error_signature = "ParseError: Encountered"

    def __init__(self, results: Mapping[str, Any] | None = None) -> None:
        self.results = dict(results or {})
        self.sources: list[str] = []
        self.classpath: list[str] = []

    def add_classpath(self, path: str) -> None:
        self.classpath.append(path)

    def interpret(self, source: str) -> Any:
        self.sources.append(source)
        outcome = self.results.get(source, NO_RESULT)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeCompiler:
    """Compiler stub returning a fixed list of diagnostics."""

    def __init__(self, errors: Sequence[CompileError] = (), *, name: str = "fake", available: bool = True) -> None:
        self.name = name
        self.errors = tuple(errors)
        self.available = available
        self.calls: list[tuple[Path, list[Path]]] = []

    def is_available(self) -> bool:
        return self.available

    def compile(self, source_root: Path, files: Sequence[Path]) -> CompileResult:
        self.calls.append((source_root, list(files)))
        return self.errors


class ExplodingCompiler(FakeCompiler):
    def compile(self, source_root: Path, files: Sequence[Path]) -> CompileResult:
        self.calls.append((source_root, list(files)))
        raise RuntimeError("compiler crashed")


def write_java(root: Path, relative: str, package: str = "", body: str = "class Y {}") -> Path:
    """Create a source file under ``root`` declaring ``package``."""

    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    header = f"package {package};\n\n" if package else ""
    target.write_text(header + body + "\n", encoding="utf-8")
    return target
