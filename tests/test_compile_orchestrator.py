"""Tests for the save-before-compile protocol."""

from __future__ import annotations

from pathlib import Path

import pytest

from helpers import ExplodingCompiler, FakeCompiler, RecordingListener, write_java
from workbench.compiler.models import CompileError
from workbench.compiler.orchestrator import CompileOrchestrator
from workbench.compiler.registry import CompilerRegistry
from workbench.editor.workspace import DocumentWorkspace, OpenDocument, fixed_selector
from workbench.events import ListenerBus
from workbench.services.background import BackgroundRunner, CallbackQueue


class Harness:
    def __init__(self, compiler: FakeCompiler, listener: RecordingListener) -> None:
        self.bus = ListenerBus()
        self.bus.subscribe(listener)
        self.listener = listener
        self.compiler = compiler
        self.successes = 0
        self.orchestrator = CompileOrchestrator(
            self.bus, CompilerRegistry([compiler]), on_success=self._succeeded
        )
        self.workspace = DocumentWorkspace(self.bus, compile_handler=self.orchestrator.compile)

    def _succeeded(self) -> None:
        self.successes += 1

    def open(self, path: Path) -> OpenDocument:
        document = self.workspace.open_document(fixed_selector(path))
        self.listener.clear()
        return document


@pytest.fixture
def harness(compiler: FakeCompiler, listener: RecordingListener) -> Harness:
    return Harness(compiler, listener)


def modify(document: OpenDocument) -> None:
    document.buffer.set_text(document.text + "\n// edited\n")


# =============================================================================
# Synchronous compiles
# =============================================================================


class TestCompile:
    """Tests for CompileOrchestrator.compile."""

    def test_clean_compile_fires_events_and_resets(self, harness: Harness, project: Path) -> None:
        source = write_java(project, "x/Y.java", "x")
        document = harness.open(source)

        result = document.start_compile()

        assert result == ()
        assert harness.listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.compiler.calls == [(project, [source])]
        assert harness.successes == 1

    def test_declined_save_does_nothing(self, harness: Harness, project: Path) -> None:
        document = harness.open(write_java(project, "Y.java"))
        modify(document)

        result = document.start_compile()

        assert result is None
        assert harness.listener.kinds() == ["SaveRequested"]
        assert harness.compiler.calls == []
        assert harness.successes == 0
        assert document.is_modified

    def test_accepted_save_precedes_compile(self, harness: Harness, project: Path) -> None:
        document = harness.open(write_java(project, "Y.java"))
        modify(document)
        harness.listener.honour_saves = True

        result = document.start_compile()

        assert result == ()
        assert harness.listener.kinds() == [
            "SaveRequested",
            "DocumentSaved",
            "CompileStarted",
            "CompileEnded",
        ]
        assert not document.is_modified

    def test_untitled_document_is_saved_first(self, harness: Harness, project: Path) -> None:
        document = harness.workspace.create_document()
        document.buffer.set_text("class Y {}\n")
        harness.listener.save_to = project / "Y.java"
        harness.listener.honour_saves = True
        harness.listener.clear()

        result = document.start_compile()

        assert result == ()
        assert document.path == project / "Y.java"
        assert harness.compiler.calls == [(project, [project / "Y.java"])]

    def test_unmodified_untitled_document_is_not_compiled(self, harness: Harness) -> None:
        document = harness.workspace.create_document()
        harness.listener.clear()

        assert document.start_compile() is None
        assert harness.listener.events == []
        assert harness.compiler.calls == []

    def test_wrong_package_becomes_single_error(self, harness: Harness, project: Path) -> None:
        source = write_java(project, "z/Y.java", "x")
        document = harness.open(source)

        result = document.start_compile()

        assert result is not None and len(result) == 1
        error = result[0]
        assert error.file_path == str(source)
        assert (error.line, error.column) == (-1, -1)
        assert not error.is_warning
        assert "does not match the package component x" in error.message
        assert harness.compiler.calls == []
        assert harness.listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.successes == 0

    def test_compile_errors_skip_the_reset(self, harness: Harness, project: Path) -> None:
        source = write_java(project, "Y.java")
        harness.compiler.errors = (CompileError(str(source), 1, 5, "';' expected"),)
        document = harness.open(source)

        result = document.start_compile()

        assert result == harness.compiler.errors
        assert harness.listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.successes == 0

    def test_warnings_only_result_is_not_clean(self, harness: Harness, project: Path) -> None:
        source = write_java(project, "Y.java")
        harness.compiler.errors = (CompileError("", -1, -1, "deprecated API", True),)
        document = harness.open(source)

        document.start_compile()

        assert harness.successes == 0

    def test_compiler_crash_still_ends_the_compile(self, listener: RecordingListener, project: Path) -> None:
        harness = Harness(ExplodingCompiler(), listener)
        document = harness.open(write_java(project, "Y.java"))

        with pytest.raises(RuntimeError, match="compiler crashed"):
            document.start_compile()

        assert listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.successes == 0


# =============================================================================
# Background compiles
# =============================================================================


class TestBackgroundCompile:
    """Tests for CompileOrchestrator.compile_in_background."""

    def test_completion_runs_on_the_draining_thread(self, harness: Harness, project: Path) -> None:
        source = write_java(project, "Y.java")
        document = harness.open(source)
        queue = CallbackQueue()

        with BackgroundRunner(dispatcher=queue) as runner:
            outcome = harness.orchestrator.compile_in_background(document, runner)
            assert harness.listener.kinds() == ["CompileStarted"]
            assert queue.drain(timeout=5) == 1

        assert outcome.result(timeout=5) == ()
        assert harness.listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.successes == 1

    def test_declined_save_resolves_to_none(self, harness: Harness, project: Path) -> None:
        document = harness.open(write_java(project, "Y.java"))
        modify(document)

        with BackgroundRunner() as runner:
            outcome = harness.orchestrator.compile_in_background(document, runner)

        assert outcome.result(timeout=5) is None
        assert harness.listener.kinds() == ["SaveRequested"]

    def test_wrong_package_finishes_without_the_pool(self, harness: Harness, project: Path) -> None:
        document = harness.open(write_java(project, "z/Y.java", "x"))

        with BackgroundRunner() as runner:
            outcome = harness.orchestrator.compile_in_background(document, runner)

        result = outcome.result(timeout=5)
        assert len(result) == 1
        assert harness.compiler.calls == []
        assert harness.listener.kinds() == ["CompileStarted", "CompileEnded"]

    def test_crash_is_reported_through_the_future(self, listener: RecordingListener, project: Path) -> None:
        harness = Harness(ExplodingCompiler(), listener)
        document = harness.open(write_java(project, "Y.java"))

        with BackgroundRunner() as runner:
            outcome = harness.orchestrator.compile_in_background(document, runner)
            with pytest.raises(RuntimeError, match="compiler crashed"):
                outcome.result(timeout=5)

        assert listener.kinds() == ["CompileStarted", "CompileEnded"]
        assert harness.successes == 0
