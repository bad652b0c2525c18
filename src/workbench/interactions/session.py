"""The interactive evaluation session (read-eval-print loop) behind the interactions pane."""

from __future__ import annotations

import logging
import re
import threading
from pathlib import Path
from typing import Any, Callable, Iterable

from ..events import InteractionsReset, ListenerBus
from .history import InteractionHistory
from .interpreter import DEFAULT_SYNTAX_ERROR_SIGNATURE, NO_RESULT, Interpreter, InterpreterFactory

__all__ = ["InteractionsSession", "rewrite_launch", "BANNER", "PROMPT"]

LOGGER = logging.getLogger(__name__)

BANNER = "Welcome to the workbench interactions pane."
PROMPT = "\n> "
ERROR_PREFIX = "\nError in evaluation: "
INVALID_SYNTAX = "Invalid syntax"


def rewrite_launch(text: str, keyword: str = "java") -> str:
    """Rewrite ``java Foo a b`` into ``Foo.main(new String[]{"a","b"});``.

    ``text`` must already be trimmed. One trailing ``;`` is dropped before the
    rewrite. Text not starting with ``keyword`` and whitespace is returned
    unchanged.
    """

    match = re.match(rf"{re.escape(keyword)}\s+(.+)\Z", text, re.DOTALL)
    if match is None:
        return text
    body = match.group(1)
    if body.endswith(";"):
        body = body[:-1]
    tokens = body.split()
    if not tokens:
        return text
    class_name, *arguments = tokens
    literals = ",".join(_string_literal(argument) for argument in arguments)
    return f"{class_name}.main(new String[]{{{literals}}});"


def _string_literal(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class InteractionsSession:
    """Evaluation history, transcript and the live interpreter.

    The interpreter is replaced wholesale by :meth:`reset`; history entries
    survive resets. Session state changes happen under a lock that is
    released before the interpreter runs or listeners are notified.
    """

    def __init__(
        self,
        bus: ListenerBus,
        interpreter_factory: InterpreterFactory,
        *,
        launcher_keyword: str = "java",
        history_limit: int = 500,
        on_output: Callable[[str], None] | None = None,
    ) -> None:
        self._bus = bus
        self._interpreter_factory = interpreter_factory
        self._launcher_keyword = launcher_keyword
        self._on_output = on_output
        self._history = InteractionHistory(history_limit)
        self._lock = threading.RLock()
        self._transcript: list[str] = [BANNER]
        self._pending = ""
        self._interpreter: Interpreter = interpreter_factory()
        self._prompt()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def transcript(self) -> str:
        with self._lock:
            return "".join(self._transcript)

    @property
    def pending_input(self) -> str:
        return self._pending

    @pending_input.setter
    def pending_input(self, text: str) -> None:
        with self._lock:
            self._pending = text

    @property
    def interpreter(self) -> Interpreter:
        return self._interpreter

    @property
    def history(self) -> InteractionHistory:
        return self._history

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------
    def reset(self, source_roots: Iterable[Path | str] = ()) -> None:
        """Start over with a fresh interpreter whose classpath holds ``source_roots``."""

        interpreter = self._interpreter_factory()
        for root in source_roots:
            interpreter.add_classpath(str(Path(root).absolute()))
        with self._lock:
            self._history.move_end()
            self._transcript = [BANNER]
            self._pending = ""
            self._interpreter = interpreter
        self._prompt()
        LOGGER.debug("Interactions reset")
        self._bus.notify(InteractionsReset())

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def submit(self, raw_input: str | None = None) -> None:
        """Evaluate ``raw_input`` (default: the pending line) and prompt again.

        Blank input is recorded in the history but only shows a new prompt.
        Results and failures are written to the transcript; nothing is raised
        to the caller, including failures of the output callback.
        """

        with self._lock:
            text = self._pending if raw_input is None else raw_input
            self._history.add(text)
            self._pending = ""
            interpreter = self._interpreter

        source = text.strip()
        if not source:
            self._prompt()
            return
        self._append_quietly(text)

        source = rewrite_launch(source, self._launcher_keyword)
        try:
            result = interpreter.interpret(source)
            output = None if result is NO_RESULT else "\n" + str(result)
        except Exception as exc:
            self._report_failure(exc, interpreter)
        else:
            if output is not None:
                self._append_quietly(output)
        self._prompt()

    def recall_previous(self, on_failure: Callable[[], Any]) -> bool:
        """Replace the pending line with the previous history entry, if any."""

        with self._lock:
            found = self._history.has_previous()
            if found:
                self._pending = self._history.previous()
        if not found:
            on_failure()
        return found

    def recall_next(self, on_failure: Callable[[], Any]) -> bool:
        """Replace the pending line with the next history entry, if any."""

        with self._lock:
            found = self._history.has_next()
            if found:
                self._pending = self._history.next()
        if not found:
            on_failure()
        return found

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _report_failure(self, exc: Exception, interpreter: Interpreter) -> None:
        message = str(exc) or repr(exc)
        signature = getattr(interpreter, "syntax_error_signature", DEFAULT_SYNTAX_ERROR_SIGNATURE)
        if message.startswith(signature):
            notice = ERROR_PREFIX + INVALID_SYNTAX
        else:
            notice = ERROR_PREFIX + message
        LOGGER.debug("Evaluation failed: %s", message)
        self._append_quietly(notice)

    def _append(self, text: str) -> None:
        with self._lock:
            self._transcript.append(text)
        if self._on_output is not None:
            self._on_output(text)

    def _append_quietly(self, text: str) -> None:
        try:
            self._append(text)
        except Exception:
            LOGGER.exception("Output callback failed for %r", text)

    def _prompt(self) -> None:
        with self._lock:
            self._pending = ""
        self._append_quietly(PROMPT)
