"""Contract for the external interpreter behind the interactions pane."""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

__all__ = ["Interpreter", "InterpreterFactory", "NO_RESULT", "DEFAULT_SYNTAX_ERROR_SIGNATURE"]

DEFAULT_SYNTAX_ERROR_SIGNATURE = "InterpreterException: Encountered"
"""Prefix of the interpreter's parse-failure messages."""


class _NoResult:
    """Sentinel type for evaluations that produce nothing to display."""

    _instance: _NoResult | None = None

    def __new__(cls) -> _NoResult:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_RESULT"

    def __reduce__(self) -> str:
        return "NO_RESULT"


NO_RESULT: Any = _NoResult()
"""Returned by :meth:`Interpreter.interpret` for statements without a value."""


@runtime_checkable
class Interpreter(Protocol):
    """An interpreter instance; the session replaces it wholesale on reset.

    Implementations may define ``syntax_error_signature`` to override
    :data:`DEFAULT_SYNTAX_ERROR_SIGNATURE`.
    """

    def interpret(self, source: str) -> Any:  # pragma: no cover - protocol
        """Evaluate ``source``; return its value or :data:`NO_RESULT`, or raise."""
        ...

    def add_classpath(self, path: str) -> None:  # pragma: no cover - protocol
        ...


InterpreterFactory = Callable[[], Interpreter]
