"""Interactive evaluation session, its history and the console transcript."""

from .console import Console
from .history import InteractionHistory
from .interpreter import NO_RESULT, Interpreter, InterpreterFactory
from .session import InteractionsSession, rewrite_launch

__all__ = [
    "Console",
    "InteractionHistory",
    "InteractionsSession",
    "Interpreter",
    "InterpreterFactory",
    "NO_RESULT",
    "rewrite_launch",
]
