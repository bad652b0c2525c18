"""Value types produced by compilation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

__all__ = ["CompileError", "CompileResult", "compile_result"]


@dataclass(frozen=True, slots=True)
class CompileError:
    """One diagnostic reported by a compiler.

    ``line`` and ``column`` are -1 when the location is unknown.
    """

    file_path: str
    line: int
    column: int
    message: str
    is_warning: bool = False

    @classmethod
    def unlocated(cls, file_path: Path | str, message: str) -> CompileError:
        """Build an error that is not attached to a position in the file."""

        return cls(str(file_path), -1, -1, message, False)


CompileResult = tuple[CompileError, ...]
"""Diagnostics from one compile in reported order; empty means success."""


def compile_result(errors: Iterable[CompileError] = ()) -> CompileResult:
    return tuple(errors)
