"""Compiler service contract and the registry choosing the active compiler."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol, Sequence, runtime_checkable

from .models import CompileError, CompileResult

__all__ = ["CompilerService", "CompilerRegistry", "NoCompiler", "NO_COMPILER_MESSAGE"]

LOGGER = logging.getLogger(__name__)

NO_COMPILER_MESSAGE = "No compiler is available"


@runtime_checkable
class CompilerService(Protocol):
    """An external compiler the model can invoke."""

    name: str

    def is_available(self) -> bool:  # pragma: no cover - protocol
        ...

    def compile(self, source_root: Path, files: Sequence[Path]) -> CompileResult:  # pragma: no cover - protocol
        """Compile ``files`` against ``source_root``; never returns ``None``."""
        ...


class NoCompiler:
    """Stands in when no real compiler can run; every compile reports that."""

    name = "(no compiler available)"

    def is_available(self) -> bool:
        return True

    def compile(self, source_root: Path, files: Sequence[Path]) -> CompileResult:
        target = files[0] if files else source_root
        return (CompileError.unlocated(target, NO_COMPILER_MESSAGE),)


class CompilerRegistry:
    """Ordered set of compilers with one marked active.

    Passed explicitly to whatever needs to compile; there is no process-wide
    instance. When none of the registered compilers can run, a
    :class:`NoCompiler` is offered instead so the list is never empty.
    """

    def __init__(self, compilers: Iterable[CompilerService] = ()) -> None:
        self._compilers: list[CompilerService] = list(compilers)
        self._active: CompilerService | None = None
        self._fallback = NoCompiler()

    def register(self, compiler: CompilerService) -> None:
        self._compilers.append(compiler)

    def available(self) -> list[CompilerService]:
        """Return the compilers that can run right now, in registration order."""

        found = [compiler for compiler in self._compilers if compiler.is_available()]
        if not found:
            LOGGER.warning("No registered compiler is available")
            return [self._fallback]
        return found

    @property
    def active(self) -> CompilerService:
        if self._active is None or self._active is self._fallback or not self._active.is_available():
            self._active = self.available()[0]
        return self._active

    @active.setter
    def active(self, compiler: CompilerService) -> None:
        if compiler is not self._fallback:
            if compiler not in self._compilers:
                raise ValueError(f"Compiler {compiler.name!r} is not registered")
            if not compiler.is_available():
                raise ValueError(f"Compiler {compiler.name!r} is not available")
        LOGGER.debug("Active compiler set to %s", compiler.name)
        self._active = compiler

    def select(self, name: str) -> CompilerService:
        """Make the compiler called ``name`` active and return it."""

        for compiler in self._compilers:
            if compiler.name == name:
                self.active = compiler
                return compiler
        raise ValueError(f"Unknown compiler {name!r}")
