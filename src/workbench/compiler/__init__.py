"""Compilation: source-root resolution, compiler services and the compile protocol."""

from .javac import JavacCompiler
from .models import CompileError, CompileResult
from .orchestrator import CompileOrchestrator
from .registry import CompilerRegistry, CompilerService, NoCompiler
from .source_root import resolve_source_root

__all__ = [
    "CompileError",
    "CompileResult",
    "CompileOrchestrator",
    "CompilerRegistry",
    "CompilerService",
    "JavacCompiler",
    "NoCompiler",
    "resolve_source_root",
]
