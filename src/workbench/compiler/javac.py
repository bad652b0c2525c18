"""Compiler service backed by the ``javac`` executable."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Iterator, Sequence

from .models import CompileError, CompileResult, compile_result

__all__ = ["JavacCompiler", "parse_diagnostics"]

LOGGER = logging.getLogger(__name__)

_DIAGNOSTIC = re.compile(
    r"^(?P<path>.+?):(?P<line>\d+): (?P<kind>error|warning): (?P<message>.*)$"
)
_GLOBAL_WARNING = re.compile(r"^warning: (?P<message>.*)$")


def parse_diagnostics(output: str) -> CompileResult:
    """Turn javac's textual diagnostics into :class:`CompileError` values.

    The caret line javac prints under the offending source line gives the
    1-based column; without it the column is -1.
    """

    return compile_result(_iter_diagnostics(output.splitlines()))


def _iter_diagnostics(lines: list[str]) -> Iterator[CompileError]:
    index = 0
    while index < len(lines):
        line = lines[index]
        match = _DIAGNOSTIC.match(line)
        if match is None:
            warning = _GLOBAL_WARNING.match(line)
            if warning is not None:
                yield CompileError("", -1, -1, warning.group("message"), True)
            index += 1
            continue

        column = -1
        # Layout is: diagnostic, source line, caret line.
        if index + 2 < len(lines) and lines[index + 2].strip() == "^":
            column = lines[index + 2].index("^") + 1
            index += 2
        yield CompileError(
            file_path=match.group("path"),
            line=int(match.group("line")),
            column=column,
            message=match.group("message"),
            is_warning=match.group("kind") == "warning",
        )
        index += 1


class JavacCompiler:
    """Runs ``javac`` in a subprocess, one invocation per compile."""

    def __init__(
        self,
        executable: str = "javac",
        *,
        output_dir: Path | None = None,
        extra_classpath: Sequence[Path | str] = (),
        timeout: float | None = None,
    ) -> None:
        self.name = f"javac ({executable})"
        self._executable = executable
        self._output_dir = output_dir
        self._extra_classpath = [str(entry) for entry in extra_classpath]
        self._timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def command(self, source_root: Path, files: Sequence[Path]) -> list[str]:
        classpath = os.pathsep.join([str(source_root), *self._extra_classpath])
        return [
            self._executable,
            "-sourcepath",
            str(source_root),
            "-classpath",
            classpath,
            "-d",
            str(self._output_dir or source_root),
            *(str(path) for path in files),
        ]

    def compile(self, source_root: Path, files: Sequence[Path]) -> CompileResult:
        command = self.command(source_root, files)
        LOGGER.debug("Running %s", command)
        first_file = files[0] if files else source_root
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("Could not run %s: %s", self._executable, exc)
            return (CompileError.unlocated(first_file, f"Could not run compiler: {exc}"),)

        errors = parse_diagnostics(completed.stderr)
        if completed.returncode != 0 and not any(not error.is_warning for error in errors):
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            errors += (CompileError.unlocated(first_file, f"Compilation failed: {detail}"),)
        LOGGER.debug("%s finished with %d diagnostic(s)", self._executable, len(errors))
        return errors
