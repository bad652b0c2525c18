"""Text buffer contract and the default in-memory source buffer."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..errors import InvalidPackageError
from ..utils import file_io

__all__ = ["TextBuffer", "SourceBuffer", "extract_package_name"]

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")
_PACKAGE_KEYWORD = re.compile(r"\A\s*package\b")
_PACKAGE_STATEMENT = re.compile(
    r"\A\s*package\s+([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)\s*;"
)
_OPENERS = {")": "(", "]": "[", "}": "{"}


@runtime_checkable
class TextBuffer(Protocol):
    """What the model needs from the text storage behind one document."""

    @property
    def text(self) -> str:  # pragma: no cover - protocol
        ...

    @property
    def cursor(self) -> int:  # pragma: no cover - protocol
        ...

    @cursor.setter
    def cursor(self, offset: int) -> None:  # pragma: no cover - protocol
        ...

    def read(self, path: Path) -> None:  # pragma: no cover - protocol
        ...

    def write(self, path: Path) -> None:  # pragma: no cover - protocol
        ...

    def package_name(self) -> str:  # pragma: no cover - protocol
        ...

    def is_modified(self) -> bool:  # pragma: no cover - protocol
        ...

    def mark_saved(self) -> None:  # pragma: no cover - protocol
        ...

    def goto_line(self, line: int) -> int:  # pragma: no cover - protocol
        ...

    def balance_backward(self) -> int:  # pragma: no cover - protocol
        ...

    def set_indent(self, width: int) -> None:  # pragma: no cover - protocol
        ...


def extract_package_name(text: str) -> str:
    """Return the dotted package declared at the top of ``text``.

    Comments are ignored. Returns ``""`` when the source has no package
    statement (the default package).

    Raises:
        InvalidPackageError: The ``package`` keyword is present but the
            statement is malformed.
    """

    stripped = _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub(" ", text))
    match = _PACKAGE_STATEMENT.match(stripped)
    if match is not None:
        return re.sub(r"\s+", "", match.group(1))
    if _PACKAGE_KEYWORD.match(stripped):
        raise InvalidPackageError("Malformed package statement.")
    return ""


class SourceBuffer:
    """Whole-text buffer with a cursor offset and a modified-since-save flag."""

    def __init__(self, text: str = "", *, indent: int = 2) -> None:
        self._text = text
        self._cursor = 0
        self._modified = False
        self._indent = indent

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @cursor.setter
    def cursor(self, offset: int) -> None:
        self._cursor = max(0, min(offset, len(self._text)))

    @property
    def indent(self) -> int:
        return self._indent

    def set_text(self, text: str) -> None:
        """Replace the whole text and mark the buffer modified."""

        self._text = text
        self._cursor = min(self._cursor, len(text))
        self._modified = True

    def insert(self, offset: int, fragment: str) -> None:
        offset = max(0, min(offset, len(self._text)))
        self._text = self._text[:offset] + fragment + self._text[offset:]
        if self._cursor >= offset:
            self._cursor += len(fragment)
        self._modified = True

    def read(self, path: Path) -> None:
        self._text = file_io.read_source(path)
        self._cursor = 0
        self._modified = False

    def write(self, path: Path) -> None:
        file_io.write_source(path, self._text)

    def package_name(self) -> str:
        return extract_package_name(self._text)

    def is_modified(self) -> bool:
        return self._modified

    def mark_saved(self) -> None:
        self._modified = False

    def goto_line(self, line: int) -> int:
        """Move the cursor to the start of 1-based ``line`` and return the offset.

        Lines past the end of the text land on the last line.
        """

        offset = 0
        for _ in range(max(line, 1) - 1):
            newline = self._text.find("\n", offset)
            if newline == -1:
                break
            offset = newline + 1
        self._cursor = offset
        return offset

    def balance_backward(self) -> int:
        """Distance from the cursor back to the bracket matching the one on its left.

        Returns -1 when the character before the cursor is not a closing
        bracket or when no match exists.
        """

        if self._cursor == 0 or self._text[self._cursor - 1] not in _OPENERS:
            return -1
        stack: list[str] = []
        for index in range(self._cursor - 1, -1, -1):
            char = self._text[index]
            if char in _OPENERS:
                stack.append(_OPENERS[char])
            elif char in _OPENERS.values():
                if not stack or stack.pop() != char:
                    return -1
                if not stack:
                    return self._cursor - index
        return -1

    def set_indent(self, width: int) -> None:
        self._indent = max(0, width)
