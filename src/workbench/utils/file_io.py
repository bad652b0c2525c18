"""Source file IO helpers used by the text buffers."""

from __future__ import annotations

import codecs
import contextlib
import locale
import os
import tempfile
from pathlib import Path
from typing import IO, Iterator

__all__ = ["read_source", "write_source"]

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)
_NEWLINES = ("\n", "\r\n")


def read_source(path: Path | str, *, encoding: str | None = None) -> str:
    """Read a source file, detecting its encoding and normalizing newlines to ``\\n``."""

    raw = Path(path).read_bytes()
    text = raw.decode(encoding or _guess_encoding(raw)).removeprefix("\ufeff")
    return _unix_newlines(text)


def write_source(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
    newline: str = "\n",
) -> Path:
    """Write ``content`` so readers see either the old file or the new one, never a mix."""

    if newline not in _NEWLINES:
        raise ValueError(f"Unsupported newline policy: {newline!r}")
    body = _unix_newlines(content)
    if newline != "\n":
        body = body.replace("\n", newline)

    target = Path(path)
    with _replacing(target, encoding) as handle:
        handle.write(body)
    return target


@contextlib.contextmanager
def _replacing(target: Path, encoding: str) -> Iterator[IO[str]]:
    """Yield a handle on a sibling temp file that replaces ``target`` on success."""

    fd, scratch = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with open(fd, "w", encoding=encoding, newline="") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(scratch, target)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(scratch)
        raise


def _guess_encoding(raw: bytes) -> str:
    for signature, name in _SIGNATURES:
        if raw.startswith(signature):
            return name
    candidates = dict.fromkeys(("utf-8", locale.getpreferredencoding(False) or "utf-8", "latin-1"))
    return next((name for name in candidates if _decodes(raw, name)), "utf-8")


def _decodes(raw: bytes, encoding: str) -> bool:
    try:
        raw.decode(encoding)
    except UnicodeDecodeError:
        return False
    return True


def _unix_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n") if "\r" in text else text
