"""Map a source file and its declared package to the classpath root directory."""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import InvalidPackageError, UnexpectedStateError

__all__ = ["resolve_source_root", "package_segments"]

_SEPARATORS = re.compile(r"[./]")


def package_segments(package: str) -> list[str]:
    """Split a dot- or slash-separated package path; ``""`` is the default package."""

    if not package:
        return []
    return _SEPARATORS.split(package)


def resolve_source_root(source_file: Path | None, package: str) -> Path:
    """Return the directory that must be on the classpath for ``source_file``.

    The last package segment must name the file's directory, the one before it
    that directory's parent, and so on. The parent of the directory matching
    the first segment is the source root.

    Raises:
        InvalidPackageError: ``source_file`` is ``None`` (unsaved document) or a
            directory name does not match its package segment.
        UnexpectedStateError: The filesystem root was reached before every
            segment was matched.
    """

    if source_file is None:
        raise InvalidPackageError("Can not get source root for unsaved file. Please save.")

    source_file = Path(source_file).absolute()
    directory = source_file.parent
    for segment in reversed(package_segments(package)):
        if segment != directory.name:
            raise InvalidPackageError(
                f"The source file {source_file} is in the wrong directory or in the "
                f"wrong package. The directory name {directory.name} does not match "
                f"the package component {segment}.",
                path=source_file,
                directory=directory.name,
                component=segment,
            )
        if directory.parent == directory:
            raise UnexpectedStateError(f"{directory} has no parent directory")
        directory = directory.parent
    return directory
