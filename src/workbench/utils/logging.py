"""Logging setup for processes embedding the workbench model."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..services.settings import Settings

__all__ = ["setup_logging", "configure_from_settings", "get_logger", "get_log_path"]

_DEFAULT_LOG_DIR = Path.home() / ".workbench" / "logs"
_LOG_FILENAME = "workbench.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# Background compiles log through these; keep them quiet unless the root is.
_NOISY_LOGGERS: tuple[str, ...] = ("concurrent.futures", "asyncio")
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Install a rotating ``workbench.log`` handler and, optionally, a console handler.

    Repeated calls are no-ops returning the existing log path unless ``force``
    is set.
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    log_path = _resolve_log_dir(log_dir) / _LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers = _build_handlers(log_path, level, console, max_bytes, backup_count)
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)

    quiet_level = max(level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    _LOG_PATH = log_path
    logging.getLogger(__name__).debug("Logging to %s", log_path)
    return log_path


def configure_from_settings(settings: Settings, *, console: bool = True) -> Path:
    """Apply the logging options carried by ``settings`` (debug level, log directory)."""

    level = logging.DEBUG if settings.debug_logging else logging.INFO
    return setup_logging(level, log_dir=settings.log_dir, console=console, force=True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_log_path() -> Path | None:
    """Return the currently configured log file, if logging was set up."""

    return _LOG_PATH


def _build_handlers(
    log_path: Path,
    level: int,
    console: bool,
    max_bytes: int,
    backup_count: int,
) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("WORKBENCH_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()
