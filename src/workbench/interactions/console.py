"""Console transcript for program output."""

from __future__ import annotations

import logging
import threading

from ..events import ConsoleReset, ListenerBus

__all__ = ["Console"]

LOGGER = logging.getLogger(__name__)


class Console:
    """Append-only text that is cleared whenever a clean compile resets it."""

    def __init__(self, bus: ListenerBus) -> None:
        self._bus = bus
        self._chunks: list[str] = []
        self._lock = threading.Lock()

    def append(self, text: str) -> None:
        with self._lock:
            self._chunks.append(text)

    @property
    def text(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    def reset(self) -> None:
        """Clear the transcript and announce it."""

        with self._lock:
            self._chunks.clear()
        LOGGER.debug("Console reset")
        self._bus.notify(ConsoleReset())
