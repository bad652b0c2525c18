"""Listener bus used by the global model to talk to its observers.

The model never calls a view directly. Every state change is described by a
small immutable event value and fanned out to the registered listeners in
subscription order. Questions that may veto an operation (for example "may
this modified document be discarded?") are asked through :meth:`ListenerBus.poll`
and answered by every listener; the answers are combined with logical AND.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from .editor.workspace import OpenDocument

LOGGER = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class SaveReason(Enum):
    """Why the model asks its listeners to save a document."""

    COMPILE = "compile"


@dataclass(frozen=True, slots=True)
class Event:
    """Base class for notifications fanned out by :class:`ListenerBus`.

    The handler invoked on each listener is derived from the class name:
    ``DocumentSaved`` is delivered to ``listener.on_document_saved(event)``.
    """


@dataclass(frozen=True, slots=True)
class Question(Event):
    """Base class for yes/no questions asked through :meth:`ListenerBus.poll`."""


# =============================================================================
# Document events
# =============================================================================


@dataclass(frozen=True, slots=True)
class DocumentCreated(Event):
    """A new untitled document was added to the workspace."""

    document: OpenDocument


@dataclass(frozen=True, slots=True)
class DocumentOpened(Event):
    """A document was read from disk into the workspace."""

    document: OpenDocument


@dataclass(frozen=True, slots=True)
class DocumentClosed(Event):
    """A document was removed from the workspace."""

    document: OpenDocument


@dataclass(frozen=True, slots=True)
class DocumentSaved(Event):
    """A document was written to disk."""

    document: OpenDocument


@dataclass(frozen=True, slots=True)
class SaveRequested(Event):
    """The model needs ``document`` saved before it can proceed.

    Listeners are expected to save synchronously or decline; the caller checks
    the modified flag afterwards.
    """

    document: OpenDocument
    reason: SaveReason


# =============================================================================
# Compile and session events
# =============================================================================


@dataclass(frozen=True, slots=True)
class CompileStarted(Event):
    """A compile began. A matching :class:`CompileEnded` always follows."""


@dataclass(frozen=True, slots=True)
class CompileEnded(Event):
    """The compile announced by the last :class:`CompileStarted` finished."""


@dataclass(frozen=True, slots=True)
class ConsoleReset(Event):
    """The console transcript was cleared."""


@dataclass(frozen=True, slots=True)
class InteractionsReset(Event):
    """The interactive session was restarted with a fresh interpreter."""


# =============================================================================
# Questions
# =============================================================================


@dataclass(frozen=True, slots=True)
class AbandonQuery(Question):
    """May the unsaved changes in ``document`` be discarded?"""

    document: OpenDocument


@lru_cache(maxsize=None)
def handler_name(event_type: type[Event]) -> str:
    """Return the listener method name that receives ``event_type``."""

    return "on_" + _CAMEL_BOUNDARY.sub("_", event_type.__name__).lower()


class GlobalModelListener:
    """Convenience base class with a no-op handler for every event kind.

    Subclasses override only the handlers they care about. The abandon
    question defaults to consent.
    """

    def on_document_created(self, event: DocumentCreated) -> None:
        pass

    def on_document_opened(self, event: DocumentOpened) -> None:
        pass

    def on_document_closed(self, event: DocumentClosed) -> None:
        pass

    def on_document_saved(self, event: DocumentSaved) -> None:
        pass

    def on_save_requested(self, event: SaveRequested) -> None:
        pass

    def on_compile_started(self, event: CompileStarted) -> None:
        pass

    def on_compile_ended(self, event: CompileEnded) -> None:
        pass

    def on_console_reset(self, event: ConsoleReset) -> None:
        pass

    def on_interactions_reset(self, event: InteractionsReset) -> None:
        pass

    def on_abandon_query(self, event: AbandonQuery) -> bool:
        return True


class ListenerBus:
    """Ordered registry of model listeners.

    Listeners are notified in the order they subscribed. The bus does not
    reject duplicates; a listener subscribed twice is notified twice.

    Thread Safety:
        This implementation is NOT thread-safe. All operations should be
        performed from the model's control thread.
    """

    __slots__ = ("_listeners",)

    def __init__(self) -> None:
        self._listeners: list[Any] = []

    def subscribe(self, listener: Any) -> None:
        """Append ``listener`` to the notification order."""

        self._listeners.append(listener)
        LOGGER.debug("Subscribed listener %s", _listener_name(listener))

    def unsubscribe(self, listener: Any) -> None:
        """Remove the first occurrence of ``listener``; unknown listeners are ignored."""

        try:
            self._listeners.remove(listener)
        except ValueError:
            return
        LOGGER.debug("Unsubscribed listener %s", _listener_name(listener))

    def notify(self, event: Event) -> None:
        """Deliver ``event`` to every listener, in subscription order.

        If a handler raises, the exception is logged and the remaining
        listeners are still notified.
        """

        name = handler_name(type(event))
        listeners = tuple(self._listeners)
        LOGGER.debug("Notifying %d listener(s) of %s", len(listeners), type(event).__name__)
        for listener in listeners:
            handler = getattr(listener, name, None)
            if handler is None:
                continue
            try:
                handler(event)
            except Exception:
                LOGGER.exception(
                    "Listener %s raised while handling %s",
                    _listener_name(listener),
                    type(event).__name__,
                )

    def poll(self, question: Question) -> bool:
        """Ask every listener ``question`` and AND the answers together.

        Every listener is asked, even after an earlier one has refused. With
        no listeners the answer is ``True``. A listener without a handler
        consents; a handler that raises is logged and counts as a refusal.
        """

        name = handler_name(type(question))
        consent = True
        for listener in tuple(self._listeners):
            handler = getattr(listener, name, None)
            if handler is None:
                continue
            try:
                answer = bool(handler(question))
            except Exception:
                LOGGER.exception(
                    "Listener %s raised while answering %s",
                    _listener_name(listener),
                    type(question).__name__,
                )
                answer = False
            consent = consent and answer
        LOGGER.debug("Poll %s answered %s", type(question).__name__, consent)
        return consent

    def clear(self) -> None:
        """Remove all listeners."""

        self._listeners.clear()

    def listener_count(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[Any]:
        return iter(tuple(self._listeners))


def _listener_name(listener: Any) -> str:
    if hasattr(listener, "__self__") and hasattr(listener, "__func__"):
        return f"{type(listener.__self__).__name__}.{listener.__func__.__name__}"
    return type(listener).__name__


__all__ = [
    "Event",
    "Question",
    "SaveReason",
    "DocumentCreated",
    "DocumentOpened",
    "DocumentClosed",
    "DocumentSaved",
    "SaveRequested",
    "CompileStarted",
    "CompileEnded",
    "ConsoleReset",
    "InteractionsReset",
    "AbandonQuery",
    "GlobalModelListener",
    "ListenerBus",
    "handler_name",
]
