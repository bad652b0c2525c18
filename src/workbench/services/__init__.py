"""Service layer helpers (settings, background execution)."""

from .background import BackgroundRunner, CallbackQueue
from .settings import Settings, SettingsStore

__all__ = ["BackgroundRunner", "CallbackQueue", "Settings", "SettingsStore"]
