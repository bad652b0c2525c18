"""Utility helpers (file IO, logging)."""

from .logging import configure_from_settings, setup_logging

__all__ = ["configure_from_settings", "setup_logging"]
