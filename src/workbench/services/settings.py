"""Settings dataclass and its JSON persistence."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Mapping

from jsonschema import Draft202012Validator

__all__ = ["Settings", "SettingsStore", "SETTINGS_SCHEMA", "remember_recent_file"]

LOGGER = logging.getLogger(__name__)

SETTINGS_VERSION = 1
_RECENT_FILES_LIMIT = 10


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on", "debug"}


# Environment variable -> (settings field, converter).
_ENVIRONMENT: Mapping[str, tuple[str, Callable[[str], Any]]] = {
    "WORKBENCH_LAUNCHER": ("launcher_keyword", str),
    "WORKBENCH_COMPILER": ("active_compiler", str),
    "WORKBENCH_JAVAC": ("javac_path", str),
    "WORKBENCH_OUTPUT_DIR": ("compile_output_dir", str),
    "WORKBENCH_LOG_DIR": ("log_dir", str),
    "WORKBENCH_DEBUG_LOGGING": ("debug_logging", _flag),
    "WORKBENCH_INDENT_WIDTH": ("indent_width", int),
    "WORKBENCH_HISTORY_LIMIT": ("history_limit", int),
}

SETTINGS_SCHEMA: Mapping[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "launcher_keyword": {"type": "string", "pattern": r"^\S+$"},
        "active_compiler": {"type": ["string", "null"]},
        "javac_path": {"type": "string", "minLength": 1},
        "compile_output_dir": {"type": ["string", "null"]},
        "extra_classpath": {"type": "array", "items": {"type": "string"}},
        "indent_width": {"type": "integer", "minimum": 0},
        "history_limit": {"type": "integer", "minimum": 1},
        "debug_logging": {"type": "boolean"},
        "log_dir": {"type": ["string", "null"]},
        "recent_files": {"type": "array", "items": {"type": "string"}},
    },
}
_VALIDATOR = Draft202012Validator(SETTINGS_SCHEMA)


@dataclass(slots=True)
class Settings:
    """Options that change how the model compiles, evaluates and logs."""

    launcher_keyword: str = "java"
    active_compiler: str | None = None
    javac_path: str = "javac"
    compile_output_dir: str | None = None
    extra_classpath: list[str] = field(default_factory=list)
    indent_width: int = 2
    history_limit: int = 500
    debug_logging: bool = False
    log_dir: str | None = None
    recent_files: list[str] = field(default_factory=list)


_FIELD_NAMES = frozenset(item.name for item in fields(Settings))


def remember_recent_file(settings: Settings, path: Path | str) -> Settings:
    """Return ``settings`` with ``path`` moved to the front of the recent files."""

    entry = str(Path(path).expanduser().resolve())
    recent = [entry, *(item for item in settings.recent_files if item != entry)]
    return replace(settings, recent_files=recent[:_RECENT_FILES_LIMIT])


def default_settings_path() -> Path:
    return Path.home() / ".workbench" / "settings.json"


class SettingsStore:
    """Reads and writes :class:`Settings` as a versioned JSON document.

    Layering on :meth:`load`: file values, then runtime overrides, then
    ``WORKBENCH_*`` environment variables.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_settings_path()

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Return the stored settings with overrides applied.

        A missing, unreadable or schema-invalid file yields the defaults.
        Files written by an older version are rewritten in the current one.
        """

        document = self._load_document()
        settings = Settings(**_known(document))
        if document and document.get("version") != SETTINGS_VERSION:
            LOGGER.info("Upgrading settings file %s to version %d", self.path, SETTINGS_VERSION)
            self.save(settings)

        settings = _merge(settings, overrides or {}, "runtime")
        return _merge(settings, _environment(), "environment")

    def save(self, settings: Settings) -> Path:
        """Write ``settings`` through a sibling temp file and an atomic rename."""

        document = {**asdict(settings), "version": SETTINGS_VERSION}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        scratch = self.path.with_suffix(".tmp")
        scratch.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        scratch.replace(self.path)
        LOGGER.debug("Wrote settings to %s", self.path)
        return self.path

    def _load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self.path, exc)
            return {}
        problems = sorted(_VALIDATOR.iter_errors(document), key=lambda error: list(error.path))
        for problem in problems:
            where = "/".join(str(part) for part in problem.path) or "<root>"
            LOGGER.warning("Ignoring settings file %s: %s: %s", self.path, where, problem.message)
        return {} if problems else document


def _known(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if key in _FIELD_NAMES}


def _merge(settings: Settings, values: Mapping[str, Any], origin: str) -> Settings:
    changes = {key: value for key, value in _known(values).items() if value is not None}
    if not changes:
        return settings
    LOGGER.debug("Applying %s overrides for %s", origin, ", ".join(sorted(changes)))
    return replace(settings, **changes)


def _environment() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for variable, (name, convert) in _ENVIRONMENT.items():
        raw = os.environ.get(variable)
        if raw is None:
            continue
        try:
            values[name] = convert(raw)
        except ValueError:
            LOGGER.warning("Ignoring %s=%r: expected %s", variable, raw, convert.__name__)
    return values
