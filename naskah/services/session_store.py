"""Saved session state: configuration, chapter lists by mode, and history.

The three values live under independent keys of a small key/value
:class:`Storage`. Each one can be missing or corrupt without affecting the
others, and a broken value always degrades to defaults instead of raising.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import StoredValue
from .document import DocumentConfiguration, DocumentMode, GenerationResult

LOGGER = logging.getLogger(__name__)

CONFIGURATION_KEY = "document_configuration"
CHAPTER_LISTS_KEY = "chapter_lists"
HISTORY_KEY = "generation_history"

DEFAULT_AUTOSAVE_SECONDS = 30.0


class PersistenceError(RuntimeError):
    """Raised by a storage backend when a value cannot be read or written."""


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class DatabaseStorage:
    """Storage backed by the ``stored_values`` table; needs an app context."""

    def get(self, key: str) -> Optional[str]:
        try:
            entry = db.session.get(StoredValue, key)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Unable to read '{key}': {exc}") from exc
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        try:
            entry = db.session.get(StoredValue, key)
            if entry is None:
                entry = StoredValue(key=key, value=value)
                db.session.add(entry)
            else:
                entry.value = value
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f"Unable to write '{key}': {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            entry = db.session.get(StoredValue, key)
            if entry is not None:
                db.session.delete(entry)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f"Unable to remove '{key}': {exc}") from exc


@dataclass
class HistoryEntry:
    id: str
    title: str
    date: str
    content: GenerationResult
    configuration_snapshot: DocumentConfiguration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "content": self.content.to_dict(),
            "configuration_snapshot": self.configuration_snapshot.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "HistoryEntry":
        if not isinstance(payload, Mapping):
            raise ValueError("History entry must be a JSON object.")
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title") or ""),
            date=str(payload.get("date") or ""),
            content=GenerationResult.from_dict(payload.get("content") or {}),
            configuration_snapshot=DocumentConfiguration.from_dict(payload.get("configuration_snapshot") or {}),
        )


class SessionStore:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    # ---------------- configuration ----------------
    def load_configuration(self) -> DocumentConfiguration:
        payload = self._read_json(CONFIGURATION_KEY)
        if not isinstance(payload, dict) or not payload.get("document_kind"):
            return DocumentConfiguration.defaults()
        return DocumentConfiguration.from_dict(payload)

    def save_configuration(self, config: DocumentConfiguration) -> None:
        self._write_json(CONFIGURATION_KEY, config.to_dict())

    # ---------------- chapter lists ----------------
    def load_chapter_list(self, mode: DocumentMode) -> List[str]:
        if not mode.has_editable_chapters:
            return mode.default_chapters()
        saved = self._load_chapter_lists().get(mode.value)
        if isinstance(saved, list) and all(isinstance(name, str) for name in saved):
            return list(saved)
        return mode.default_chapters()

    def save_chapter_list(self, mode: DocumentMode, chapters: Sequence[str]) -> None:
        if not mode.has_editable_chapters:
            return
        lists = self._load_chapter_lists()
        lists[mode.value] = list(chapters)
        self._write_json(CHAPTER_LISTS_KEY, lists)

    def _load_chapter_lists(self) -> Dict[str, Any]:
        payload = self._read_json(CHAPTER_LISTS_KEY)
        return payload if isinstance(payload, dict) else {}

    # ---------------- history ----------------
    def load_history(self) -> List[HistoryEntry]:
        payload = self._read_json(HISTORY_KEY)
        if not isinstance(payload, list):
            return []
        entries: List[HistoryEntry] = []
        for item in payload:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Skipping malformed history entry: %s", exc)
        return entries

    def get_history_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        return next((entry for entry in self.load_history() if entry.id == entry_id), None)

    def add_history_entry(
        self,
        title: str,
        content: GenerationResult,
        configuration: DocumentConfiguration,
    ) -> HistoryEntry:
        history = self.load_history()
        entry = HistoryEntry(
            id=_unique_entry_id({existing.id for existing in history}),
            title=title,
            date=datetime.now(timezone.utc).isoformat(),
            content=content,
            configuration_snapshot=DocumentConfiguration.from_dict(configuration.to_dict()),
        )
        self._save_history([entry, *history])
        return entry

    def rename_history_entry(self, entry_id: str, title: str) -> Optional[HistoryEntry]:
        return self._update_history_entry(entry_id, title=title)

    def replace_history_content(self, entry_id: str, content: GenerationResult) -> Optional[HistoryEntry]:
        return self._update_history_entry(entry_id, content=content)

    def delete_history_entry(self, entry_id: str) -> bool:
        history = self.load_history()
        remaining = [entry for entry in history if entry.id != entry_id]
        if len(remaining) == len(history):
            return False
        self._save_history(remaining)
        return True

    def clear_history(self) -> None:
        try:
            self.storage.remove(HISTORY_KEY)
        except PersistenceError as exc:
            LOGGER.error("Failed to clear history: %s", exc)

    def _update_history_entry(self, entry_id: str, **changes: Any) -> Optional[HistoryEntry]:
        history = self.load_history()
        updated: Optional[HistoryEntry] = None
        for index, entry in enumerate(history):
            if entry.id == entry_id:
                updated = replace(entry, **changes)
                history[index] = updated
        if updated is not None:
            self._save_history(history)
        return updated

    def _save_history(self, history: Sequence[HistoryEntry]) -> None:
        self._write_json(HISTORY_KEY, [entry.to_dict() for entry in history])

    # ---------------- raw access ----------------
    def _read_json(self, key: str) -> Any:
        try:
            raw = self.storage.get(key)
        except PersistenceError as exc:
            LOGGER.error("Failed to load '%s': %s", key, exc)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.error("Failed to parse '%s' from storage: %s", key, exc.msg)
            return None

    def _write_json(self, key: str, value: Any) -> None:
        try:
            self.storage.set(key, json.dumps(value, ensure_ascii=False))
        except PersistenceError as exc:
            LOGGER.error("Failed to save '%s': %s", key, exc)


def _unique_entry_id(existing: set) -> str:
    candidate = int(time.time() * 1000)
    while str(candidate) in existing:
        candidate += 1
    return str(candidate)


class ConfigurationAutosaver:
    """Persists the latest configuration snapshot on a fixed interval.

    Callers hand every edit to :meth:`update`; only the most recent snapshot
    is written, at most once per ``interval`` seconds.
    """

    def __init__(self, store: SessionStore, interval: float = DEFAULT_AUTOSAVE_SECONDS, *, app: Any = None) -> None:
        self.store = store
        self.interval = interval
        self.app = app
        self._lock = threading.Lock()
        self._latest: Optional[DocumentConfiguration] = None
        self._dirty = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def latest(self) -> Optional[DocumentConfiguration]:
        with self._lock:
            return self._latest

    def update(self, config: DocumentConfiguration) -> None:
        with self._lock:
            self._latest = config
            self._dirty = True

    def flush(self) -> bool:
        with self._lock:
            if not self._dirty or self._latest is None:
                return False
            snapshot = self._latest
            self._dirty = False

        if self.app is not None:
            with self.app.app_context():
                self.store.save_configuration(snapshot)
        else:
            self.store.save_configuration(snapshot)
        return True

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="configuration-autosave", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval)
            self._thread = None
        self.flush()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.flush()
            except Exception:
                LOGGER.exception("Configuration autosave failed")
