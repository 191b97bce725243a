import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from naskah import create_app
from naskah.config import TestConfig
from naskah.constants import BOOK_CHAPTERS, CHAPTERS
from naskah.extensions import db
from naskah.models import StoredValue
from naskah.services.document import DocumentConfiguration, DocumentMode, GenerationResult, Source
from naskah.services.session_store import (
    CHAPTER_LISTS_KEY,
    CONFIGURATION_KEY,
    HISTORY_KEY,
    ConfigurationAutosaver,
    DatabaseStorage,
    InMemoryStorage,
    PersistenceError,
    SessionStore,
)


class BrokenStorage(InMemoryStorage):
    def get(self, key):
        raise PersistenceError("disk unavailable")

    def set(self, key, value):
        raise PersistenceError("disk unavailable")


@pytest.fixture
def store():
    return SessionStore(InMemoryStorage())


def test_configuration_round_trip(store):
    config = DocumentConfiguration.defaults()
    config.title = "Judul"
    config.research_instruments = ["Wawancara"]
    config.chapter_page_counts["Bab 1: Pendahuluan"] = 12

    store.save_configuration(config)

    assert store.load_configuration() == config


def test_missing_or_corrupt_configuration_falls_back_to_defaults():
    assert SessionStore(InMemoryStorage()).load_configuration() == DocumentConfiguration.defaults()
    corrupt = SessionStore(InMemoryStorage({CONFIGURATION_KEY: "{not json"}))
    assert corrupt.load_configuration() == DocumentConfiguration.defaults()
    kindless = SessionStore(InMemoryStorage({CONFIGURATION_KEY: json.dumps({"title": "X"})}))
    assert kindless.load_configuration() == DocumentConfiguration.defaults()


def test_out_of_range_numbers_fall_back_to_defaults():
    payload = '{"document_kind": "Skripsi", "page_count": 1e999, "chapter_page_counts": {"Abstrak": 1e999}}'
    store = SessionStore(InMemoryStorage({CONFIGURATION_KEY: payload}))

    config = store.load_configuration()

    assert config.page_count == DocumentConfiguration.defaults().page_count
    assert "Abstrak" not in config.chapter_page_counts


@pytest.mark.parametrize("content", ["oops", ["a", "b"], 7])
def test_history_entry_with_malformed_content_is_skipped(content):
    history = [{"id": "1", "title": "rusak", "content": content}, {"id": "2", "title": "baik"}, "bukan objek"]
    store = SessionStore(InMemoryStorage({HISTORY_KEY: json.dumps(history)}))

    assert [entry.id for entry in store.load_history()] == ["2"]

    entry = store.add_history_entry("Baru", GenerationResult("Isi"), DocumentConfiguration.defaults())
    assert [item.id for item in store.load_history()] == [entry.id, "2"]


def test_storage_failures_are_logged_not_raised(caplog):
    store = SessionStore(BrokenStorage())

    store.save_configuration(DocumentConfiguration.defaults())

    assert store.load_configuration() == DocumentConfiguration.defaults()
    assert store.load_history() == []
    assert "disk unavailable" in caplog.text


def test_chapter_lists_are_kept_per_mode(store):
    novel = ["Prolog", "Bab 1: Ombak"]
    store.save_chapter_list(DocumentMode.CREATIVE, novel)

    assert store.load_chapter_list(DocumentMode.CREATIVE) == novel
    assert store.load_chapter_list(DocumentMode.BOOK) == BOOK_CHAPTERS


def test_fixed_chapter_lists_cannot_be_overridden(store):
    store.save_chapter_list(DocumentMode.ACADEMIC, ["Bab X"])

    assert store.load_chapter_list(DocumentMode.ACADEMIC) == CHAPTERS
    assert store.storage.get(CHAPTER_LISTS_KEY) is None


def test_corrupt_chapter_list_uses_defaults():
    storage = InMemoryStorage({CHAPTER_LISTS_KEY: json.dumps({"book": "not a list"})})

    assert SessionStore(storage).load_chapter_list(DocumentMode.BOOK) == BOOK_CHAPTERS


def test_history_is_newest_first_with_snapshot(store):
    config = DocumentConfiguration.defaults()
    config.title = "Pertama"
    first = store.add_history_entry("Pertama", GenerationResult("Isi 1"), config)
    config.title = "Diubah setelah disimpan"
    second = store.add_history_entry("Kedua", GenerationResult("Isi 2", [Source("https://a.example", "A")]), config)

    history = store.load_history()

    assert [entry.id for entry in history] == [second.id, first.id]
    assert first.id != second.id
    assert history[1].configuration_snapshot.title == "Pertama"
    assert history[0].content.sources[0].uri == "https://a.example"


def test_history_edits(store):
    config = DocumentConfiguration.defaults()
    entry = store.add_history_entry("Draf", GenerationResult("Isi"), config)

    assert store.rename_history_entry(entry.id, "Final").title == "Final"
    assert store.replace_history_content(entry.id, GenerationResult("Isi baru")).content.text == "Isi baru"
    assert store.rename_history_entry("missing", "X") is None
    assert store.get_history_entry(entry.id).title == "Final"

    assert store.delete_history_entry(entry.id) is True
    assert store.delete_history_entry(entry.id) is False
    assert store.load_history() == []


def test_clear_history_and_skip_malformed_entries(store):
    store.storage.set(HISTORY_KEY, json.dumps([{"title": "no id"}, {"id": "1", "title": "ok"}]))

    assert [entry.id for entry in store.load_history()] == ["1"]

    store.clear_history()
    assert store.load_history() == []


def test_autosaver_writes_only_latest_snapshot(store):
    autosaver = ConfigurationAutosaver(store, interval=30.0)
    assert autosaver.flush() is False

    first = DocumentConfiguration.defaults()
    first.title = "Satu"
    second = DocumentConfiguration.defaults()
    second.title = "Dua"
    autosaver.update(first)
    autosaver.update(second)

    assert autosaver.flush() is True
    assert store.load_configuration().title == "Dua"
    assert autosaver.flush() is False


def test_autosaver_stop_flushes_pending_changes(store):
    autosaver = ConfigurationAutosaver(store, interval=0.01)
    autosaver.start()
    config = DocumentConfiguration.defaults()
    config.title = "Tersimpan"
    autosaver.update(config)
    autosaver.stop()

    assert store.load_configuration().title == "Tersimpan"


def test_database_storage_persists_values():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        store = SessionStore(DatabaseStorage())
        config = DocumentConfiguration.defaults()
        config.title = "Di database"

        store.save_configuration(config)
        store.save_configuration(config)

        assert StoredValue.query.count() == 1
        assert store.load_configuration().title == "Di database"

        store.add_history_entry("Judul", GenerationResult("Isi"), config)
        store.clear_history()
        assert db.session.get(StoredValue, HISTORY_KEY) is None
        db.drop_all()
