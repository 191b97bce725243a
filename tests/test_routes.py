import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from naskah import create_app, get_autosaver
from naskah.config import TestConfig
from naskah.constants import SUGGEST_CHAPTER_TITLES
from naskah.extensions import db
from naskah.services import pipeline
from naskah.services.document import GenerationResult, Source
from naskah.services.generation_client import GenerationError
from naskah.services.session_store import DatabaseStorage, SessionStore


class FakeClient:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def generate(self, prompt, use_grounding=False, model=None):
        self.calls.append({"prompt": prompt, "use_grounding": use_grounding, "model": model})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def app_instance():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app_instance):
    return app_instance.test_client()


def _use_client(monkeypatch, replies):
    fake = FakeClient(replies)
    monkeypatch.setattr(pipeline, "_get_generation_client", lambda: fake)
    return fake


def _configure(client, **values):
    response = client.put("/api/configuration", json=values)
    assert response.status_code == 200, response.get_json()
    return response.get_json()


def test_index_renders_form(client):
    response = client.get("/")

    assert response.status_code == 200
    assert b"Jenis karya" in response.data
    assert b"Bab 1: Pendahuluan" in response.data


def test_get_configuration_defaults(client):
    data = client.get("/api/configuration").get_json()

    assert data["mode"] == "academic"
    assert data["configuration"]["selected_chapters"] == ["Bab 1: Pendahuluan"]
    assert data["chapters"][0] == "Bab 1: Pendahuluan"


def test_update_configuration_validates_choices(client):
    response = client.put("/api/configuration", json={"citation_style": "Unknown"})

    assert response.status_code == 400
    assert "citation_style" in response.get_json()["fields"]


def test_changing_major_resets_study_program(client):
    data = _configure(client, major="Kesehatan")

    assert data["configuration"]["study_program"] == "Pendidikan Dokter"


def test_changing_mode_clears_selection(client):
    data = _configure(client, document_kind="Novel")

    assert data["mode"] == "creative"
    assert data["configuration"]["selected_chapters"] == []
    assert SUGGEST_CHAPTER_TITLES in data["chapters"]


def test_select_and_deselect_chapters(client):
    data = client.post("/api/configuration/chapters", json={"select_all": True}).get_json()
    assert SUGGEST_CHAPTER_TITLES not in data["configuration"]["selected_chapters"]
    assert "Daftar Pustaka" in data["configuration"]["selected_chapters"]

    data = client.post("/api/configuration/chapters", json={"chapter": "Abstrak", "selected": False}).get_json()
    assert "Abstrak" not in data["configuration"]["selected_chapters"]

    response = client.post("/api/configuration/chapters", json={"chapter": "Bab 99"})
    assert response.status_code == 400


def test_save_configuration_persists_snapshot(client, app_instance):
    _configure(client, title="Tersimpan")

    assert client.post("/api/configuration/save").get_json() == {"saved": True}
    assert SessionStore(DatabaseStorage()).load_configuration().title == "Tersimpan"


def test_fixed_chapter_list_cannot_be_edited(client):
    response = client.post("/api/chapters/academic", json={"name": "Bab 6"})

    assert response.status_code == 400


def test_unknown_mode_is_404(client):
    assert client.get("/api/chapters/poetry").status_code == 404


def test_edit_novel_chapter_list(client):
    _configure(client, document_kind="Novel")

    info = client.get("/api/chapters/creative").get_json()
    assert info["placeholder"] == "Bab 16: "

    data = client.post("/api/chapters/creative", json={"name": "Bab 16: Pulang"}).get_json()
    assert data["chapters"][-1] == "Bab 16: Pulang"
    assert "Bab 16: Pulang" in data["selected_chapters"]

    data = client.patch("/api/chapters/creative", json={"name": "Bab 16: Pulang", "new_name": "Bab 16: Rumah"}).get_json()
    assert "Bab 16: Rumah" in data["chapters"]
    assert "Bab 16: Rumah" in data["selected_chapters"]

    response = client.delete("/api/chapters/creative", json={"name": SUGGEST_CHAPTER_TITLES})
    assert response.status_code == 400

    data = client.delete("/api/chapters/creative", json={"name": "Bab 16: Rumah"}).get_json()
    assert "Bab 16: Rumah" not in data["chapters"]
    assert client.get("/api/chapters/book").get_json()["chapters"][0] == "Outline"


def test_reorder_chapters(client):
    chapters = client.get("/api/chapters/book").get_json()["chapters"]

    reordered = list(reversed(chapters))
    data = client.put("/api/chapters/book/order", json={"chapters": reordered}).get_json()
    assert data["chapters"] == reordered

    response = client.put("/api/chapters/book/order", json={"chapters": reordered[1:]})
    assert response.status_code == 400


def test_generate_records_history(client, monkeypatch):
    fake = _use_client(
        monkeypatch,
        [
            GenerationResult("Text1", [Source("https://a.example", "A")]),
            GenerationResult("Text2"),
        ],
    )
    _configure(client, title="Skripsi Uji", selected_chapters=["Bab 1: Pendahuluan", "Bab 2: Kajian Pustaka"])

    response = client.post("/api/generate", json={})

    assert response.status_code == 200
    data = response.get_json()
    assert data["content"]["text"] == "# Bab 1: Pendahuluan\n\nText1\n\n# Bab 2: Kajian Pustaka\n\nText2"
    assert data["content"]["sources"] == [{"web": {"uri": "https://a.example", "title": "A"}}]
    assert data["entry"]["title"] == "Skripsi Uji"
    assert len(fake.calls) == 2

    history = client.get("/api/history").get_json()["history"]
    assert [entry["id"] for entry in history] == [data["entry"]["id"]]


def test_generate_without_title_is_rejected(client, monkeypatch):
    fake = _use_client(monkeypatch, [])

    response = client.post("/api/generate", json={"configuration": {"title": ""}})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Judul tidak boleh kosong."
    assert fake.calls == []


def test_generate_reports_failed_chapter(client, monkeypatch):
    _use_client(monkeypatch, [GenerationError("quota exceeded")])

    response = client.post("/api/generate", json={"configuration": {"title": "Gagal"}})

    assert response.status_code == 502
    assert response.get_json()["label"] == "Bab 1: Pendahuluan"
    assert client.get("/api/history").get_json()["history"] == []


def test_generate_chapter_titles_does_not_touch_history(client, monkeypatch):
    _use_client(monkeypatch, [GenerationResult("1. Title A\n2. Title B\n3. Title C")])
    _configure(client, document_kind="Novel", title="Senja")
    client.post("/api/configuration/chapters", json={"chapter": SUGGEST_CHAPTER_TITLES})

    data = client.post("/api/generate", json={}).get_json()

    assert data == {"suggestions": ["Title A", "Title B", "Title C"]}
    assert client.get("/api/history").get_json()["history"] == []

    adopted = client.post("/api/chapters/creative/adopt", json={"title": "Title B"}).get_json()
    assert adopted["chapters"][-1] == "Title B"
    assert adopted["selected_chapters"] == ["Title B"]


def test_title_search(client, monkeypatch):
    fake = _use_client(monkeypatch, [GenerationResult("- Judul Satu\nJudul Dua\n\n")])

    data = client.post("/api/titles", json={"topic_description": "Literasi digital"}).get_json()

    assert data == {"titles": ["Judul Satu", "Judul Dua"]}
    assert fake.calls[0]["model"] == TestConfig.SUGGESTION_MODEL


def test_title_search_needs_topic(client, monkeypatch):
    fake = _use_client(monkeypatch, [])

    response = client.post("/api/titles", json={"topic_description": "  "})

    assert response.status_code == 400
    assert fake.calls == []


def test_variable_suggestion_updates_configuration(client, monkeypatch):
    fake = _use_client(monkeypatch, [GenerationResult(" X = Motivasi, Y = Prestasi \n")])
    assert client.post("/api/variables").status_code == 400
    assert fake.calls == []

    _configure(
        client,
        research_method="Kuantitatif",
        title="Motivasi dan Prestasi",
        topic_description="Siswa SMA di kota Bandung",
    )
    data = client.post("/api/variables").get_json()

    assert data == {"variables": "X = Motivasi, Y = Prestasi"}
    assert get_autosaver().latest.variables == "X = Motivasi, Y = Prestasi"


def test_history_rename_export_and_delete(client, monkeypatch):
    _use_client(monkeypatch, [GenerationResult("Isi bab")])
    entry = client.post("/api/generate", json={"configuration": {"title": "Judul: Uji/Coba"}}).get_json()["entry"]

    renamed = client.patch(f"/api/history/{entry['id']}", json={"title": "Judul: Akhir?"}).get_json()
    assert renamed["entry"]["title"] == "Judul: Akhir?"
    assert client.patch(f"/api/history/{entry['id']}", json={"title": " "}).status_code == 400

    export = client.get(f"/api/history/{entry['id']}/export?format=md")
    assert export.status_code == 200
    assert export.mimetype == "text/markdown"
    assert "Judul_ Akhir_.md" in export.headers["Content-Disposition"]
    assert export.get_data(as_text=True) == "# Bab 1: Pendahuluan\n\nIsi bab\n"

    assert client.get(f"/api/history/{entry['id']}/export?format=pdf").status_code == 400
    assert client.delete(f"/api/history/{entry['id']}").status_code == 200
    assert client.delete(f"/api/history/{entry['id']}").status_code == 404


def test_clear_history(client, monkeypatch):
    _use_client(monkeypatch, [GenerationResult("Satu"), GenerationResult("Dua")])
    client.post("/api/generate", json={"configuration": {"title": "A"}})
    client.post("/api/generate", json={"configuration": {"title": "B"}})

    assert len(client.get("/api/history").get_json()["history"]) == 2
    client.delete("/api/history")
    assert client.get("/api/history").get_json()["history"] == []


def test_export_current_text(client):
    response = client.post("/api/export", json={"title": "", "text": "  Naskah  ", "format": "txt"})

    assert response.status_code == 200
    assert "Dokumen.txt" in response.headers["Content-Disposition"]
    assert response.get_data(as_text=True) == "Naskah\n"


def test_configuration_rejects_unknown_chapters(client):
    response = client.put("/api/configuration", json={"selected_chapters": ["Bab 9: Tidak Ada"]})

    assert response.status_code == 400
    assert "Bab 9: Tidak Ada" in response.get_json()["error"]
    selected = client.get("/api/configuration").get_json()["configuration"]["selected_chapters"]
    assert selected == ["Bab 1: Pendahuluan"]


def test_generate_rejects_unknown_chapters(client, monkeypatch):
    fake = _use_client(monkeypatch, [GenerationResult("Isi")])

    response = client.post(
        "/api/generate",
        json={"configuration": {"title": "Judul", "selected_chapters": ["Bab 9: Tidak Ada"]}},
    )

    assert response.status_code == 400
    assert fake.calls == []
    assert client.get("/api/history").get_json()["history"] == []
