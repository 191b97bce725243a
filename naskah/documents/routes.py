from __future__ import annotations

from typing import Any, Dict, List, Mapping

from flask import Response, abort, current_app, jsonify, request
from werkzeug.datastructures import MultiDict

from .. import get_autosaver
from ..services.chapter_list import (
    ChapterListError,
    add_chapter,
    adopt_suggested_title,
    delete_chapter,
    next_chapter_placeholder,
    rename_chapter,
    reorder_chapters,
)
from ..services.document import DocumentConfiguration, DocumentMode, GenerationResult
from ..services.generation_client import GenerationError
from ..services.pipeline import ChapterTitleSuggestions, DocumentValidationError, run_pipeline
from ..services.session_store import DatabaseStorage, SessionStore
from ..services.suggestions import (
    SuggestionError,
    search_titles,
    suggest_variables,
    wants_variable_suggestion,
)
from ..text_exporter import EXPORT_FORMATS, TextExportError, render_export, safe_filename
from . import bp
from .forms import DocumentConfigurationForm


def _store() -> SessionStore:
    return SessionStore(DatabaseStorage())


def _current_configuration() -> DocumentConfiguration:
    latest = get_autosaver().latest
    if latest is not None:
        return DocumentConfiguration.from_dict(latest.to_dict())
    return _store().load_configuration()


def _remember(config: DocumentConfiguration) -> None:
    get_autosaver().update(config)


def _mode_or_404(mode: str) -> DocumentMode:
    try:
        return DocumentMode(mode)
    except ValueError:
        abort(404)


def _json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _formdata(values: Mapping[str, Any]) -> MultiDict:
    """Flatten a JSON configuration into form data WTForms can validate."""

    flattened = MultiDict()
    for key, value in values.items():
        if value is None or isinstance(value, Mapping):
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                flattened.add(key, str(item))
        else:
            flattened.add(key, str(value))
    return flattened


def _unknown_chapters(config: DocumentConfiguration) -> List[str]:
    chapters = _store().load_chapter_list(config.mode)
    return [name for name in config.selected_chapters if name not in chapters]


def _unknown_chapters_response(unknown: List[str]):
    return jsonify({"error": f"Bab tidak dikenal: {', '.join(unknown)}."}), 400


def _configuration_payload(config: DocumentConfiguration) -> Dict[str, Any]:
    mode = config.mode
    return {
        "configuration": config.to_dict(),
        "mode": mode.value,
        "chapters": _store().load_chapter_list(mode),
    }


@bp.route("/configuration", methods=["GET"])
def get_configuration():
    return jsonify(_configuration_payload(_current_configuration()))


@bp.route("/configuration", methods=["PUT"])
def update_configuration():
    payload = _json_payload()
    previous = _current_configuration()
    merged = {**previous.to_dict(), **payload}

    form = DocumentConfigurationForm(formdata=_formdata(merged))
    if not form.validate():
        return jsonify({"error": "Konfigurasi tidak valid.", "fields": form.errors}), 400

    config = DocumentConfiguration.from_dict(merged)
    if config.major != previous.major and "study_program" not in payload:
        config = config.with_major(config.major)
    if config.mode is not previous.mode:
        # Selections from another mode's chapter list are meaningless here.
        config.selected_chapters = []

    unknown = _unknown_chapters(config)
    if unknown:
        return _unknown_chapters_response(unknown)

    _remember(config)
    return jsonify(_configuration_payload(config))


@bp.route("/configuration/save", methods=["POST"])
def save_configuration():
    autosaver = get_autosaver()
    autosaver.update(_current_configuration())
    autosaver.flush()
    return jsonify({"saved": True})


@bp.route("/configuration/chapters", methods=["POST"])
def select_chapters():
    payload = _json_payload()
    config = _current_configuration()
    chapters = _store().load_chapter_list(config.mode)

    if payload.get("select_all"):
        config.select_all(chapters)
    elif payload.get("deselect_all"):
        config.selected_chapters = []
    else:
        chapter = str(payload.get("chapter") or "").strip()
        if chapter not in chapters:
            return jsonify({"error": f"Bab \"{chapter}\" tidak ditemukan."}), 400
        if payload.get("selected", True):
            config.select_chapter(chapter)
        else:
            config.deselect_chapter(chapter)

    _remember(config)
    return jsonify(_configuration_payload(config))


@bp.route("/chapters/<mode>", methods=["GET"])
def list_chapters(mode: str):
    document_mode = _mode_or_404(mode)
    chapters = _store().load_chapter_list(document_mode)
    return jsonify(
        {
            "mode": document_mode.value,
            "chapters": chapters,
            "editable": document_mode.has_editable_chapters,
            "placeholder": next_chapter_placeholder(chapters),
        }
    )


def _edit_chapters(mode: str, edit) -> Response:
    document_mode = _mode_or_404(mode)
    if not document_mode.has_editable_chapters:
        return jsonify({"error": "Daftar bab untuk jenis karya ini tidak dapat diubah."}), 400

    store = _store()
    chapters = store.load_chapter_list(document_mode)
    config = _current_configuration()
    try:
        updated = edit(chapters, config)
    except ChapterListError as exc:
        return jsonify({"error": str(exc)}), 400

    store.save_chapter_list(document_mode, updated)
    if config.mode is document_mode:
        _remember(config)
    return jsonify(
        {
            "mode": document_mode.value,
            "chapters": updated,
            "selected_chapters": config.selected_chapters,
        }
    )


@bp.route("/chapters/<mode>", methods=["POST"])
def create_chapter(mode: str):
    name = str(_json_payload().get("name") or "")

    def edit(chapters, config):
        updated = add_chapter(chapters, name)
        if config.mode.value == mode:
            config.select_chapter(updated[-1])
        return updated

    return _edit_chapters(mode, edit)


@bp.route("/chapters/<mode>", methods=["PATCH"])
def update_chapter(mode: str):
    payload = _json_payload()
    old_name = str(payload.get("name") or "")
    new_name = str(payload.get("new_name") or "")

    def edit(chapters, config):
        updated = rename_chapter(chapters, old_name, new_name)
        renamed = new_name.strip()
        if config.mode.value == mode and updated != list(chapters):
            config.selected_chapters = [renamed if c == old_name else c for c in config.selected_chapters]
        return updated

    return _edit_chapters(mode, edit)


@bp.route("/chapters/<mode>", methods=["DELETE"])
def remove_chapter(mode: str):
    name = str(_json_payload().get("name") or request.args.get("name") or "")

    def edit(chapters, config):
        updated = delete_chapter(chapters, name)
        if config.mode.value == mode:
            config.deselect_chapter(name)
        return updated

    return _edit_chapters(mode, edit)


@bp.route("/chapters/<mode>/order", methods=["PUT"])
def order_chapters(mode: str):
    new_order = _json_payload().get("chapters")
    if not isinstance(new_order, list):
        return jsonify({"error": "Kirim daftar bab dalam urutan baru."}), 400

    return _edit_chapters(mode, lambda chapters, config: reorder_chapters(chapters, [str(c) for c in new_order]))


@bp.route("/chapters/<mode>/adopt", methods=["POST"])
def adopt_chapter_title(mode: str):
    title = str(_json_payload().get("title") or "")

    def edit(chapters, config):
        updated = adopt_suggested_title(chapters, title)
        if config.mode.value == mode:
            wanted = title.strip().casefold()
            chosen = next(c for c in updated if c.strip().casefold() == wanted)
            config.selected_chapters = []
            config.select_chapter(chosen)
        return updated

    return _edit_chapters(mode, edit)


@bp.route("/generate", methods=["POST"])
def generate():
    payload = _json_payload()
    config = _current_configuration()
    if isinstance(payload.get("configuration"), dict):
        config = DocumentConfiguration.from_dict({**config.to_dict(), **payload["configuration"]})
        unknown = _unknown_chapters(config)
        if unknown:
            return _unknown_chapters_response(unknown)
        _remember(config)

    store = _store()
    chapter_list = store.load_chapter_list(config.mode)

    try:
        outcome = run_pipeline(
            config,
            chapter_list,
            progress=lambda chapter: current_app.logger.info("Membuat %s...", chapter),
        )
    except DocumentValidationError as exc:
        return jsonify({"error": str(exc)}), 400
    except GenerationError as exc:
        return jsonify({"error": str(exc), "label": exc.label}), 502
    except Exception:  # pragma: no cover
        current_app.logger.exception("Unexpected error while generating document")
        return jsonify({"error": "Terjadi kesalahan tidak diketahui."}), 500

    if isinstance(outcome, ChapterTitleSuggestions):
        return jsonify({"suggestions": outcome.titles})

    entry = store.add_history_entry(config.title, outcome, config)
    return jsonify({"content": outcome.to_dict(), "entry": entry.to_dict()})


@bp.route("/titles", methods=["POST"])
def generate_titles():
    payload = _json_payload()
    config = _current_configuration()
    try:
        titles = search_titles(
            payload.get("topic_description", config.topic_description),
            payload.get("major", config.major),
            payload.get("study_program", config.study_program),
            payload.get("document_kind", config.document_kind),
        )
    except SuggestionError as exc:
        return jsonify({"error": str(exc)}), 400
    except GenerationError as exc:
        return jsonify({"error": f"Gagal mencari judul: {exc}"}), 502
    return jsonify({"titles": titles})


@bp.route("/variables", methods=["POST"])
def generate_variables():
    config = _current_configuration()
    if not wants_variable_suggestion(config):
        return jsonify({"error": "Saran variabel butuh metode kuantitatif serta judul dan topik yang lebih lengkap."}), 400
    try:
        variables = suggest_variables(config.title, config.topic_description)
    except GenerationError as exc:
        current_app.logger.warning("Variable suggestion failed: %s", exc)
        return jsonify({"error": str(exc)}), 502

    config.variables = variables
    _remember(config)
    return jsonify({"variables": variables})


@bp.route("/history", methods=["GET"])
def list_history():
    return jsonify({"history": [entry.to_dict() for entry in _store().load_history()]})


@bp.route("/history", methods=["DELETE"])
def clear_history():
    _store().clear_history()
    return jsonify({"history": []})


@bp.route("/history/<entry_id>", methods=["PATCH"])
def update_history_entry(entry_id: str):
    payload = _json_payload()
    store = _store()
    entry = store.get_history_entry(entry_id)
    if entry is None:
        return jsonify({"error": "Riwayat tidak ditemukan."}), 404

    title = payload.get("title")
    if title is not None:
        if not str(title).strip():
            return jsonify({"error": "Judul tidak boleh kosong."}), 400
        entry = store.rename_history_entry(entry_id, str(title).strip())
    content = payload.get("content")
    if isinstance(content, dict):
        entry = store.replace_history_content(entry_id, GenerationResult.from_dict(content))

    return jsonify({"entry": entry.to_dict()})


@bp.route("/history/<entry_id>", methods=["DELETE"])
def delete_history_entry(entry_id: str):
    if not _store().delete_history_entry(entry_id):
        return jsonify({"error": "Riwayat tidak ditemukan."}), 404
    return jsonify({"deleted": entry_id})


def _download(title: str, text: str, export_format: str) -> Response:
    try:
        filename = safe_filename(title, export_format)
    except TextExportError as exc:
        return jsonify({"error": str(exc)}), 400
    mimetype = "text/markdown" if export_format == "md" else "text/plain"
    response = Response(render_export(text), mimetype=f"{mimetype}; charset=utf-8")
    response.headers.set("Content-Disposition", "attachment", filename=filename)
    return response


@bp.route("/history/<entry_id>/export", methods=["GET"])
def export_history_entry(entry_id: str):
    entry = _store().get_history_entry(entry_id)
    if entry is None:
        return jsonify({"error": "Riwayat tidak ditemukan."}), 404
    export_format = request.args.get("format", EXPORT_FORMATS[0])
    return _download(entry.title, entry.content.text, export_format)


@bp.route("/export", methods=["POST"])
def export_text():
    payload = _json_payload()
    return _download(
        str(payload.get("title") or ""),
        str(payload.get("text") or ""),
        str(payload.get("format") or EXPORT_FORMATS[0]),
    )
