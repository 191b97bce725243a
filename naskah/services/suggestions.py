"""Small one-shot helpers: research title ideas and quantitative variables."""

from __future__ import annotations

import time
from typing import Any, Callable, List, Optional

from flask import current_app

from ..constants import QUANTITATIVE_METHOD
from .document import DocumentConfiguration
from .pipeline import _configured_max_retries, _require_generation_client
from .retry import with_retry

TITLE_SEARCH_LABEL = "pencarian judul"
VARIABLE_SUGGESTION_LABEL = "saran variabel"


class SuggestionError(ValueError):
    """Raised when a suggestion request is missing the input it needs."""


def search_titles(
    topic_description: str,
    major: str,
    study_program: str,
    document_kind: str,
    *,
    client: Optional[Any] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[str]:
    topic = (topic_description or "").strip()
    if not topic:
        raise SuggestionError("Harap isi deskripsi topik terlebih dahulu.")

    prompt = (
        f"Berikan 5 saran judul untuk jenis karya \"{document_kind}\" dengan deskripsi topik berikut: "
        f"\"{topic}\". Judul harus relevan untuk jurusan \"{major}\" dan program studi \"{study_program}\". "
        "Judul harus dalam Bahasa Indonesia. Kembalikan hanya daftar judul, dipisahkan oleh baris baru, "
        "tanpa penomoran atau embel-embel lainnya."
    )
    result = _generate(prompt, TITLE_SEARCH_LABEL, client=client, sleep=sleep)
    return parse_title_lines(result.text)


def suggest_variables(
    title: str,
    topic_description: str,
    *,
    client: Optional[Any] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    prompt = (
        f"Berdasarkan judul penelitian \"{title}\" dan deskripsi topik \"{topic_description}\", identifikasi "
        "dan sarankan variabel independen (X) dan variabel dependen (Y). Format hasilnya secara ringkas dalam "
        "satu baris, contohnya: \"X = Motivasi Belajar, Y = Prestasi Akademik\". Hanya kembalikan teks "
        "variabelnya saja, tanpa penjelasan tambahan."
    )
    result = _generate(prompt, VARIABLE_SUGGESTION_LABEL, client=client, sleep=sleep)
    return result.text.strip()


def wants_variable_suggestion(config: DocumentConfiguration) -> bool:
    """Variables are only suggested once the title and topic say enough."""

    return (
        config.research_method == QUANTITATIVE_METHOD
        and len(config.title.strip()) > 5
        and len(config.topic_description.strip()) > 10
    )


def parse_title_lines(raw_text: str) -> List[str]:
    titles = []
    for line in (raw_text or "").splitlines():
        cleaned = line[2:] if line.startswith("- ") else line
        cleaned = cleaned.strip()
        if cleaned:
            titles.append(cleaned)
    return titles


def _generate(prompt: str, label: str, *, client: Optional[Any], sleep: Callable[[float], None]):
    generator = client if client is not None else _require_generation_client()
    model = current_app.config.get("SUGGESTION_MODEL") or None
    return with_retry(
        lambda: generator.generate(prompt, model=model),
        label,
        _configured_max_retries(),
        sleep=sleep,
    )
