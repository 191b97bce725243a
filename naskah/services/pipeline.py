"""Sequential chapter generation with context carried between chapters."""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from flask import current_app, has_app_context

from ..constants import SUGGEST_CHAPTER_TITLES
from .document import DocumentConfiguration, DocumentMode, GenerationResult, Source
from .generation_client import GenerationClient, GenerationError
from .prompt_composer import compose_prompt, use_grounding
from .retry import DEFAULT_MAX_RETRIES, with_retry

CLIENT_CACHE_KEY = "_GENERATION_CLIENT_INSTANCE"

_ORDINAL_PATTERN = re.compile(r"^\d+\.\s*")


class DocumentValidationError(ValueError):
    """Raised when a configuration cannot be sent to the generator."""


@dataclass(frozen=True)
class ChapterTitleSuggestions:
    titles: List[str]


@dataclass(frozen=True)
class PipelineState:
    """Running output after each finished chapter."""

    text: str = ""
    sources: Tuple[Source, ...] = ()
    context: str = ""

    def advance(self, chapter: str, result: GenerationResult) -> "PipelineState":
        return PipelineState(
            text=f"{self.text}\n\n# {chapter}\n\n{result.text}",
            sources=self.sources + tuple(result.sources),
            context=(
                f"{self.context}\n\n--- AWAL DARI: {chapter} ---\n\n{result.text}"
                f"\n\n--- AKHIR DARI: {chapter} ---\n\n"
            ),
        )

    def to_result(self) -> GenerationResult:
        return GenerationResult(text=self.text.strip(), sources=list(self.sources))


PipelineOutcome = Union[GenerationResult, ChapterTitleSuggestions]


def run_pipeline(
    config: DocumentConfiguration,
    chapter_list: Optional[Sequence[str]] = None,
    *,
    client: Optional[Any] = None,
    sleep: Callable[[float], None] = time.sleep,
    progress: Optional[Callable[[str], None]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> PipelineOutcome:
    """Generate every selected chapter in display order.

    Parameters
    ----------
    config:
        The configuration snapshot to generate from.
    chapter_list:
        The user's ordered chapter list for book and creative documents.
        Fixed-list modes ignore it.
    client:
        Object exposing ``generate(prompt, use_grounding=...)``. Defaults to
        the application's configured client.
    progress:
        Called with the chapter name before each chapter starts.
    """

    validate_configuration(config)

    generator = client if client is not None else _require_generation_client()
    max_retries = _configured_max_retries()

    def call(chapter: str, prompt: str, grounded: bool) -> GenerationResult:
        return with_retry(
            lambda: generator.generate(prompt, use_grounding=grounded),
            chapter,
            max_retries,
            sleep=sleep,
            cancel_event=cancel_event,
        )

    if config.selected_chapters == [SUGGEST_CHAPTER_TITLES]:
        if progress:
            progress(SUGGEST_CHAPTER_TITLES)
        result = call(SUGGEST_CHAPTER_TITLES, compose_prompt(config, SUGGEST_CHAPTER_TITLES, ""), False)
        return ChapterTitleSuggestions(titles=parse_chapter_titles(result.text))

    chapters = ordered_chapters(config, chapter_list)
    unknown = [name for name in config.selected_chapters if name not in chapters]
    if unknown:
        raise DocumentValidationError(f"Bab tidak dikenal: {', '.join(unknown)}.")

    grounded = use_grounding(config)
    state = PipelineState()
    for chapter in chapters:
        if progress:
            progress(chapter)
        prompt = compose_prompt(config, chapter, state.context)
        state = state.advance(chapter, call(chapter, prompt, grounded))

    _log_info("Generated %d chapter(s) for '%s'", len(chapters), config.title)
    return state.to_result()


def validate_configuration(config: DocumentConfiguration) -> None:
    if not (config.title or "").strip():
        raise DocumentValidationError("Judul tidak boleh kosong.")
    if not config.selected_chapters:
        raise DocumentValidationError("Harap pilih setidaknya satu bab untuk dibuat.")
    if SUGGEST_CHAPTER_TITLES in config.selected_chapters and len(config.selected_chapters) > 1:
        raise DocumentValidationError(
            f"Opsi '{SUGGEST_CHAPTER_TITLES}' harus dipilih sendiri dan tidak dapat digabungkan dengan bab lain."
        )


def ordered_chapters(config: DocumentConfiguration, chapter_list: Optional[Sequence[str]] = None) -> List[str]:
    """Return the selected chapters in the document's display order."""

    mode = config.mode
    if mode.has_editable_chapters:
        canonical = list(chapter_list) if chapter_list is not None else mode.default_chapters()
    elif mode in (DocumentMode.ACADEMIC, DocumentMode.SERMON):
        canonical = mode.default_chapters()
    else:  # pragma: no cover - DocumentMode is closed
        raise ValueError(f"Unsupported document mode: {mode!r}")

    selected = set(config.selected_chapters)
    return [chapter for chapter in canonical if chapter in selected]


def parse_chapter_titles(raw_text: str) -> List[str]:
    titles = (_ORDINAL_PATTERN.sub("", line).strip() for line in (raw_text or "").splitlines())
    return [title for title in titles if title]


def _configured_max_retries() -> int:
    if not has_app_context():
        return DEFAULT_MAX_RETRIES
    return int(current_app.config.get("GENERATION_MAX_RETRIES", DEFAULT_MAX_RETRIES))


def _log_info(message: str, *args: Any) -> None:
    if has_app_context():
        current_app.logger.info(message, *args)


def _require_generation_client() -> Any:
    client = _get_generation_client()
    if client is None:
        raise GenerationError("OPENAI_API_KEY belum dikonfigurasi; AI tidak dapat dihubungi.")
    return client


def _get_generation_client() -> Optional[Any]:  # pragma: no cover - integration point
    app = current_app
    if CLIENT_CACHE_KEY in app.config:
        return app.config[CLIENT_CACHE_KEY]

    api_key = app.config.get("OPENAI_API_KEY")
    if not api_key:
        app.logger.info("OPENAI_API_KEY not configured; generation is unavailable.")
        return None

    try:
        client = GenerationClient(
            api_key,
            model=app.config.get("GENERATION_MODEL", "gpt-4.1"),
            base_url=app.config.get("OPENAI_BASE_URL"),
        )
    except Exception as exc:
        app.logger.warning("Failed to initialise generation client: %s", exc)
        client = None
    app.config[CLIENT_CACHE_KEY] = client
    return client
