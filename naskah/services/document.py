"""Document configuration shared by the prompt composer, pipeline and store."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..constants import (
    BOOK_CHAPTERS,
    CHAPTERS,
    MAJORS,
    NOVEL_CHAPTERS,
    STUDY_PROGRAMS,
    SUGGEST_CHAPTER_TITLES,
)


class DocumentMode(str, Enum):
    ACADEMIC = "academic"
    BOOK = "book"
    CREATIVE = "creative"
    SERMON = "sermon"

    @classmethod
    def from_kind(cls, document_kind: Optional[str]) -> "DocumentMode":
        kind = (document_kind or "").strip()
        if kind in ("Novel", "Cerita"):
            return cls.CREATIVE
        if kind in ("Buku", "Buku Pelajaran"):
            return cls.BOOK
        if kind == "Khutbah":
            return cls.SERMON
        return cls.ACADEMIC

    @property
    def is_creative(self) -> bool:
        return self is DocumentMode.CREATIVE

    @property
    def has_editable_chapters(self) -> bool:
        """Book and creative documents let the user curate their chapter list."""

        return self in (DocumentMode.BOOK, DocumentMode.CREATIVE)

    def default_chapters(self) -> List[str]:
        if self is DocumentMode.CREATIVE:
            return list(NOVEL_CHAPTERS)
        if self is DocumentMode.BOOK:
            return list(BOOK_CHAPTERS)
        return list(CHAPTERS)


@dataclass
class Source:
    uri: str
    title: str
    kind: str = "web"

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {self.kind: {"uri": self.uri, "title": self.title}}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["Source"]:
        for kind in ("web", "maps"):
            entry = payload.get(kind) if isinstance(payload, Mapping) else None
            if isinstance(entry, Mapping) and entry.get("uri"):
                uri = str(entry["uri"])
                return cls(uri=uri, title=str(entry.get("title") or uri), kind=kind)
        return None


@dataclass
class GenerationResult:
    text: str
    sources: List[Source] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "sources": [source.to_dict() for source in self.sources]}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GenerationResult":
        if not isinstance(payload, Mapping):
            raise ValueError("Generation result must be a JSON object.")
        raw_sources = payload.get("sources")
        if not isinstance(raw_sources, (list, tuple)):
            raw_sources = []
        sources = [Source.from_dict(item) for item in raw_sources if isinstance(item, Mapping)]
        return cls(
            text=str(payload.get("text") or ""),
            sources=[source for source in sources if source is not None],
        )


@dataclass
class DocumentConfiguration:
    """Every parameter the user picks for one generation run."""

    document_kind: str = "Skripsi"
    title: str = ""
    topic_description: str = ""
    synopsis: str = ""
    major: str = ""
    study_program: str = ""
    research_method: str = "Kualitatif"
    variables: str = ""
    reference_count: int = 10
    page_count: int = 5
    start_year: str = ""
    end_year: str = ""
    selected_chapters: List[str] = field(default_factory=list)
    chapter_page_counts: Dict[str, int] = field(default_factory=dict)
    chapter_reference_counts: Dict[str, int] = field(default_factory=dict)
    citation_style: str = "APA"
    reference_source: str = "Google Scholar"
    reference_type: str = "In-text citation"
    research_instruments: List[str] = field(default_factory=list)
    writing_style: str = "Akademisi"
    output_language: str = "Indonesia"

    @classmethod
    def defaults(cls) -> "DocumentConfiguration":
        major = MAJORS[0]
        first_chapter = CHAPTERS[0]
        return cls(
            major=major,
            study_program=STUDY_PROGRAMS[major][0],
            selected_chapters=[first_chapter],
            chapter_page_counts={first_chapter: 5},
            chapter_reference_counts={first_chapter: 10},
        )

    @property
    def mode(self) -> DocumentMode:
        return DocumentMode.from_kind(self.document_kind)

    def page_count_for(self, chapter: str) -> int:
        return self.chapter_page_counts.get(chapter) or self.page_count

    def reference_count_for(self, chapter: str) -> int:
        return self.chapter_reference_counts.get(chapter) or self.reference_count

    def select_chapter(self, chapter: str) -> None:
        if chapter not in self.selected_chapters:
            self.selected_chapters.append(chapter)
        self.chapter_page_counts.setdefault(chapter, self.page_count)
        self.chapter_reference_counts.setdefault(chapter, self.reference_count)

    def deselect_chapter(self, chapter: str) -> None:
        self.selected_chapters = [name for name in self.selected_chapters if name != chapter]

    def select_all(self, chapters: Sequence[str]) -> None:
        self.selected_chapters = []
        for chapter in chapters:
            if chapter != SUGGEST_CHAPTER_TITLES:
                self.select_chapter(chapter)

    def with_major(self, major: str) -> "DocumentConfiguration":
        programs = STUDY_PROGRAMS.get(major) or [""]
        return replace(self, major=major, study_program=programs[0])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DocumentConfiguration":
        if not isinstance(payload, Mapping):
            raise ValueError("Document configuration must be a JSON object.")

        base = cls.defaults()
        values: Dict[str, Any] = {}
        for spec in fields(cls):
            if spec.name not in payload or payload[spec.name] is None:
                continue
            values[spec.name] = _coerce_field(spec.name, payload[spec.name], getattr(base, spec.name))
        return replace(base, **values)


_LIST_FIELDS = {"selected_chapters", "research_instruments"}
_COUNT_MAP_FIELDS = {"chapter_page_counts", "chapter_reference_counts"}


def _coerce_field(name: str, value: Any, default: Any) -> Any:
    if name in _LIST_FIELDS:
        if not isinstance(value, (list, tuple)):
            return default
        return [str(item) for item in value]
    if name in _COUNT_MAP_FIELDS:
        if not isinstance(value, Mapping):
            return default
        counts: Dict[str, int] = {}
        for key, raw in value.items():
            try:
                counts[str(key)] = int(raw)
            except (OverflowError, TypeError, ValueError):
                continue
        return counts
    if isinstance(default, int):
        try:
            return int(value)
        except (OverflowError, TypeError, ValueError):
            return default
    return str(value)
