"""Editing operations for the user-curated chapter lists of books and novels."""

from __future__ import annotations

import re
from typing import List, Sequence

from ..constants import SUGGEST_CHAPTER_TITLES

_NUMBERED_CHAPTER = re.compile(r"^(?:Bab|Chapter)\s*(\d+)", re.IGNORECASE)


class ChapterListError(ValueError):
    """Raised when a chapter list edit would break the list's invariants."""


def _key(name: str) -> str:
    return name.strip().casefold()


def contains_chapter(chapters: Sequence[str], name: str) -> bool:
    key = _key(name)
    return any(_key(chapter) == key for chapter in chapters)


def next_chapter_placeholder(chapters: Sequence[str]) -> str:
    numbers = []
    for chapter in chapters:
        match = _NUMBERED_CHAPTER.match(chapter)
        if match:
            numbers.append(int(match.group(1)))
    return f"Bab {max(numbers, default=0) + 1}: "


def add_chapter(chapters: Sequence[str], name: str) -> List[str]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ChapterListError("Nama bab tidak boleh kosong.")
    if contains_chapter(chapters, cleaned):
        raise ChapterListError("Bab dengan nama tersebut sudah ada.")
    return [*chapters, cleaned]


def rename_chapter(chapters: Sequence[str], old_name: str, new_name: str) -> List[str]:
    if old_name == SUGGEST_CHAPTER_TITLES:
        raise ChapterListError(f"'{SUGGEST_CHAPTER_TITLES}' tidak dapat diubah.")
    if old_name not in chapters:
        raise ChapterListError(f"Bab \"{old_name}\" tidak ditemukan.")

    cleaned = (new_name or "").strip()
    if not cleaned:
        raise ChapterListError("Nama bab tidak boleh kosong.")
    if _key(cleaned) == _key(old_name):
        return list(chapters)
    if contains_chapter(chapters, cleaned):
        raise ChapterListError("Bab dengan nama tersebut sudah ada.")
    return [cleaned if chapter == old_name else chapter for chapter in chapters]


def delete_chapter(chapters: Sequence[str], name: str) -> List[str]:
    if name == SUGGEST_CHAPTER_TITLES:
        raise ChapterListError(f"'{SUGGEST_CHAPTER_TITLES}' tidak dapat dihapus.")
    if name not in chapters:
        raise ChapterListError(f"Bab \"{name}\" tidak ditemukan.")
    return [chapter for chapter in chapters if chapter != name]


def reorder_chapters(chapters: Sequence[str], new_order: Sequence[str]) -> List[str]:
    if len(new_order) != len(chapters) or set(new_order) != set(chapters):
        raise ChapterListError("Urutan baru harus berisi bab yang sama persis.")
    return list(new_order)


def adopt_suggested_title(chapters: Sequence[str], title: str) -> List[str]:
    """Append a suggested title unless a chapter by that name already exists."""

    cleaned = (title or "").strip()
    if not cleaned:
        raise ChapterListError("Judul bab tidak boleh kosong.")
    if contains_chapter(chapters, cleaned):
        return list(chapters)
    return [*chapters, cleaned]
