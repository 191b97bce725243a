"""Builds the instruction sent to the model for one chapter."""

from __future__ import annotations

from typing import List

from ..constants import GROUNDED_REFERENCE_SOURCES, QUANTITATIVE_METHOD, SUGGEST_CHAPTER_TITLES
from .document import DocumentConfiguration, DocumentMode

FIRST_CHAPTER_NOTE = "Ini adalah bab pertama, mulailah ceritanya."

CREATIVE_INSTRUCTIONS = (
    "**Fokus Cerita:** Lanjutkan narasi dari bab sebelumnya. Jika ini bab pertama, perkenalkan dunia, "
    "karakter utama, dan konflik awal sesuai sinopsis.",
    "**Pengembangan Plot:** Majukan alur cerita. Bangun ketegangan, hadirkan rintangan, atau ungkap "
    "informasi baru yang penting. Hindari cerita yang monoton.",
    "**Pengembangan Karakter:** Tunjukkan kepribadian karakter lewat tindakan, dialog, dan pikiran "
    "mereka. Kembangkan hubungan antarkarakter.",
    "**Dialog yang Hidup:** Tulis dialog yang terasa alami dan ikut memajukan plot atau mengungkap karakter.",
    "**Deskripsi yang Kaya:** Lukiskan latar dan suasana secara imersif tanpa memperlambat laju cerita.",
    "**Konsistensi:** Jaga konsistensi karakter, latar, dan aturan dunia yang sudah ditetapkan di "
    "bab-bab sebelumnya.",
    "**Bahasa & Gaya:** Gunakan bahasa {language} dan pertahankan gaya penulisan \"{style}\".",
    "**Target Panjang:** Tulis konten dengan panjang kira-kira setara {pages} halaman.",
    "**Output:** Tuliskan HANYA isi bab tersebut. Jangan sertakan ringkasan, komentar, atau judul bab. "
    "Mulai langsung dengan paragraf pertama dalam format narasi novel standar.",
)

ACADEMIC_INSTRUCTIONS = (
    "Tuliskan konten untuk bab \"{chapter}\" secara komprehensif dan terstruktur dengan baik.",
    "Pastikan isinya relevan dengan judul, topik, dan parameter yang diberikan.",
    "Gunakan format Markdown untuk heading (misalnya '# Judul', '## Sub-judul').",
    "Jika referensi digunakan, sertakan kutipan dalam teks sesuai gaya sitasi \"{citation_style}\".",
    "Hasil akhir harus langsung berupa isi bab, tanpa pengantar atau komentar tambahan dari Anda sebagai AI.",
    "Jika ada tabel, tulis dengan sintaks tabel Markdown yang rapi. Setiap tabel wajib memiliki judul "
    "(contoh: Tabel 4.1: Hasil Uji ...) dan header kolom yang jelas.",
)


def compose_prompt(config: DocumentConfiguration, chapter: str, preceding_context: str = "") -> str:
    if chapter == SUGGEST_CHAPTER_TITLES:
        return compose_title_suggestion_prompt(config)

    mode = config.mode
    if mode is DocumentMode.CREATIVE:
        return _compose_creative_prompt(config, chapter, preceding_context)
    if mode in (DocumentMode.ACADEMIC, DocumentMode.BOOK, DocumentMode.SERMON):
        return _compose_academic_prompt(config, chapter, preceding_context)
    raise ValueError(f"Unsupported document mode: {mode!r}")


def compose_title_suggestion_prompt(config: DocumentConfiguration) -> str:
    return (
        f"Berdasarkan konteks karya tulis ini (jenis: {config.document_kind}, judul: \"{config.title}\", "
        f"topik: \"{config.topic_description}\"), sarankan 5 judul bab yang menarik dan relevan. "
        "Format sebagai daftar bernomor."
    )


def use_grounding(config: DocumentConfiguration) -> bool:
    """Web citations are requested for search-backed references outside fiction."""

    return config.reference_source in GROUNDED_REFERENCE_SOURCES and not config.mode.is_creative


def _compose_creative_prompt(config: DocumentConfiguration, chapter: str, context: str) -> str:
    lines: List[str] = [
        f"Anda adalah seorang novelis ahli dengan gaya penulisan yang mirip dengan \"{config.writing_style}\". "
        f"Tugas Anda adalah menulis bab \"{chapter}\" untuk sebuah novel berjudul \"{config.title}\".",
        "",
        "**Premis & Sinopsis Utama Novel:**",
        config.synopsis or config.topic_description,
        "",
        "**Konteks dari Bab Sebelumnya (gunakan ini untuk menjaga kesinambungan cerita):**",
        context or FIRST_CHAPTER_NOTE,
        "",
        f"**Instruksi untuk Bab \"{chapter}\":**",
    ]
    values = {
        "language": config.output_language,
        "style": config.writing_style,
        "pages": config.page_count_for(chapter),
    }
    lines.extend(_numbered(CREATIVE_INSTRUCTIONS, values))
    return "\n".join(lines)


def _compose_academic_prompt(config: DocumentConfiguration, chapter: str, context: str) -> str:
    lines: List[str] = [
        "Anda adalah asisten penulis AI ahli. Tugas Anda adalah menghasilkan konten untuk bab "
        f"\"{chapter}\" dari sebuah karya berjenis \"{config.document_kind}\" berjudul \"{config.title}\".",
        "",
        "**Konteks Utama:**",
        f"- **Deskripsi Topik:** {config.topic_description}",
        f"- **Jurusan/Fakultas:** {config.major}",
        f"- **Program Studi:** {config.study_program}",
        f"- **Bahasa Output:** {config.output_language}",
        f"- **Gaya Penulisan:** Tulis dengan gaya seorang \"{config.writing_style}\"",
        f"- **Bentuk Penelitian:** {config.research_method}",
    ]
    if config.research_method == QUANTITATIVE_METHOD and config.variables:
        lines.append(f"- **Variabel Penelitian:** {config.variables}")
    if config.research_instruments:
        lines.append(f"- **Instrumen Penelitian yang Digunakan:** {', '.join(config.research_instruments)}")
    lines.extend(
        [
            f"- **Jumlah Referensi:** Sekitar {config.reference_count_for(chapter)} referensi",
            f"- **Gaya Sitasi:** {config.citation_style}",
            f"- **Jenis Kutipan:** {config.reference_type}",
        ]
    )
    if config.start_year or config.end_year:
        lines.append(
            f"- **Rentang Tahun Referensi:** {config.start_year or 'awal'} - {config.end_year or 'sekarang'}"
        )
    lines.append(f"- **Target Panjang Bab:** Sekitar {config.page_count_for(chapter)} halaman.")
    lines.append("")

    if context:
        lines.extend(["**Konteks dari Bab Sebelumnya (untuk menjaga konsistensi):**", context, ""])

    lines.append("**Instruksi:**")
    values = {"chapter": chapter, "citation_style": config.citation_style}
    lines.extend(_numbered(ACADEMIC_INSTRUCTIONS, values))
    return "\n".join(lines)


def _numbered(templates, values) -> List[str]:
    return [f"{index}. {template.format(**values)}" for index, template in enumerate(templates, start=1)]
