"""Catalog values offered by the document form."""

from __future__ import annotations

from typing import Dict, List

SUGGEST_CHAPTER_TITLES = "Sarankan Judul Bab"

RESEARCH_TYPES: List[str] = [
    "Skripsi",
    "Tesis",
    "Disertasi",
    "Makalah",
    "Buku",
    "Buku Pelajaran",
    "Khutbah",
    "Karya Ilmiah Lain",
    "Novel",
    "Cerita",
]

CHAPTERS: List[str] = [
    "Bab 1: Pendahuluan",
    "Bab 2: Kajian Pustaka",
    "Bab 3: Metodologi Penelitian",
    "Bab 4: Hasil dan Pembahasan",
    "Bab 5: Kesimpulan dan Saran",
    "Outline",
    "Abstrak",
    "Daftar Isi",
    "Daftar Pustaka",
]

BOOK_CHAPTERS: List[str] = [
    "Outline",
    "Daftar Isi",
    "Kata Pengantar",
    SUGGEST_CHAPTER_TITLES,
    *[f"Bab {number}" for number in range(1, 11)],
    "Daftar Pustaka",
]

NOVEL_CHAPTERS: List[str] = [
    "Sinopsis",
    SUGGEST_CHAPTER_TITLES,
    "Prolog",
    *[f"Bab {number}" for number in range(1, 16)],
    "Biografi Penulis",
    "Epilog",
]

RESEARCH_METHODS: List[str] = ["Kualitatif", "Kuantitatif", "Metode Campuran"]
QUANTITATIVE_METHOD = "Kuantitatif"

CITATION_STYLES: List[str] = [
    "APA",
    "MLA",
    "Chicago",
    "IEEE",
    "Harvard",
    "Turabian",
    "Vancouver",
    "CSE",
    "AMA",
    "ASA",
]

REFERENCE_SOURCES: List[str] = ["Google Scholar", "Google Search", "Tanpa Pencarian"]
GROUNDED_REFERENCE_SOURCES = frozenset({"Google Search", "Google Scholar"})

REFERENCE_TYPES: List[str] = ["In-text citation", "Footnote"]

ACADEMIC_WRITING_STYLES: List[str] = [
    "Akademisi",
    "Dosen",
    "Profesional",
    "Mahasiswa",
    "Guru",
    "Siswa",
]

NOVEL_WRITING_STYLES: List[str] = [
    "Asma Nadia",
    "Tere Liye",
    "Andrea Hirata",
    "Eka Kurniawan",
    "Haidar Musyafa",
    "Pramoedya Ananta Toer",
    "Ahmad Fuadi",
    "Ilana Tan",
    "Dewi Lestari (Dee)",
    "Raditya Dika",
    "Nh. Dini",
    "Winna Efendi",
    "Ika Natassa",
    "Valerie Patkar",
    "Leila S. Chudori",
    "Sapardi Djoko Damono",
    "Pidi Baiq",
    "Ayu Utami",
    "Habiburrahman El Siradji",
    "Gaya Bahasa Betawi",
    "Gaya Bahasa Fiksi",
    "Gaya Bahasa Indonesia-Sunda",
    "Gaya Bahasa Indonesia-Jawa",
]

OUTPUT_LANGUAGES: List[str] = [
    "Indonesia",
    "Inggris",
    "Arab",
    "Indonesia + Arab (Al-Qur'an/Hadits)",
    "Indonesia + Inggris",
    "Sunda",
    "Jawa",
    "Padang (Minang)",
]

STUDY_PROGRAMS: Dict[str, List[str]] = {
    "Sains dan Teknologi": [
        "Teknik Informatika",
        "Sistem Informasi",
        "Teknik Sipil",
        "Teknik Mesin",
        "Teknik Elektro",
        "Arsitektur",
        "Matematika",
        "Fisika",
        "Kimia",
        "Biologi",
        "Statistika",
    ],
    "Ilmu Sosial dan Humaniora": [
        "Ilmu Komunikasi",
        "Hubungan Internasional",
        "Ilmu Politik",
        "Sosiologi",
        "Antropologi",
        "Ilmu Hukum",
        "Psikologi",
        "Sastra Indonesia",
        "Sastra Inggris",
        "Sejarah",
    ],
    "Ekonomi dan Bisnis": [
        "Manajemen",
        "Akuntansi",
        "Ilmu Ekonomi",
        "Bisnis Digital",
        "Kewirausahaan",
        "Perbankan Syariah",
    ],
    "Kesehatan": [
        "Pendidikan Dokter",
        "Ilmu Keperawatan",
        "Farmasi",
        "Kesehatan Masyarakat",
        "Gizi",
    ],
    "Pendidikan": [
        "Pendidikan Guru Sekolah Dasar (PGSD)",
        "Pendidikan Anak Usia Dini (PAUD)",
        "Pendidikan Matematika",
        "Pendidikan Bahasa Inggris",
        "Pendidikan Jasmani",
        "Manajemen Pendidikan",
    ],
    "Seni dan Desain": [
        "Desain Komunikasi Visual (DKV)",
        "Seni Murni",
        "Desain Interior",
        "Musik",
        "Teater",
    ],
    "Agama": [
        "Ilmu Al-Qur'an dan Tafsir",
        "Hukum Keluarga Islam (Ahwal Syakhshiyyah)",
        "Komunikasi dan Penyiaran Islam",
        "Ekonomi Syariah",
        "Pendidikan Agama Islam",
    ],
}

MAJORS: List[str] = list(STUDY_PROGRAMS)

# (name, description) pairs shown next to the instrument checkboxes.
RESEARCH_INSTRUMENTS = [
    ("Wawancara", "Pengumpulan data melalui percakapan terarah dengan responden."),
    ("Observasi", "Pendataan berdasarkan pengamatan langsung terhadap objek penelitian."),
    ("Dokumentasi", "Analisis dokumen, arsip, dan sumber tertulis terkait penelitian."),
    ("Kuesioner/Angket", "Formulir berisi pertanyaan untuk diisi responden secara mandiri."),
    ("Tes Tertulis", "Instrumen pengukuran kemampuan atau pengetahuan responden."),
    ("Skala Sikap", "Penilaian sikap atau pendapat menggunakan skala (Likert, Guttman, dsb)."),
    ("Checklist (Daftar Periksa)", "Daftar item penilaian yang ditandai sesuai pengamatan."),
    ("Rubrik Penilaian", "Formulir khusus untuk menilai karya atau performa berdasarkan indikator."),
    ("Sheet Catatan Lapangan", "Buku atau lampiran untuk mencatat temuan selama penelitian."),
]
