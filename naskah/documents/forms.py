from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import InputRequired, Length, NumberRange, Optional, Regexp

from ..constants import (
    ACADEMIC_WRITING_STYLES,
    CITATION_STYLES,
    MAJORS,
    NOVEL_WRITING_STYLES,
    OUTPUT_LANGUAGES,
    REFERENCE_SOURCES,
    REFERENCE_TYPES,
    RESEARCH_INSTRUMENTS,
    RESEARCH_METHODS,
    RESEARCH_TYPES,
)

_YEAR = Regexp(r"^\d{4}$", message="Tahun harus terdiri dari 4 angka.")


class DocumentConfigurationForm(FlaskForm):
    document_kind = SelectField("Jenis karya", choices=RESEARCH_TYPES, validators=[InputRequired()])
    title = StringField("Judul", validators=[Optional(), Length(max=300)])
    topic_description = TextAreaField("Deskripsi topik", validators=[Optional(), Length(max=4000)])
    synopsis = TextAreaField("Sinopsis", validators=[Optional(), Length(max=8000)])
    major = SelectField("Jurusan/Fakultas", choices=MAJORS, validators=[Optional()])
    study_program = StringField("Program studi", validators=[Optional(), Length(max=150)])
    research_method = SelectField("Bentuk penelitian", choices=RESEARCH_METHODS, validators=[Optional()])
    variables = StringField("Variabel penelitian", validators=[Optional(), Length(max=500)])
    page_count = IntegerField("Jumlah halaman", validators=[Optional(), NumberRange(min=1, max=100)])
    reference_count = IntegerField("Jumlah referensi", validators=[Optional(), NumberRange(min=0, max=200)])
    start_year = StringField("Tahun awal", validators=[Optional(), _YEAR])
    end_year = StringField("Tahun akhir", validators=[Optional(), _YEAR])
    citation_style = SelectField("Gaya sitasi", choices=CITATION_STYLES, validators=[Optional()])
    reference_source = SelectField("Sumber referensi", choices=REFERENCE_SOURCES, validators=[Optional()])
    reference_type = SelectField("Jenis kutipan", choices=REFERENCE_TYPES, validators=[Optional()])
    research_instruments = SelectMultipleField(
        "Instrumen penelitian",
        choices=[name for name, _ in RESEARCH_INSTRUMENTS],
        validators=[Optional()],
    )
    writing_style = SelectField(
        "Gaya penulisan",
        choices=ACADEMIC_WRITING_STYLES + NOVEL_WRITING_STYLES,
        validators=[Optional()],
    )
    output_language = SelectField("Bahasa output", choices=OUTPUT_LANGUAGES, validators=[Optional()])
