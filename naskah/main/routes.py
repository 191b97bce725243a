from flask import render_template

from ..constants import (
    ACADEMIC_WRITING_STYLES,
    NOVEL_WRITING_STYLES,
    RESEARCH_INSTRUMENTS,
    STUDY_PROGRAMS,
    SUGGEST_CHAPTER_TITLES,
)
from ..documents.forms import DocumentConfigurationForm
from ..documents.routes import _current_configuration, _store
from . import bp


@bp.route("/")
def index():
    config = _current_configuration()
    form = DocumentConfigurationForm(formdata=None, data=config.to_dict())
    return render_template(
        "main/index.html",
        form=form,
        configuration=config,
        mode=config.mode,
        chapters=_store().load_chapter_list(config.mode),
        history=_store().load_history(),
        study_programs=STUDY_PROGRAMS,
        instruments=RESEARCH_INSTRUMENTS,
        academic_styles=ACADEMIC_WRITING_STYLES,
        novel_styles=NOVEL_WRITING_STYLES,
        suggest_sentinel=SUGGEST_CHAPTER_TITLES,
    )
