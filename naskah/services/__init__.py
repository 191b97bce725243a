"""Service layer for configuring and generating documents."""

from __future__ import annotations

from .document import (  # noqa: F401
    DocumentConfiguration,
    DocumentMode,
    GenerationResult,
    Source,
)
from .generation_client import GenerationClient, GenerationError, TransientGenerationError  # noqa: F401
from .pipeline import (  # noqa: F401
    ChapterTitleSuggestions,
    DocumentValidationError,
    run_pipeline,
)
from .retry import GenerationCancelled, with_retry  # noqa: F401
from .session_store import HistoryEntry, PersistenceError, SessionStore  # noqa: F401

__all__ = [
    "ChapterTitleSuggestions",
    "DocumentConfiguration",
    "DocumentMode",
    "DocumentValidationError",
    "GenerationCancelled",
    "GenerationClient",
    "GenerationError",
    "GenerationResult",
    "HistoryEntry",
    "PersistenceError",
    "SessionStore",
    "Source",
    "TransientGenerationError",
    "run_pipeline",
    "with_retry",
]
