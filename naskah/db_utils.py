"""Schema bootstrap for the saved-state table."""
from __future__ import annotations

import logging

from sqlalchemy import inspect

from .extensions import db

LOGGER = logging.getLogger(__name__)


def ensure_database_schema() -> bool:
    """Create the ``stored_values`` table when the database is new.

    Runs on every application start and returns ``True`` when the table had
    to be created. Schema errors propagate so a half-configured app never
    starts serving.
    """

    from .models import StoredValue

    if StoredValue.__tablename__ in inspect(db.engine).get_table_names():
        return False

    StoredValue.__table__.create(bind=db.engine)
    LOGGER.info("Created table '%s'", StoredValue.__tablename__)
    return True
