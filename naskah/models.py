from __future__ import annotations

from datetime import datetime

from .extensions import db


class StoredValue(db.Model):
    """One JSON blob of saved session state, addressed by key."""

    __tablename__ = "stored_values"

    key = db.Column(db.String(120), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr for debugging
        return f"<StoredValue {self.key} ({len(self.value or '')} chars)>"
