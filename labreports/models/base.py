"""
Shared model helpers
"""
import uuid
from datetime import datetime

from labreports.extensions import db


def generate_uuid():
    """Primary key default: UUID4 as a 36-char string"""
    return str(uuid.uuid4())


class TimestampMixin:
    """Adds created_at / updated_at columns maintained by SQLAlchemy"""
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


def isoformat(value):
    return value.isoformat() if value else None
