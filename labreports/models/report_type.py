"""
Report Type Model
Named schema category of lab report (e.g. BLOOD_GROUP, CBC)
"""
from labreports.extensions import db
from .base import TimestampMixin, generate_uuid, isoformat


class ReportType(db.Model, TimestampMixin):
    """
    Report type definition

    A report type owns an ordered set of ReportField rows. Adding a new kind
    of lab test means inserting a type and its fields, no code changes.
    """
    __tablename__ = 'report_types'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)  # e.g., "CBC"
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Relationships
    fields = db.relationship(
        'ReportField',
        backref='report_type',
        lazy=True,
        order_by='ReportField.field_order',
        cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f"<ReportType {self.code} - {self.name}>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'description': self.description,
            'isActive': self.is_active,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at)
        }
