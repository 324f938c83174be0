"""
Report Field Model
One schema-defined input slot within a report type
"""
from datetime import datetime
import json

from labreports.extensions import db
from .base import generate_uuid, isoformat

FIELD_TYPE_NUMBER = 'number'
FIELD_TYPE_TEXT = 'text'
FIELD_TYPE_DROPDOWN = 'dropdown'
FIELD_TYPE_TEXTAREA = 'textarea'  # rendered as multi-line text, stored like text

FIELD_TYPES = (FIELD_TYPE_NUMBER, FIELD_TYPE_TEXT, FIELD_TYPE_DROPDOWN, FIELD_TYPE_TEXTAREA)
TEXT_FIELD_TYPES = (FIELD_TYPE_TEXT, FIELD_TYPE_TEXTAREA)


class ReportField(db.Model):
    """
    Field definition for a report type

    Fields define:
    - Key used in submitted values (field_name, unique within the type)
    - Display label and order
    - Field type (number, text, dropdown)
    - Whether the field must be filled for the report to be completed
    - Advisory normal range for numeric results
    """
    __tablename__ = 'report_fields'
    __table_args__ = (
        db.UniqueConstraint('report_type_id', 'field_name', name='unique_report_type_field'),
        db.Index('idx_report_fields_field_order', 'report_type_id', 'field_order'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    report_type_id = db.Column(db.String(36), db.ForeignKey('report_types.id', ondelete='CASCADE'), nullable=False, index=True)

    field_name = db.Column(db.String(100), nullable=False)  # e.g., "hb"
    field_label = db.Column(db.String(255), nullable=False)  # e.g., "Hb (Haemoglobin)"
    field_type = db.Column(db.String(50), nullable=False)  # 'number', 'text', 'dropdown', 'textarea'
    field_order = db.Column(db.Integer, nullable=False)
    is_required = db.Column(db.Boolean, default=False, nullable=False)

    # Numeric metadata (advisory only, never a validation error)
    unit = db.Column(db.String(50))  # e.g., "gm/dl"
    normal_range_min = db.Column(db.Float)
    normal_range_max = db.Column(db.Float)
    normal_range_text = db.Column(db.String(255))  # e.g., "13-17"

    dropdown_options = db.Column(db.Text)  # JSON array of option strings
    default_value = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def get_dropdown_options(self):
        """Parse and return dropdown options JSON"""
        try:
            return json.loads(self.dropdown_options) if self.dropdown_options else None
        except (json.JSONDecodeError, TypeError):
            return None

    def set_dropdown_options(self, options):
        """Set dropdown options from list"""
        self.dropdown_options = json.dumps(list(options), ensure_ascii=False) if options is not None else None

    def __repr__(self):
        return f"<ReportField {self.field_name} ({self.field_type})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'reportTypeId': self.report_type_id,
            'fieldName': self.field_name,
            'fieldLabel': self.field_label,
            'fieldType': self.field_type,
            'fieldOrder': self.field_order,
            'isRequired': self.is_required,
            'unit': self.unit,
            'normalRangeMin': self.normal_range_min,
            'normalRangeMax': self.normal_range_max,
            'normalRangeText': self.normal_range_text,
            'dropdownOptions': self.get_dropdown_options(),
            'defaultValue': self.default_value,
            'createdAt': isoformat(self.created_at)
        }
