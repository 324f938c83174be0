"""
Report Value Model
EAV row: one (instance, field, value) triple
"""
from labreports.extensions import db
from .base import TimestampMixin, generate_uuid


class ReportValue(db.Model, TimestampMixin):
    """Exactly one of value_text / value_number is populated, chosen by the field type"""
    __tablename__ = 'report_values'
    __table_args__ = (
        db.UniqueConstraint('report_instance_id', 'report_field_id', name='unique_instance_field'),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    report_instance_id = db.Column(
        db.String(36),
        db.ForeignKey('report_instances.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    report_field_id = db.Column(db.String(36), db.ForeignKey('report_fields.id'), nullable=False)

    value_text = db.Column(db.Text)  # text, dropdown, textarea
    value_number = db.Column(db.Float)  # number

    # Relationships
    report_field = db.relationship('ReportField', lazy=True)

    def __repr__(self):
        value = self.value_number if self.value_number is not None else self.value_text
        return f"<ReportValue {self.report_field_id}={value!r}>"
