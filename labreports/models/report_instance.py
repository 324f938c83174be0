"""
Report Instance Model
The single filled report for one test assignment
"""
from labreports.extensions import db
from .base import TimestampMixin, generate_uuid, isoformat

STATUS_PENDING = 'pending'
STATUS_IN_PROGRESS = 'in-progress'
STATUS_COMPLETED = 'completed'

REPORT_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED)


class ReportInstance(db.Model, TimestampMixin):
    """
    Report instance - created lazily on the first save for a test assignment

    The unique constraint on test_assignment_id is what keeps two racing
    first saves from producing two instances.
    """
    __tablename__ = 'report_instances'
    __table_args__ = (
        db.UniqueConstraint('test_assignment_id', name='unique_test_assignment'),
        db.CheckConstraint(
            "status IN ('pending', 'in-progress', 'completed')",
            name='ck_report_instances_status'
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    test_assignment_id = db.Column(
        db.String(36),
        db.ForeignKey('test_assignments.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    report_type_id = db.Column(db.String(36), db.ForeignKey('report_types.id'), nullable=False)

    # pending (no data), in-progress (partial), completed (all required fields filled)
    status = db.Column(db.String(50), default=STATUS_PENDING, nullable=False, index=True)

    created_by = db.Column(db.String(64), nullable=True)  # JWT identity of the saving user
    completed_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    report_type = db.relationship('ReportType', lazy=True)
    value_rows = db.relationship(
        'ReportValue',
        backref='report_instance',
        lazy=True,
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    def __repr__(self):
        return f"<ReportInstance {self.id} - Assignment: {self.test_assignment_id} ({self.status})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'testAssignmentId': self.test_assignment_id,
            'reportTypeId': self.report_type_id,
            'status': self.status,
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'completedAt': isoformat(self.completed_at)
        }
