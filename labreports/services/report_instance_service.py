"""
Report Instance Service
Create-or-update (upsert) of report instances and their EAV values

A save validates the submitted values, recomputes the status from scratch,
then writes the instance and fully replaces its value rows in a single
transaction. Concurrent saves for the same test assignment are
last-write-wins.
"""
import logging
from dataclasses import dataclass, field as dataclass_field
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from labreports.errors import NotFoundError, ReportValidationError, StorageError
from labreports.extensions import db
from labreports.models import ReportInstance, ReportValue, TestAssignment
from labreports.models.report_instance import STATUS_COMPLETED
from .field_store import get_fields_for_report_type, get_report_type
from .field_validator import is_out_of_range, validate_report_values
from .status_calculator import calculate_status, completion_summary
from .value_mapper import ValueRow, rows_to_values, snapshot_fields, values_to_rows

logger = logging.getLogger(__name__)

OPERATION_CREATED = 'created'
OPERATION_UPDATED = 'updated'

# One retry covers the lost first-insert race; the retry sees the winner's row
MAX_SAVE_ATTEMPTS = 2


@dataclass
class SaveResult:
    instance: ReportInstance
    operation: str

    def to_dict(self):
        return {
            'reportInstance': self.instance.to_dict(),
            'status': self.operation
        }


@dataclass
class ReportData:
    instance: Optional[ReportInstance] = None
    values: Dict[str, Any] = dataclass_field(default_factory=dict)
    completion: Optional[Dict[str, int]] = None
    out_of_range: List[str] = dataclass_field(default_factory=list)

    def to_dict(self):
        return {
            'reportInstance': self.instance.to_dict() if self.instance else None,
            'values': self.values,
            'completion': self.completion,
            'outOfRange': self.out_of_range
        }


def get_test_assignment(test_assignment_id: str) -> Optional[TestAssignment]:
    """Get test assignment by ID"""
    return TestAssignment.query.get(test_assignment_id)


def find_instance_by_assignment(test_assignment_id: str) -> Optional[ReportInstance]:
    """Get the report instance of a test assignment, if one was saved"""
    return ReportInstance.query.filter_by(test_assignment_id=test_assignment_id).first()


def insert_instance(
    test_assignment_id: str,
    report_type_id: str,
    status: str,
    created_by: Optional[str] = None,
    now: Optional[datetime] = None
) -> ReportInstance:
    """Add a new report instance and flush so the unique constraint is checked"""
    now = now or datetime.utcnow()
    instance = ReportInstance(
        test_assignment_id=test_assignment_id,
        report_type_id=report_type_id,
        status=status,
        created_by=created_by,
        created_at=now,
        updated_at=now,
        completed_at=now if status == STATUS_COMPLETED else None
    )
    db.session.add(instance)
    db.session.flush()
    return instance


def update_instance(instance: ReportInstance, patch: Dict[str, Any]) -> ReportInstance:
    """Apply a column patch to an existing instance"""
    for key, value in patch.items():
        setattr(instance, key, value)
    db.session.flush()
    return instance


def status_patch(status: str, report_type_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    completed_at is set iff the report is completed. The instance takes the
    report type of the save, since its value rows are fully replaced by rows
    of that type.
    """
    now = now or datetime.utcnow()
    return {
        'report_type_id': report_type_id,
        'status': status,
        'updated_at': now,
        'completed_at': now if status == STATUS_COMPLETED else None
    }


def replace_values(instance_id: str, rows: List[ValueRow]) -> None:
    """
    Replace the full value set of an instance: delete every existing row,
    insert the new ones. Runs inside the caller's transaction.
    """
    ReportValue.query.filter_by(report_instance_id=instance_id).delete(synchronize_session=False)
    for row in rows:
        db.session.add(ReportValue(
            report_instance_id=instance_id,
            report_field_id=row.report_field_id,
            value_text=row.value_text,
            value_number=row.value_number
        ))
    db.session.flush()


def save_report(
    test_assignment_id: str,
    report_type_id: str,
    values: Optional[Dict[str, Any]],
    created_by: Optional[str] = None
) -> SaveResult:
    """
    Create or update the report instance of a test assignment

    Args:
        test_assignment_id: Test assignment the report belongs to
        report_type_id: Report type whose fields define the values
        values: Flat {field_name: value} map as submitted
        created_by: Identity of the user saving (stored on create only)

    Returns:
        SaveResult: persisted instance and 'created' / 'updated'

    Raises:
        NotFoundError: test assignment or report type missing
        ReportValidationError: at least one field rule violated (nothing written)
        StorageError: database failure (transaction rolled back)
    """
    values = values or {}

    if get_test_assignment(test_assignment_id) is None:
        raise NotFoundError(f'No test assignment found with ID: {test_assignment_id}')

    report_type = get_report_type(report_type_id)
    if report_type is None:
        raise NotFoundError(f'No report type found with ID: {report_type_id}')
    if not report_type.is_active and current_app.config.get('ENFORCE_ACTIVE_REPORT_TYPES'):
        raise NotFoundError(f'Report type {report_type.code} is not active')

    fields = snapshot_fields(get_fields_for_report_type(report_type_id))
    if not fields:
        raise NotFoundError(f'Report type {report_type_id} has no field definitions')

    result = validate_report_values(fields, values)
    if not result.is_valid:
        logger.info(
            "Report validation failed for assignment %s: %d error(s)",
            test_assignment_id, len(result.errors)
        )
        raise ReportValidationError(result.errors, values=values)

    required_field_names = [field.field_name for field in fields if field.is_required]
    status = calculate_status(values, required_field_names)
    rows = values_to_rows(fields, values)

    for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
        try:
            instance, operation = _write_instance(
                test_assignment_id, report_type_id, status, rows, created_by
            )
            db.session.commit()
            break
        except IntegrityError as e:
            db.session.rollback()
            if attempt < MAX_SAVE_ATTEMPTS:
                logger.warning(
                    "Concurrent first save for assignment %s, retrying as update: %s",
                    test_assignment_id, e
                )
                continue
            logger.error(f"Error saving report for assignment {test_assignment_id}: {e}", exc_info=True)
            raise StorageError() from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error saving report for assignment {test_assignment_id}: {e}", exc_info=True)
            raise StorageError() from e

    instance_id = instance.id
    db.session.expire_all()
    instance = ReportInstance.query.get(instance_id)

    logger.info(
        "Report instance %s %s (assignment %s, status %s, %d value(s))",
        instance.id, operation, test_assignment_id, instance.status, len(rows)
    )
    return SaveResult(instance=instance, operation=operation)


def _write_instance(test_assignment_id, report_type_id, status, rows, created_by):
    """Instance upsert plus value replacement; caller commits or rolls back"""
    now = datetime.utcnow()
    instance = find_instance_by_assignment(test_assignment_id)

    if instance is not None:
        update_instance(instance, status_patch(status, report_type_id, now))
        operation = OPERATION_UPDATED
    else:
        instance = insert_instance(test_assignment_id, report_type_id, status, created_by, now)
        operation = OPERATION_CREATED

    replace_values(instance.id, rows)
    return instance, operation


def get_report_data(test_assignment_id: str) -> ReportData:
    """
    Load the saved report of a test assignment as a flat values map

    Each value row is resolved against its own field definition, so rows
    are never dropped for belonging to another report type. Completion and
    out-of-range flags use the fields of the instance's report type.

    Returns an empty ReportData when nothing has been saved yet.

    Raises:
        NotFoundError: test assignment missing
    """
    if get_test_assignment(test_assignment_id) is None:
        raise NotFoundError(f'No test assignment found with ID: {test_assignment_id}')

    instance = find_instance_by_assignment(test_assignment_id)
    if instance is None:
        return ReportData()

    rows = ReportValue.query.filter_by(report_instance_id=instance.id).all()
    row_fields = snapshot_fields({row.report_field.id: row.report_field for row in rows}.values())
    values = rows_to_values(row_fields, rows)

    fields = snapshot_fields(get_fields_for_report_type(instance.report_type_id))
    out_of_range = [
        field.field_name for field in fields
        if field.field_name in values and is_out_of_range(field, values[field.field_name])
    ]
    return ReportData(
        instance=instance,
        values=values,
        completion=completion_summary(fields, values),
        out_of_range=out_of_range
    )
