"""
Field Definition Store
Read-only access to report types and their ordered field schemas
"""
import logging
from typing import List, Optional, Tuple

from labreports.errors import NotFoundError
from labreports.models import ReportType, ReportField

logger = logging.getLogger(__name__)


def get_report_type(report_type_id: str) -> Optional[ReportType]:
    """Get report type by ID"""
    return ReportType.query.get(report_type_id)


def get_report_type_by_code(code: str, active_only: bool = True) -> Optional[ReportType]:
    """Get report type by its unique code (e.g. 'CBC')"""
    query = ReportType.query.filter_by(code=code)
    if active_only:
        query = query.filter_by(is_active=True)
    return query.first()


def get_fields_for_report_type(report_type_id: str) -> List[ReportField]:
    """
    Get field definitions for a report type, ordered by field_order

    Returns an empty list when the type exists but defines no fields.

    Raises:
        NotFoundError: the report type itself does not exist
    """
    if get_report_type(report_type_id) is None:
        raise NotFoundError(f'No report type found with ID: {report_type_id}')

    return (
        ReportField.query
        .filter_by(report_type_id=report_type_id)
        .order_by(ReportField.field_order.asc())
        .all()
    )


def get_report_definition(code: str) -> Tuple[ReportType, List[ReportField]]:
    """
    Get an active report type and its ordered fields by code

    Raises:
        NotFoundError: no active report type has this code
    """
    report_type = get_report_type_by_code(code)
    if report_type is None:
        raise NotFoundError(f"Report type with code '{code}' not found or is not active")

    fields = get_fields_for_report_type(report_type.id)
    logger.debug("Loaded %d fields for report type %s", len(fields), code)
    return report_type, fields
