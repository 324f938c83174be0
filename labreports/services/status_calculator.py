"""
Report Status Calculator
Derives a report's completion status from its values and required fields
"""
from typing import Any, Dict, Iterable

from labreports.models.report_instance import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
)
from .field_validator import is_filled


def _has_value(value: Any) -> bool:
    return value is not None and value != ''


def calculate_status(values: Dict[str, Any], required_field_names: Iterable[str]) -> str:
    """
    Calculate report status from scratch.

    - 'pending': values has no keys at all
    - 'completed': every required field maps to a non-None, non-'' value
    - 'in-progress': anything else

    An empty required set is satisfied by any non-empty values map, so a
    report type without required fields is 'completed' as soon as anything
    is submitted.
    """
    if not values:
        return STATUS_PENDING

    if all(_has_value(values.get(name)) for name in required_field_names):
        return STATUS_COMPLETED

    return STATUS_IN_PROGRESS


def completion_summary(fields: Iterable, values: Dict[str, Any]) -> Dict[str, int]:
    """
    Progress indicator: how many required fields are filled

    Uses is_filled(), so a whitespace-only value counts as empty here while
    calculate_status() treats it as present. The two can disagree for such
    values; status is the stored truth.
    """
    required = [field for field in fields if field.is_required]
    total_required = len(required)

    if total_required == 0:
        return {'filled_count': 0, 'total_required': 0, 'percent_complete': 100}

    filled_count = sum(1 for field in required if is_filled(values.get(field.field_name)))
    return {
        'filled_count': filled_count,
        'total_required': total_required,
        'percent_complete': round(filled_count * 100 / total_required)
    }
