"""
Field Validator
Checks a submitted values map against report field definitions

Out-of-range values are NOT validation errors. The normal range is advisory
metadata; use is_out_of_range() to flag abnormal results for display.
"""
import math
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, Iterable, List, Optional

from labreports.models.report_field import (
    FIELD_TYPE_DROPDOWN,
    FIELD_TYPE_NUMBER,
    TEXT_FIELD_TYPES,
)


@dataclass(frozen=True)
class FieldError:
    field_name: str
    message: str

    def to_dict(self):
        return {'fieldName': self.field_name, 'message': self.message}


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[FieldError] = dataclass_field(default_factory=list)


def _options_of(field) -> Optional[List[str]]:
    getter = getattr(field, 'get_dropdown_options', None)
    if getter is not None:
        return getter()
    return field.dropdown_options


def is_filled(value: Any) -> bool:
    """
    A value is filled unless it is None or an empty / whitespace-only string.
    0 and False count as filled.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    return True


def is_numeric(value: Any) -> bool:
    """True if value is a finite number or a string that parses to one"""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        try:
            return math.isfinite(float(value))
        except OverflowError:
            return False
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return False
        try:
            return math.isfinite(float(trimmed))
        except ValueError:
            return False
    return False


def is_out_of_range(field, value: Any) -> bool:
    """
    Abnormal-result indicator for numeric fields.

    False when the field has no complete range or the value is not numeric.
    """
    if field.normal_range_min is None or field.normal_range_max is None:
        return False
    if not is_numeric(value):
        return False
    number = float(value)
    return number < field.normal_range_min or number > field.normal_range_max


def validate_report_field(field, value: Any) -> Optional[FieldError]:
    """Validate one field value; returns the first violation or None"""
    label = field.field_label

    if not is_filled(value):
        if field.is_required:
            return FieldError(field.field_name, f'{label} is required')
        return None

    if field.field_type == FIELD_TYPE_NUMBER:
        if not is_numeric(value):
            return FieldError(field.field_name, f'{label} must be a valid number')

    elif field.field_type == FIELD_TYPE_DROPDOWN:
        options = _options_of(field) or []
        if value not in options:
            return FieldError(field.field_name, f'{label} must be one of: {", ".join(options)}')

    elif field.field_type in TEXT_FIELD_TYPES:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return FieldError(field.field_name, f'{label} must be text')

    return None


def validate_report_values(fields: Iterable, values: Dict[str, Any]) -> ValidationResult:
    """
    Validate all fields of a report in field-definition order.

    Every field is checked and every violation collected. Keys in values
    that match no field definition are ignored.
    """
    values = values or {}
    errors = []
    for field in fields:
        error = validate_report_field(field, values.get(field.field_name))
        if error is not None:
            errors.append(error)

    return ValidationResult(is_valid=not errors, errors=errors)


def errors_to_map(errors: Iterable[FieldError]) -> Dict[str, str]:
    """Field name -> message, for per-field error display"""
    return {error.field_name: error.message for error in errors}
