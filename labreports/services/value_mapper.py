"""
EAV Value Mapper
Translates between a flat {field_name: value} map and report_values rows

Number fields are stored in value_number, every other field type in
value_text. Values are expected to have passed the field validator.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from labreports.models.report_field import FIELD_TYPE_DROPDOWN, FIELD_TYPE_NUMBER
from .field_validator import is_filled, is_numeric


@dataclass(frozen=True)
class FieldDefinition:
    """Detached, immutable copy of a ReportField row"""
    id: str
    field_name: str
    field_label: str
    field_type: str
    field_order: int
    is_required: bool
    unit: Optional[str] = None
    normal_range_min: Optional[float] = None
    normal_range_max: Optional[float] = None
    dropdown_options: Optional[tuple] = None
    default_value: Optional[str] = None

    @classmethod
    def from_model(cls, field):
        options = field.get_dropdown_options()
        return cls(
            id=field.id,
            field_name=field.field_name,
            field_label=field.field_label,
            field_type=field.field_type,
            field_order=field.field_order,
            is_required=bool(field.is_required),
            unit=field.unit,
            normal_range_min=field.normal_range_min,
            normal_range_max=field.normal_range_max,
            dropdown_options=tuple(options) if options is not None else None,
            default_value=field.default_value,
        )


def snapshot_fields(fields: Iterable) -> List[FieldDefinition]:
    return [FieldDefinition.from_model(field) for field in fields]


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class DropdownValue:
    value: str


TypedValue = Union[NumberValue, TextValue, DropdownValue]


@dataclass(frozen=True)
class ValueRow:
    report_field_id: str
    value_text: Optional[str] = None
    value_number: Optional[float] = None


def to_typed_value(field_type: str, value: Any) -> TypedValue:
    if field_type == FIELD_TYPE_NUMBER:
        return NumberValue(float(value))
    if field_type == FIELD_TYPE_DROPDOWN:
        return DropdownValue(str(value))
    return TextValue(str(value))


def to_typed_values(fields: Iterable, values: Dict[str, Any]) -> Dict[str, TypedValue]:
    """
    Convert a validated values map to typed values keyed by field name.
    Empty values and keys without a field definition are dropped.
    """
    by_name = {field.field_name: field for field in fields}
    typed = {}
    for field_name, value in (values or {}).items():
        field = by_name.get(field_name)
        if field is None or not is_filled(value):
            continue
        if field.field_type == FIELD_TYPE_NUMBER and not is_numeric(value):
            continue
        typed[field_name] = to_typed_value(field.field_type, value)
    return typed


def values_to_rows(fields: Iterable, values: Dict[str, Any]) -> List[ValueRow]:
    """Forward pass: one row per non-empty value with a known field"""
    by_name = {field.field_name: field for field in fields}
    rows = []
    for field_name, typed in to_typed_values(by_name.values(), values).items():
        field = by_name[field_name]
        if not field.id:
            continue
        if isinstance(typed, NumberValue):
            rows.append(ValueRow(report_field_id=field.id, value_number=typed.value))
        else:
            rows.append(ValueRow(report_field_id=field.id, value_text=typed.value))
    return rows


def rows_to_values(fields: Iterable, rows: Iterable) -> Dict[str, Any]:
    """Reverse pass: rebuild the flat map from stored rows"""
    by_id = {field.id: field for field in fields}
    values = {}
    for row in rows:
        field = by_id.get(row.report_field_id)
        if field is None:
            continue
        if field.field_type == FIELD_TYPE_NUMBER and row.value_number is not None:
            values[field.field_name] = row.value_number
        elif row.value_text is not None:
            values[field.field_name] = row.value_text
        elif row.value_number is not None:
            values[field.field_name] = row.value_number
    return values
