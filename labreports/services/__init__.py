from .field_store import (
    get_report_type,
    get_report_type_by_code,
    get_fields_for_report_type,
    get_report_definition,
)

from .field_validator import (
    FieldError,
    ValidationResult,
    validate_report_values,
    validate_report_field,
    is_out_of_range,
    errors_to_map,
)

from .status_calculator import calculate_status, completion_summary

from .report_instance_service import (
    SaveResult,
    ReportData,
    save_report,
    get_report_data,
)

__all__ = [
    # Field definitions
    "get_report_type",
    "get_report_type_by_code",
    "get_fields_for_report_type",
    "get_report_definition",
    # Validation
    "FieldError",
    "ValidationResult",
    "validate_report_values",
    "validate_report_field",
    "is_out_of_range",
    "errors_to_map",
    # Status
    "calculate_status",
    "completion_summary",
    # Report instances
    "SaveResult",
    "ReportData",
    "save_report",
    "get_report_data",
]
