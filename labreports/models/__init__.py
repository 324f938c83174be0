from .test_assignment import TestAssignment
from .report_type import ReportType
from .report_field import ReportField
from .report_instance import ReportInstance
from .report_value import ReportValue

__all__ = ["TestAssignment", "ReportType", "ReportField", "ReportInstance", "ReportValue"]
