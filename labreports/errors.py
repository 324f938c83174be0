"""
Report engine exceptions
Each carries the HTTP status the route layer answers with
"""


class ReportEngineError(Exception):
    """Base class for errors raised by the report engine"""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {
            'success': False,
            'error': self.message
        }


class MalformedRequestError(ReportEngineError):
    """Invalid request body"""
    status_code = 400


class NotFoundError(ReportEngineError):
    """Referenced record not found"""
    status_code = 404


class ReportValidationError(ReportEngineError):
    """Report values failed validation"""
    status_code = 400

    def __init__(self, errors, values=None):
        super().__init__('Validation failed')
        self.errors = list(errors)
        self.values = values

    def to_dict(self):
        payload = super().to_dict()
        payload['errors'] = [error.to_dict() for error in self.errors]
        if self.values is not None:
            payload['values'] = self.values
        return payload


class StorageError(ReportEngineError):
    """Failed to save report. Please try again."""
    status_code = 500
