# Custom exceptions for the Report Generator
from fastapi import HTTPException, status
from typing import Optional


class ReportGeneratorException(Exception):
    """Base exception for the Report Generator."""
    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DecodeError(ReportGeneratorException):
    """Raised when an uploaded file cannot be turned into records."""
    pass


class UnsupportedFormatError(DecodeError):
    """Raised when the file extension is not a known tabular format."""
    pass


class ParseFailureError(DecodeError):
    """Raised when the file content is malformed for its format."""
    pass


class FileTooLargeError(DecodeError):
    """Raised when a file exceeds the configured upload size."""
    pass


class EmptyInputError(ReportGeneratorException):
    """Raised when a file yields zero usable records."""
    pass


class ComputationError(ReportGeneratorException):
    """Raised when an aggregation produces an impossible value. Indicates a bug."""
    pass


class NoFilesProvidedError(ReportGeneratorException):
    """Raised when a batch request carries no files at all."""
    pass


class TooManyFilesError(ReportGeneratorException):
    """Raised when a batch request exceeds the per-request file limit."""
    pass


class InvalidReportTypeError(ReportGeneratorException):
    """Raised when the preferred report type is not a known domain."""
    pass


# HTTP Exception helpers
def bad_request(detail: str = "Bad request") -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
