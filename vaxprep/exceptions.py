"""
Custom exceptions for the vaccine panel pipeline.

Every fatal condition derives from PipelineError so the CLI can abort a
run with a single handler.
"""

from typing import Iterable


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    pass


class SchemaError(PipelineError):
    """
    Raised when the source table does not match the expected schema.

    Covers:
    - Required columns missing (renamed or removed upstream)
    - Values that cannot be cast to the expected type
    """

    def __init__(self, message: str, columns: Iterable[str] = ()):
        self.columns = list(columns)
        super().__init__(message)


class DataIntegrityError(PipelineError):
    """Raised when (country, date) pairs are not unique."""

    def __init__(self, message: str, duplicates: int = 0):
        self.duplicates = duplicates
        super().__init__(message)


class DownloadError(PipelineError):
    """Raised when the source file cannot be retrieved."""

    pass


class SourceNotFoundError(PipelineError, FileNotFoundError):
    """Raised when an input file of the run does not exist."""

    pass
