"""Custom exceptions for the fiscal tax core."""


class FiscalError(Exception):
    """Base exception for fiscal computation errors."""


class BracketTableError(FiscalError):
    """Raised when a bracket schedule is not a contiguous, increasing partition."""

    def __init__(self, message: str):
        super().__init__(f"Invalid bracket table: {message}")


class DataValidationError(FiscalError):
    """Raised when input data fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")
