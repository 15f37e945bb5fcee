"""Validation result models."""

from enum import Enum

from pydantic import BaseModel, Field

from virusquery.exceptions import InputValidationError


class ValidationLevel(str, Enum):
    """Severity of a validation result, from most to least severe."""

    CRITICAL = "CRITICAL"
    SEVERE_WARNING = "SEVERE_WARNING"
    WARNING = "WARNING"
    NOTE = "NOTE"
    OK = "OK"


class ValidationResult(BaseModel):
    """A single validation message reported alongside analysis data."""

    level: ValidationLevel = Field(..., description="Severity of this result")
    message: str = Field(..., description="Human-readable validation message")

    @classmethod
    def from_error(
        cls, error: InputValidationError, level: ValidationLevel = ValidationLevel.WARNING
    ) -> "ValidationResult":
        """Convert a recoverable input error into a reportable result."""
        return cls(level=level, message=error.message)

    def to_report(self) -> str:
        return f"[{self.level.value}] {self.message}"
