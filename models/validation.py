"""
Validation result schemas.

ValidationResult is what the forms UI renders; it dumps camelCase
(isValid) with by_alias=True. DataValidationResult is the plain string
report of the batch integrity pass over mapped data.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, computed_field

from models.base import CamelSchema


class ErrorCode(str, Enum):
    """Codes carried by validation errors."""
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    REQUIRED_FIELD = "REQUIRED_FIELD"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_URL = "INVALID_URL"
    INVALID_NUMBER = "INVALID_NUMBER"
    MIN_VALUE = "MIN_VALUE"
    MAX_VALUE = "MAX_VALUE"
    INVALID_STEP = "INVALID_STEP"
    INVALID_BOOLEAN = "INVALID_BOOLEAN"
    INVALID_DATE = "INVALID_DATE"
    MIN_DATE = "MIN_DATE"
    MAX_DATE = "MAX_DATE"
    INVALID_OPTION = "INVALID_OPTION"
    INVALID_ARRAY = "INVALID_ARRAY"
    MIN_SELECTIONS = "MIN_SELECTIONS"
    MAX_SELECTIONS = "MAX_SELECTIONS"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    CUSTOM_VALIDATION = "CUSTOM_VALIDATION"


class WarningCode(str, Enum):
    """Codes carried by validation warnings."""
    APPROACHING_LIMIT = "APPROACHING_LIMIT"


class ValidationErrorDetail(CamelSchema):
    """A single validation error attributed to a field."""
    field: str
    message: str
    code: str
    severity: str = "error"


class ValidationWarningDetail(CamelSchema):
    """A non-blocking finding, optionally with a suggested fix."""
    field: str
    message: str
    code: str
    suggestion: Optional[str] = None


class ValidationResult(CamelSchema):
    """
    Outcome of validating a field or a form.

    is_valid is derived from errors: warnings never invalidate.
    """

    errors: list[ValidationErrorDetail] = Field(default_factory=list)
    warnings: list[ValidationWarningDetail] = Field(default_factory=list)

    @computed_field(alias="isValid")
    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_codes(self) -> list[str]:
        return [e.code for e in self.errors]

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def single_error(cls, field: str, message: str, code: str) -> "ValidationResult":
        return cls(errors=[ValidationErrorDetail(field=field, message=message, code=code)])

    def add_error(self, field: str, message: str, code: str) -> None:
        self.errors.append(ValidationErrorDetail(field=field, message=message, code=code))

    def add_warning(
        self,
        field: str,
        message: str,
        code: str,
        suggestion: Optional[str] = None
    ) -> None:
        self.warnings.append(
            ValidationWarningDetail(field=field, message=message, code=code, suggestion=suggestion)
        )

    def extend(self, other: "ValidationResult") -> "ValidationResult":
        """Append another result's findings (collect-all)."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_response(self) -> dict:
        """camelCase payload for the forms UI."""
        return self.model_dump(by_alias=True)


class DataValidationResult(CamelSchema):
    """Collect-all report over a mapped record."""
    errors: list[str] = Field(default_factory=list)

    @computed_field(alias="isValid")
    @property
    def is_valid(self) -> bool:
        return not self.errors
