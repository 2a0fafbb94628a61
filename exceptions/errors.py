"""
Custom exception classes for the engine.

Every exception carries the offending field name so the UI can attribute it.
Data problems found by the collect-all validators are reported in results,
not raised; only configuration faults and fail-fast mapping raise.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all engine errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "REQUIRED_FIELD_MISSING")
        message: Human-readable message
        status_code: HTTP status code the host should answer with
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    @property
    def field(self) -> Optional[str]:
        """Field the error is attributed to, if any."""
        return self.details.get("field")

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConfigurationError(AppError):
    """
    Malformed engine configuration (500).

    Raised while building schemas and mapping tables, never swallowed.
    """

    def __init__(
        self,
        field: str,
        message: str,
        code: str = "CONFIGURATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=500,
            details={"field": field, **(details or {})}
        )


# ===================
# SCHEMA ERRORS
# ===================

class SchemaDefinitionError(ConfigurationError):
    """An attribute definition cannot be compiled."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            field=field,
            message=f"Invalid attribute definition '{field}': {reason}",
            code="INVALID_ATTRIBUTE_DEFINITION",
            details={"reason": reason}
        )


class DuplicateAttributeError(SchemaDefinitionError):
    """Two definitions share the same name."""

    def __init__(self, field: str):
        super().__init__(field=field, reason="duplicate attribute name")
        self.code = "DUPLICATE_ATTRIBUTE_NAME"


# ===================
# MAPPING ERRORS
# ===================

class InvalidMappingError(ConfigurationError):
    """A mapping descriptor is malformed."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            field=field,
            message=f"Invalid mapping for {field}: {reason}",
            code="INVALID_MAPPING",
            details={"reason": reason}
        )


class UnknownFunctionError(ConfigurationError):
    """A descriptor names a transformation/validation that is not registered."""

    def __init__(self, field: str, kind: str, name: str):
        super().__init__(
            field=field,
            message=f"Invalid {kind} function for {field}: '{name}' is not registered",
            code=f"UNKNOWN_{kind.upper()}",
            details={"kind": kind, "name": name}
        )


class MappingError(ValidationError):
    """
    Base for fail-fast mapping failures (422).

    The whole mapping is aborted; no partial record is returned.
    """

    def __init__(
        self,
        field: str,
        message: str,
        code: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            message=message,
            code=code,
            details={"field": field, **(details or {})}
        )


class FieldValidationFailedError(MappingError):
    """A mapped value failed its descriptor's validation."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            field=field,
            message=f"Validation failed for {field}: {value!r}",
            code="MAPPING_VALIDATION_FAILED",
            details={"value": value}
        )
        self.value = value


class RequiredFieldMissingError(MappingError):
    """A required field has no external value and no default."""

    def __init__(self, field: str, external_attribute: Optional[str] = None):
        super().__init__(
            field=field,
            message=f"Required field {field} is missing",
            code="REQUIRED_FIELD_MISSING",
            details={"external_attribute": external_attribute}
        )
