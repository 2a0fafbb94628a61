"""
Custom exceptions module.

Configuration faults raise at build time; mapping failures raise fail-fast.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ConfigurationError,

    # Schema
    SchemaDefinitionError,
    DuplicateAttributeError,

    # Mapping configuration
    InvalidMappingError,
    UnknownFunctionError,

    # Mapping (fail-fast)
    MappingError,
    FieldValidationFailedError,
    RequiredFieldMissingError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ConfigurationError",

    # Schema
    "SchemaDefinitionError",
    "DuplicateAttributeError",

    # Mapping configuration
    "InvalidMappingError",
    "UnknownFunctionError",

    # Mapping (fail-fast)
    "MappingError",
    "FieldValidationFailedError",
    "RequiredFieldMissingError",
]
