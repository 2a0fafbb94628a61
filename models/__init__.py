"""
Pydantic models for attribute definitions, compiled rules, mappings and results.
"""

from models.base import (
    BaseSchema,
    CamelSchema,
)
from models.attribute import (
    NAME_PATTERN,
    DataType,
    AttributeOption,
    ValidationRules,
    AttributeDefinition,
    CategoryAttribute,
    CategoryAttributeSpec,
)
from models.rules import (
    TextRule,
    NumberRule,
    BooleanRule,
    DateRule,
    SelectRule,
    MultiSelectRule,
    FieldRule,
    CompiledField,
    CompiledSchema,
)
from models.mapping import (
    MappingType,
    MappingDescriptor,
    MappingTable,
)
from models.validation import (
    ErrorCode,
    WarningCode,
    ValidationErrorDetail,
    ValidationWarningDetail,
    ValidationResult,
    DataValidationResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "CamelSchema",

    # Attributes
    "NAME_PATTERN",
    "DataType",
    "AttributeOption",
    "ValidationRules",
    "AttributeDefinition",
    "CategoryAttribute",
    "CategoryAttributeSpec",

    # Compiled rules
    "TextRule",
    "NumberRule",
    "BooleanRule",
    "DateRule",
    "SelectRule",
    "MultiSelectRule",
    "FieldRule",
    "CompiledField",
    "CompiledSchema",

    # Mapping
    "MappingType",
    "MappingDescriptor",
    "MappingTable",

    # Validation results
    "ErrorCode",
    "WarningCode",
    "ValidationErrorDetail",
    "ValidationWarningDetail",
    "ValidationResult",
    "DataValidationResult",
]
