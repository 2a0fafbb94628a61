"""
Engine services.

Each service handles one concern: schema compilation, validation,
mapping, conflict resolution or suggestions.
"""

from services.schema_compiler import compile_schema, compile_rule, parse_definition
from services.field_validator import validate_field, check_field_type
from services.cross_field_validator import (
    CrossFieldRule,
    CrossFieldValidator,
    validate_date_range,
)
from services.form_model import build_form_model
from services.predicates import check_attribute_validity, validate_data, is_empty_value
from services.mapping_registry import MappingRegistry, get_default_registry
from services.attribute_mapper import apply_mapping
from services.mapping_compiler import (
    CORE_MAPPINGS,
    MappingCompiler,
    build_table,
    validate_table,
    get_mapping_compiler,
)
from services.conflict_resolver import resolve
from services.suggestion_engine import get_suggestions, FIELD_ALIASES

__all__ = [
    # Schema
    "compile_schema",
    "compile_rule",
    "parse_definition",

    # Validation
    "validate_field",
    "check_field_type",
    "CrossFieldRule",
    "CrossFieldValidator",
    "validate_date_range",
    "build_form_model",
    "check_attribute_validity",
    "validate_data",
    "is_empty_value",

    # Mapping
    "MappingRegistry",
    "get_default_registry",
    "apply_mapping",
    "CORE_MAPPINGS",
    "MappingCompiler",
    "build_table",
    "validate_table",
    "get_mapping_compiler",
    "resolve",
    "get_suggestions",
    "FIELD_ALIASES",
]
