"""
Rule → predicate compiler and batch validation of mapped records.

check_attribute_validity turns declarative attribute rules into a plain
value -> bool predicate. The mapper uses it fail-fast; validate_data uses
it collect-all, reporting every problem of a mapped record in one pass.
"""

import re
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import structlog

from models.attribute import CategoryAttribute, CategoryAttributeSpec, ValidationRules
from models.validation import DataValidationResult

logger = structlog.get_logger(__name__)

Predicate = Callable[[Any], bool]
AttributeInput = Union[CategoryAttributeSpec, CategoryAttribute, Mapping[str, Any]]


def is_empty_value(value: Any) -> bool:
    """Missing for validation purposes: None or empty string."""
    return value is None or value == ""


def _length(value: Any) -> Optional[int]:
    if isinstance(value, str):
        return len(value)
    return None


def check_attribute_validity(
    rules: Union[Mapping[str, Any], ValidationRules, None]
) -> Optional[Predicate]:
    """
    Compile validation rules into a predicate.

    Supports required, min_length, max_length and pattern (camelCase keys
    accepted). Length and pattern checks apply to strings only.
    Empty values only fail the required check.

    Args:
        rules: Rule bag, or None

    Returns:
        Predicate, or None when there are no rules at all
    """
    if rules is None:
        return None

    if isinstance(rules, ValidationRules):
        parsed = rules
        required = False
    else:
        parsed = ValidationRules.model_validate(rules)
        required = bool(rules.get("required"))

    min_length = parsed.min_length
    max_length = parsed.max_length
    pattern = re.compile(parsed.pattern) if parsed.pattern else None

    def predicate(value: Any) -> bool:
        if is_empty_value(value):
            return not required

        length = _length(value)
        if length is not None:
            if min_length and length < min_length:
                return False
            if max_length and length > max_length:
                return False

        if pattern is not None and isinstance(value, str) and not pattern.search(value):
            return False

        return True

    return predicate


def _as_spec(attribute: AttributeInput) -> CategoryAttributeSpec:
    if isinstance(attribute, CategoryAttributeSpec):
        return attribute
    if isinstance(attribute, CategoryAttribute):
        return CategoryAttributeSpec.from_category_attribute(attribute)
    return CategoryAttributeSpec.model_validate(attribute)


def validate_data(
    category_attributes: Iterable[AttributeInput],
    mapped_data: Mapping[str, Any]
) -> DataValidationResult:
    """
    Check a mapped record against its category's attributes.

    Collect-all: every missing required field and every rule failure is
    reported; nothing is raised for data problems.

    Args:
        category_attributes: Flattened specs, join rows or plain dicts
        mapped_data: Output of the attribute mapper

    Returns:
        DataValidationResult with one message per problem
    """
    specs = [_as_spec(a) for a in category_attributes]
    by_name = {spec.name: spec for spec in specs}
    errors: list[str] = []

    for spec in specs:
        if spec.is_required and is_empty_value(mapped_data.get(spec.name)):
            errors.append(f"Required field '{spec.name}' is missing")

    for field_name, value in mapped_data.items():
        spec = by_name.get(field_name)
        if spec is None:
            continue
        predicate = check_attribute_validity(spec.validation_rules)
        if predicate is not None and not predicate(value):
            errors.append(f"Field '{field_name}' failed validation")

    result = DataValidationResult(errors=errors)

    logger.info(
        "mapped_data_validated",
        attributes=len(specs),
        fields=len(mapped_data),
        error_count=len(errors)
    )

    return result
