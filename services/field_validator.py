"""
Single-field validation against a compiled schema.

Collect-all within a field: every type-specific problem is reported. The
lookup, required and empty checks short-circuit before any type check runs.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

import structlog
from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from config import get_settings
from models.attribute import DataType
from models.rules import CompiledField, CompiledSchema
from models.validation import ErrorCode, ValidationResult, WarningCode
from services.predicates import is_empty_value

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_URL_ADAPTER = TypeAdapter(AnyUrl)


# ===================
# VALUE HELPERS
# ===================

def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_valid_url(value: str) -> bool:
    """Absolute URL with a scheme, as accepted by pydantic's AnyUrl."""
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date from a date, datetime or ISO 8601 string.

    Returns None when the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def _format_number(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def _plural(n: int) -> str:
    return "s" if n > 1 else ""


# ===================
# TYPE CHECKS
# ===================

def _check_text(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    rule = field.rule
    text = value if isinstance(value, str) else str(value)
    length = len(text)

    if rule.min_length and length < rule.min_length:
        result.add_error(
            field.name,
            f"Must be at least {rule.min_length} characters",
            ErrorCode.MIN_LENGTH.value
        )

    if rule.max_length and length > rule.max_length:
        result.add_error(
            field.name,
            f"Must be no more than {rule.max_length} characters",
            ErrorCode.MAX_LENGTH.value
        )

    if rule.max_length and length >= rule.max_length * limit_ratio:
        result.add_warning(
            field.name,
            f"Approaching character limit ({length}/{rule.max_length})",
            WarningCode.APPROACHING_LIMIT.value,
            suggestion="Consider shortening your text"
        )

    if rule.pattern and not re.search(rule.pattern, text):
        result.add_error(
            field.name,
            rule.pattern_message or f"{field.display_label} format is invalid",
            ErrorCode.INVALID_FORMAT.value
        )

    if field.data_type == DataType.EMAIL and not is_valid_email(text):
        result.add_error(field.name, "Please enter a valid email address", ErrorCode.INVALID_EMAIL.value)

    if field.data_type == DataType.URL and not is_valid_url(text):
        result.add_error(field.name, "Please enter a valid URL", ErrorCode.INVALID_URL.value)


def _check_number(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    rule = field.rule
    number: Optional[float] = None
    if not isinstance(value, bool):
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None

    if number is None or math.isnan(number):
        result.add_error(field.name, "Must be a valid number", ErrorCode.INVALID_NUMBER.value)
        return

    if rule.min is not None and number < rule.min:
        result.add_error(
            field.name,
            f"Must be at least {_format_number(rule.min)}",
            ErrorCode.MIN_VALUE.value
        )

    if rule.max is not None and number > rule.max:
        result.add_error(
            field.name,
            f"Must be no more than {_format_number(rule.max)}",
            ErrorCode.MAX_VALUE.value
        )

    if rule.step:
        try:
            off_step = Decimal(str(number)) % Decimal(str(rule.step)) != 0
        except InvalidOperation:
            off_step = True
        if off_step:
            result.add_error(
                field.name,
                f"{field.display_label} must be in increments of {_format_number(rule.step)}",
                ErrorCode.INVALID_STEP.value
            )


def _check_boolean(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    if not isinstance(value, bool):
        result.add_error(field.name, "Must be true or false", ErrorCode.INVALID_BOOLEAN.value)


def _check_date(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    rule = field.rule
    parsed = parse_date(value)

    if parsed is None:
        result.add_error(
            field.name,
            f"{field.display_label} must be a valid date",
            ErrorCode.INVALID_DATE.value
        )
        return

    if rule.min_date and parsed < rule.min_date:
        result.add_error(
            field.name,
            f"{field.display_label} cannot be before {rule.min_date.isoformat()}",
            ErrorCode.MIN_DATE.value
        )

    if rule.max_date and parsed > rule.max_date:
        result.add_error(
            field.name,
            f"{field.display_label} cannot be after {rule.max_date.isoformat()}",
            ErrorCode.MAX_DATE.value
        )


def _check_select(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    allowed = field.rule.allowed_values
    if allowed and value not in allowed:
        result.add_error(
            field.name,
            f"Please select a valid {field.display_label}",
            ErrorCode.INVALID_OPTION.value
        )


def _check_multi_select(field: CompiledField, value: Any, result: ValidationResult, limit_ratio: float) -> None:
    rule = field.rule

    if not isinstance(value, (list, tuple)):
        result.add_error(field.name, "Must be a list of selections", ErrorCode.INVALID_ARRAY.value)
        return

    if rule.min_selections and len(value) < rule.min_selections:
        result.add_error(
            field.name,
            f"Please select at least {rule.min_selections} option{_plural(rule.min_selections)}",
            ErrorCode.MIN_SELECTIONS.value
        )

    if rule.max_selections and len(value) > rule.max_selections:
        result.add_error(
            field.name,
            f"Please select no more than {rule.max_selections} option{_plural(rule.max_selections)}",
            ErrorCode.MAX_SELECTIONS.value
        )

    if rule.allowed_values:
        invalid = [v for v in value if v not in rule.allowed_values]
        if invalid:
            result.add_error(
                field.name,
                f"Invalid selection for {field.display_label}: {', '.join(str(v) for v in invalid)}",
                ErrorCode.INVALID_OPTION.value
            )


TypeCheck = Callable[[CompiledField, Any, ValidationResult, float], None]

_TYPE_CHECKS: dict[DataType, TypeCheck] = {
    DataType.TEXT: _check_text,
    DataType.EMAIL: _check_text,
    DataType.URL: _check_text,
    DataType.NUMBER: _check_number,
    DataType.BOOLEAN: _check_boolean,
    DataType.DATE: _check_date,
    DataType.SELECT: _check_select,
    DataType.MULTI_SELECT: _check_multi_select,
}

_missing = set(DataType) - set(_TYPE_CHECKS)
if _missing:
    raise RuntimeError(f"No type check for data types: {sorted(t.value for t in _missing)}")


# ===================
# VALIDATION
# ===================

def check_field_type(
    field: CompiledField,
    value: Any,
    approaching_limit_ratio: Optional[float] = None
) -> ValidationResult:
    """Run only the type-specific checks for a non-empty value."""
    ratio = approaching_limit_ratio
    if ratio is None:
        ratio = get_settings().approaching_limit_ratio
    result = ValidationResult()
    _TYPE_CHECKS[field.data_type](field, value, result, ratio)
    return result


def validate_field(
    field_name: str,
    value: Any,
    schema: CompiledSchema,
    approaching_limit_ratio: Optional[float] = None
) -> ValidationResult:
    """
    Validate one value against the schema.

    Steps (each short-circuits):
    1. Unknown field → FIELD_NOT_FOUND
    2. Required and empty (None or "") → REQUIRED_FIELD only
    3. Optional and empty → valid
    4. Type-specific checks, all reported

    Args:
        field_name: Attribute name
        value: Submitted value
        schema: Compiled schema
        approaching_limit_ratio: Override for the APPROACHING_LIMIT threshold

    Returns:
        ValidationResult (is_valid when no errors; warnings allowed)
    """
    field = schema.get(field_name)
    if field is None:
        logger.debug("field_not_found", field=field_name)
        return ValidationResult.single_error(
            field_name, "Field not found", ErrorCode.FIELD_NOT_FOUND.value
        )

    if is_empty_value(value):
        if field.is_required:
            return ValidationResult.single_error(
                field_name,
                f"{field.display_label} is required",
                ErrorCode.REQUIRED_FIELD.value
            )
        return ValidationResult.valid()

    result = check_field_type(field, value, approaching_limit_ratio)

    if not result.is_valid:
        logger.debug("field_invalid", field=field_name, codes=result.error_codes)

    return result
