"""
Dynamic pydantic form models built from a compiled schema.

The model parses a whole submission at once and raises
pydantic.ValidationError, for hosts that want typed, coerced values rather
than a ValidationResult.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Callable, Literal, Mapping, Optional, Union

import structlog
from pydantic import AfterValidator, ConfigDict, Field, StringConstraints, create_model

from models.attribute import DataType
from models.rules import CompiledField, CompiledSchema
from models.validation import ValidationResult
from services.field_validator import is_valid_email, is_valid_url

logger = structlog.get_logger(__name__)

CustomValidator = Callable[[Any], Union[ValidationResult, bool]]


# ===================
# AFTER-VALIDATORS
# ===================

def _not_blank(value: str) -> str:
    if value == "":
        raise ValueError("Field is required")
    return value


def _email(value: str) -> str:
    if not is_valid_email(value):
        raise ValueError("Please enter a valid email address")
    return value


def _url(value: str) -> str:
    if not is_valid_url(value):
        raise ValueError("Please enter a valid URL")
    return value


def _step(step: float, label: str) -> Callable[[float], float]:
    def check(value: float) -> float:
        if Decimal(str(value)) % Decimal(str(step)) != 0:
            raise ValueError(f"{label} must be in increments of {step}")
        return value
    return check


def _date_bounds(field: CompiledField) -> Callable[[date], date]:
    rule = field.rule

    def check(value: date) -> date:
        if rule.min_date and value < rule.min_date:
            raise ValueError(f"{field.display_label} cannot be before {rule.min_date.isoformat()}")
        if rule.max_date and value > rule.max_date:
            raise ValueError(f"{field.display_label} cannot be after {rule.max_date.isoformat()}")
        return value
    return check


def _custom(field: CompiledField, validator: CustomValidator) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        outcome = validator(value)
        if isinstance(outcome, ValidationResult):
            if not outcome.is_valid:
                raise ValueError("; ".join(e.message for e in outcome.errors))
        elif not outcome:
            raise ValueError(f"Custom validation failed for {field.display_label}")
        return value
    return check


# ===================
# ANNOTATION BUILDERS
# ===================

def _text_annotation(field: CompiledField) -> Any:
    rule = field.rule
    annotation: Any = Annotated[
        str,
        StringConstraints(
            min_length=rule.min_length,
            max_length=rule.max_length,
            pattern=rule.pattern,
        ),
    ]
    if field.is_required:
        annotation = Annotated[annotation, AfterValidator(_not_blank)]
    if field.data_type == DataType.EMAIL:
        annotation = Annotated[annotation, AfterValidator(_email)]
    if field.data_type == DataType.URL:
        annotation = Annotated[annotation, AfterValidator(_url)]
    return annotation


def _number_annotation(field: CompiledField) -> Any:
    rule = field.rule
    annotation: Any = Annotated[float, Field(ge=rule.min, le=rule.max, allow_inf_nan=False)]
    if rule.step:
        annotation = Annotated[annotation, AfterValidator(_step(rule.step, field.display_label))]
    return annotation


def _boolean_annotation(field: CompiledField) -> Any:
    return bool


def _date_annotation(field: CompiledField) -> Any:
    return Annotated[date, AfterValidator(_date_bounds(field))]


def _select_annotation(field: CompiledField) -> Any:
    values = tuple(field.rule.allowed_values)
    return Literal[values] if values else str


def _multi_select_annotation(field: CompiledField) -> Any:
    rule = field.rule
    values = tuple(rule.allowed_values)
    item: Any = Literal[values] if values else str
    return Annotated[
        list[item],
        Field(min_length=rule.min_selections, max_length=rule.max_selections),
    ]


_ANNOTATION_BUILDERS: dict[DataType, Callable[[CompiledField], Any]] = {
    DataType.TEXT: _text_annotation,
    DataType.EMAIL: _text_annotation,
    DataType.URL: _text_annotation,
    DataType.NUMBER: _number_annotation,
    DataType.BOOLEAN: _boolean_annotation,
    DataType.DATE: _date_annotation,
    DataType.SELECT: _select_annotation,
    DataType.MULTI_SELECT: _multi_select_annotation,
}

_missing = set(DataType) - set(_ANNOTATION_BUILDERS)
if _missing:
    raise RuntimeError(f"No form annotation for data types: {sorted(t.value for t in _missing)}")


def build_form_model(
    schema: CompiledSchema,
    model_name: str = "DynamicForm",
    custom_validators: Optional[Mapping[str, CustomValidator]] = None
):
    """
    Create a pydantic model class with one field per compiled attribute.

    Optional attributes default to None. Patterns use Python regex syntax,
    matching the field validator.

    Args:
        schema: Compiled schema
        model_name: Name of the generated class
        custom_validators: Field name -> custom validator, run after type checks

    Returns:
        A BaseModel subclass
    """
    custom_validators = custom_validators or {}
    fields: dict[str, Any] = {}

    for name in schema.names():
        compiled = schema.get(name)
        annotation = _ANNOTATION_BUILDERS[compiled.data_type](compiled)

        if name in custom_validators:
            annotation = Annotated[annotation, AfterValidator(_custom(compiled, custom_validators[name]))]

        if compiled.is_required:
            fields[name] = (annotation, Field(..., title=compiled.display_label))
        else:
            fields[name] = (Optional[annotation], Field(None, title=compiled.display_label))

    logger.debug("form_model_built", model=model_name, field_count=len(fields))

    return create_model(
        model_name,
        __config__=ConfigDict(regex_engine="python-re", extra="ignore"),
        **fields,
    )
