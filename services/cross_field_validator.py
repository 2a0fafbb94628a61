"""
Form-level validation: cross-field rules and per-field custom validators.

A CrossFieldValidator is the only stateful object in the engine. Rules and
custom validators can be added at runtime; if one instance is shared across
threads, the host must serialize those calls.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import structlog

from exceptions import ConfigurationError
from models.rules import CompiledSchema
from models.validation import ErrorCode, ValidationResult
from services.field_validator import parse_date, validate_field
from services.form_model import CustomValidator, build_form_model
from services.predicates import is_empty_value
from services.schema_compiler import DefinitionInput, compile_schema

logger = structlog.get_logger(__name__)

FormValidator = Callable[[Mapping[str, Any]], ValidationResult]


@dataclass
class CrossFieldRule:
    """A named check over several fields of one form."""
    name: str
    fields: list[str]
    validator: FormValidator
    message: str = ""


def validate_date_range(values: Mapping[str, Any]) -> ValidationResult:
    """end_date must not be before start_date when both are present."""
    result = ValidationResult()
    start_raw = values.get("start_date")
    end_raw = values.get("end_date")

    if is_empty_value(start_raw) or is_empty_value(end_raw):
        return result

    start = parse_date(start_raw)
    end = parse_date(end_raw)
    if start is not None and end is not None and start > end:
        result.add_error(
            "end_date",
            "End date must be after start date",
            ErrorCode.INVALID_DATE_RANGE.value
        )

    return result


def default_rules() -> list[CrossFieldRule]:
    return [
        CrossFieldRule(
            name="date_range",
            fields=["start_date", "end_date"],
            validator=validate_date_range,
            message="Invalid date range",
        )
    ]


@dataclass
class CrossFieldValidator:
    """
    Validation engine for one dynamic form.

    Usage:
        validator = CrossFieldValidator.from_definitions(definitions)
        validator.add_custom_validator("serial_number", check_serial)
        result = validator.validate_all(form_values)
    """

    schema: CompiledSchema
    rules: list[CrossFieldRule] = field(default_factory=default_rules)
    custom_validators: dict[str, CustomValidator] = field(default_factory=dict)

    @classmethod
    def from_definitions(
        cls,
        definitions: Union[CompiledSchema, Iterable[DefinitionInput]]
    ) -> "CrossFieldValidator":
        if isinstance(definitions, CompiledSchema):
            return cls(schema=definitions)
        return cls(schema=compile_schema(definitions))

    # ===================
    # REGISTRATION
    # ===================

    def add_cross_field_rule(self, rule: CrossFieldRule) -> None:
        """
        Register an additional cross-field rule.

        Raises:
            ConfigurationError: If the rule's validator is not callable
        """
        if not callable(rule.validator):
            raise ConfigurationError(rule.name, f"Cross-field rule '{rule.name}' has no callable validator")
        self.rules.append(rule)
        logger.debug("cross_field_rule_added", rule=rule.name, fields=rule.fields)

    def add_custom_validator(self, field_name: str, validator: CustomValidator) -> None:
        """
        Register (or replace) the custom validator for a field.

        The validator returns a ValidationResult, or a bool where False is
        reported as CUSTOM_VALIDATION.

        Raises:
            ConfigurationError: If validator is not callable
        """
        if not callable(validator):
            raise ConfigurationError(field_name, f"Custom validator for {field_name} is not callable")
        if field_name not in self.schema:
            logger.warning("custom_validator_for_unknown_field", field=field_name)
        self.custom_validators[field_name] = validator
        logger.debug("custom_validator_added", field=field_name)

    # ===================
    # VALIDATION
    # ===================

    def _run_custom_validator(self, field_name: str, value: Any) -> Optional[ValidationResult]:
        validator = self.custom_validators.get(field_name)
        if validator is None:
            return None

        outcome = validator(value)
        if isinstance(outcome, ValidationResult):
            return outcome

        result = ValidationResult()
        if not outcome:
            compiled = self.schema.get(field_name)
            label = compiled.display_label if compiled else field_name
            result.add_error(
                field_name,
                f"Custom validation failed for {label}",
                ErrorCode.CUSTOM_VALIDATION.value
            )
        return result

    def validate_field(self, field_name: str, value: Any) -> ValidationResult:
        """
        Validate one field, then apply its custom validator.

        The custom validator only runs once the built-in checks got past the
        lookup/required/empty steps.
        """
        result = validate_field(field_name, value, self.schema)

        if field_name in self.schema and not is_empty_value(value):
            custom = self._run_custom_validator(field_name, value)
            if custom is not None:
                result.extend(custom)

        return result

    def validate_form(self, values: Mapping[str, Any]) -> ValidationResult:
        """Run every registered cross-field rule and concatenate the results."""
        result = ValidationResult()
        for rule in self.rules:
            result.extend(rule.validator(values))

        logger.debug(
            "form_rules_validated",
            rules=[rule.name for rule in self.rules],
            error_count=len(result.errors)
        )
        return result

    def validate_all(self, values: Mapping[str, Any]) -> ValidationResult:
        """
        Validate every schema field plus all cross-field rules.

        Collect-all: one pass returns every error and warning.
        """
        result = ValidationResult()
        for field_name in self.schema.names():
            result.extend(self.validate_field(field_name, values.get(field_name)))
        result.extend(self.validate_form(values))

        logger.info(
            "form_validated",
            fields=len(self.schema),
            is_valid=result.is_valid,
            error_count=len(result.errors),
            warning_count=len(result.warnings)
        )
        return result

    def build_form_model(self, model_name: str = "DynamicForm"):
        """pydantic model for the whole form, custom validators included."""
        return build_form_model(self.schema, model_name, self.custom_validators)
