"""
Attribute schema compiler.

Turns admin-defined attribute definitions into a CompiledSchema: one
type-specific rule per attribute. Adding a data type means adding one
builder to _RULE_BUILDERS; a missing builder fails at import.
"""

from typing import Any, Callable, Iterable, Mapping, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import DuplicateAttributeError, SchemaDefinitionError
from models.attribute import AttributeDefinition, DataType
from models.rules import (
    BooleanRule,
    CompiledField,
    CompiledSchema,
    DateRule,
    FieldRule,
    MultiSelectRule,
    NumberRule,
    SelectRule,
    TextRule,
)

logger = structlog.get_logger(__name__)

DefinitionInput = Union[AttributeDefinition, Mapping[str, Any]]


# ===================
# RULE BUILDERS
# ===================

def _text_rule(definition: AttributeDefinition) -> TextRule:
    rules = definition.validation_rules
    return TextRule(
        data_type=definition.data_type.value,
        min_length=rules.min_length,
        max_length=rules.max_length,
        pattern=rules.pattern,
        pattern_message=rules.pattern_message,
    )


def _number_rule(definition: AttributeDefinition) -> NumberRule:
    rules = definition.validation_rules
    return NumberRule(min=rules.min_value, max=rules.max_value, step=rules.step)


def _boolean_rule(definition: AttributeDefinition) -> BooleanRule:
    return BooleanRule()


def _date_rule(definition: AttributeDefinition) -> DateRule:
    rules = definition.validation_rules
    return DateRule(min_date=rules.min_date, max_date=rules.max_date)


def _select_rule(definition: AttributeDefinition) -> SelectRule:
    return SelectRule(allowed_values=definition.option_values)


def _multi_select_rule(definition: AttributeDefinition) -> MultiSelectRule:
    rules = definition.validation_rules
    return MultiSelectRule(
        allowed_values=definition.option_values,
        min_selections=rules.min_selections,
        max_selections=rules.max_selections,
    )


_RULE_BUILDERS: dict[DataType, Callable[[AttributeDefinition], FieldRule]] = {
    DataType.TEXT: _text_rule,
    DataType.EMAIL: _text_rule,
    DataType.URL: _text_rule,
    DataType.NUMBER: _number_rule,
    DataType.BOOLEAN: _boolean_rule,
    DataType.DATE: _date_rule,
    DataType.SELECT: _select_rule,
    DataType.MULTI_SELECT: _multi_select_rule,
}

_missing = set(DataType) - set(_RULE_BUILDERS)
if _missing:
    raise RuntimeError(f"No rule builder for data types: {sorted(t.value for t in _missing)}")


# ===================
# COMPILER
# ===================

def parse_definition(raw: DefinitionInput) -> AttributeDefinition:
    """
    Parse one raw definition record.

    Raises:
        SchemaDefinitionError: If the record is malformed
    """
    if isinstance(raw, AttributeDefinition):
        return raw
    try:
        return AttributeDefinition.model_validate(raw)
    except PydanticValidationError as e:
        name = raw.get("name") if isinstance(raw, Mapping) else None
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'definition'}: {err['msg']}"
            for err in e.errors()
        )
        raise SchemaDefinitionError(str(name or "<unnamed>"), reasons)


def compile_rule(definition: AttributeDefinition) -> FieldRule:
    """Build the rule for one definition by dispatching on its data type."""
    return _RULE_BUILDERS[definition.data_type](definition)


def compile_field(definition: AttributeDefinition) -> CompiledField:
    return CompiledField(
        name=definition.name,
        display_label=definition.display_label,
        data_type=definition.data_type,
        is_required=definition.is_required,
        default_value=definition.default_value,
        rule=compile_rule(definition),
    )


def compile_schema(definitions: Iterable[DefinitionInput]) -> CompiledSchema:
    """
    Compile attribute definitions into a schema.

    Fields are ordered by display_order, then input order.

    Args:
        definitions: AttributeDefinition models or raw dicts

    Returns:
        CompiledSchema keyed by attribute name

    Raises:
        SchemaDefinitionError: If a definition is malformed
        DuplicateAttributeError: If two definitions share a name
    """
    parsed = [parse_definition(raw) for raw in definitions]
    ordered = sorted(enumerate(parsed), key=lambda pair: (pair[1].display_order, pair[0]))

    fields: dict[str, CompiledField] = {}
    for _, definition in ordered:
        if definition.name in fields:
            logger.warning("duplicate_attribute_name", name=definition.name)
            raise DuplicateAttributeError(definition.name)
        fields[definition.name] = compile_field(definition)

    logger.debug(
        "schema_compiled",
        field_count=len(fields),
        required=[name for name, f in fields.items() if f.is_required]
    )

    return CompiledSchema(fields=fields)
