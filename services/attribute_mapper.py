"""
Applies a mapping table to one external record.

Fail-fast: the first descriptor whose value fails validation, or that is
required with neither a value nor a default, aborts the whole mapping.
Callers never see a partial record.
"""

import copy
from typing import Any, Mapping, Optional

import structlog

from exceptions import FieldValidationFailedError, RequiredFieldMissingError
from models.mapping import MappingDescriptor, MappingTable
from services.mapping_registry import MappingRegistry, get_default_registry
from services.predicates import check_attribute_validity

logger = structlog.get_logger(__name__)


def map_value(
    descriptor: MappingDescriptor,
    raw: Any,
    registry: MappingRegistry
) -> Any:
    """
    Compute the internal value for one descriptor.

    None falls back to the descriptor default (copied, so callers never
    share a mutable default) and is not validated; anything else goes
    through the transformation, then the validation.

    Raises:
        FieldValidationFailedError: If the mapped value fails validation
    """
    if raw is None:
        return copy.deepcopy(descriptor.default_value)

    if descriptor.transformation:
        mapped = registry.get_transform(descriptor.transformation, field=descriptor.internal_field)(raw)
    else:
        mapped = raw

    if descriptor.validation:
        predicate = registry.get_validator(descriptor.validation, field=descriptor.internal_field)
        if not predicate(mapped):
            raise FieldValidationFailedError(descriptor.internal_field, mapped)

    rules_predicate = check_attribute_validity(descriptor.validation_rules)
    if rules_predicate is not None and not rules_predicate(mapped):
        raise FieldValidationFailedError(descriptor.internal_field, mapped)

    return mapped


def apply_mapping(
    table: MappingTable,
    external_data: Mapping[str, Any],
    registry: Optional[MappingRegistry] = None
) -> dict[str, Any]:
    """
    Map an external record into internal fields.

    Descriptors run in table order. Afterwards, category attribute defaults
    fill names still absent from the result.

    Args:
        table: Compiled mapping table
        external_data: One externally sourced record
        registry: Registry resolving transformation/validation names

    Returns:
        Complete mapped record

    Raises:
        FieldValidationFailedError: A mapped value failed its validation
        RequiredFieldMissingError: A required field has no value and no default
    """
    registry = registry or get_default_registry()
    internal_data: dict[str, Any] = {}

    for key, descriptor in table.items():
        raw = external_data.get(descriptor.external_attribute)

        try:
            mapped = map_value(descriptor, raw, registry)
        except FieldValidationFailedError as e:
            logger.warning(
                "mapping_field_failed",
                key=key,
                field=e.field,
                external_attribute=descriptor.external_attribute
            )
            raise

        if mapped is not None:
            internal_data[descriptor.internal_field] = mapped
        elif descriptor.is_required:
            logger.warning(
                "mapping_required_field_missing",
                key=key,
                field=descriptor.internal_field,
                external_attribute=descriptor.external_attribute
            )
            raise RequiredFieldMissingError(descriptor.internal_field, descriptor.external_attribute)

    for name, default in table.attribute_defaults.items():
        if name not in internal_data:
            internal_data[name] = copy.deepcopy(default)

    logger.debug(
        "mapping_applied",
        descriptors=len(table),
        fields=len(internal_data),
        unused=sorted(set(external_data) - table.external_attributes)
    )

    return internal_data
