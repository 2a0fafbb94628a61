"""
Mapping descriptor and mapping table schemas.

Descriptors are declarative: transformation and validation are names of
functions in a MappingRegistry, so a table can round-trip through JSON
category configuration.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from models.base import BaseSchema


class MappingType(str, Enum):
    """How an external value becomes an internal one."""
    DIRECT = "direct"
    TRANSFORM = "transform"
    COMPOSITE = "composite"


class MappingDescriptor(BaseSchema):
    """
    Maps one external field to one internal field.

    Accepts camelCase keys (externalAttribute, internalField, ...).
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=False,
        alias_generator=to_camel,
        populate_by_name=True
    )

    external_attribute: str = Field(..., min_length=1)
    internal_field: str = Field(..., min_length=1)
    mapping_type: MappingType = MappingType.DIRECT
    transformation: Optional[str] = Field(
        None, description="Registry name of a value -> value function"
    )
    validation: Optional[str] = Field(
        None, description="Registry name of a value -> bool predicate"
    )
    validation_rules: Optional[dict[str, Any]] = Field(
        None, description="Declarative rules compiled into a predicate"
    )
    is_required: bool = False
    default_value: Optional[Any] = None

    @model_validator(mode="after")
    def transform_has_transformation(self) -> "MappingDescriptor":
        if self.mapping_type == MappingType.TRANSFORM and not self.transformation:
            raise ValueError("transform mapping requires a transformation")
        return self

    @property
    def has_validation(self) -> bool:
        return bool(self.validation) or self.validation_rules is not None


class MappingTable(BaseSchema):
    """
    Active mapping descriptors for one context, in application order.

    attribute_defaults holds category attribute defaults injected into the
    mapped record after all descriptors ran, for names still absent.
    """

    descriptors: dict[str, MappingDescriptor] = Field(default_factory=dict)
    attribute_defaults: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str) -> Optional[MappingDescriptor]:
        return self.descriptors.get(key)

    def keys(self) -> list[str]:
        return list(self.descriptors)

    def items(self) -> list[tuple[str, MappingDescriptor]]:
        return list(self.descriptors.items())

    @property
    def external_attributes(self) -> set[str]:
        """External fields already consumed by some descriptor."""
        return {d.external_attribute for d in self.descriptors.values()}

    def __contains__(self, key: object) -> bool:
        return key in self.descriptors

    def __len__(self) -> int:
        return len(self.descriptors)
