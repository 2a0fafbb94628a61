"""
Attribute definition schemas.

An attribute definition is admin-configured metadata for one dynamic field.
Category join rows attach definitions to a category, optionally with the
external taxonomy field they are fed from.
"""

import re
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator, model_validator

from models.base import BaseSchema, CamelSchema

NAME_PATTERN = r"^[a-z_][a-z0-9_]*$"


class DataType(str, Enum):
    """Supported attribute data types."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    URL = "url"
    EMAIL = "email"

    @property
    def has_options(self) -> bool:
        """Select types draw their values from an option list."""
        return self in (DataType.SELECT, DataType.MULTI_SELECT)


class AttributeOption(BaseSchema):
    """One choice of a select or multi_select attribute."""
    value: str = Field(..., min_length=1)
    label: str


class ValidationRules(BaseSchema):
    """
    Type-appropriate rule bag stored on an attribute definition.

    Keys not meaningful for the attribute's data type are ignored by the
    compiler. camelCase spellings written by older admin screens are accepted.
    """
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=False)

    min_length: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("min_length", "minLength")
    )
    max_length: Optional[int] = Field(
        None, ge=1, validation_alias=AliasChoices("max_length", "maxLength")
    )
    pattern: Optional[str] = None
    pattern_message: Optional[str] = Field(
        None, validation_alias=AliasChoices("pattern_message", "patternMessage")
    )
    min_value: Optional[float] = Field(
        None, validation_alias=AliasChoices("min_value", "minimum", "min")
    )
    max_value: Optional[float] = Field(
        None, validation_alias=AliasChoices("max_value", "maximum", "max")
    )
    step: Optional[float] = Field(None, gt=0)
    min_date: Optional[date] = None
    max_date: Optional[date] = None
    min_selections: Optional[int] = Field(None, ge=0)
    max_selections: Optional[int] = Field(None, ge=1)

    @field_validator("pattern")
    @classmethod
    def pattern_compiles(cls, v: Optional[str]) -> Optional[str]:
        """Pattern must be a valid regular expression."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid pattern: {e}")
        return v


class AttributeDefinition(BaseSchema):
    """
    Admin-defined dynamic attribute.

    Required: name, data_type
    Options are mandatory (and non-empty) for select and multi_select only.
    """

    id: Optional[str] = Field(None, description="Attribute UUID")
    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        pattern=NAME_PATTERN,
        description="Machine name, lowercase with underscores",
        examples=["brand_name", "blade_size"]
    )
    display_label: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    data_type: DataType
    is_required: bool = False
    validation_rules: ValidationRules = Field(default_factory=ValidationRules)
    default_value: Optional[Any] = None
    options: Optional[list[AttributeOption]] = None
    display_order: int = Field(0, ge=0, le=9999)
    is_searchable: bool = False
    is_filterable: bool = False
    help_text: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="before")
    @classmethod
    def default_display_label(cls, data: Any) -> Any:
        """Storage rows without a label get one derived from the name."""
        if isinstance(data, dict) and not data.get("display_label") and data.get("name"):
            data = {**data, "display_label": str(data["name"]).replace("_", " ").title()}
        return data

    @field_validator("validation_rules", mode="before")
    @classmethod
    def rules_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("options", mode="before")
    @classmethod
    def unwrap_options(cls, v: Any) -> Any:
        """Options may be stored wrapped as {"options": [...]}."""
        if isinstance(v, dict):
            return v.get("options")
        return v

    @model_validator(mode="after")
    def options_match_type(self) -> "AttributeDefinition":
        if self.data_type.has_options and not self.options:
            raise ValueError(f"{self.data_type.value} attribute requires at least one option")
        if not self.data_type.has_options and self.options:
            raise ValueError(f"{self.data_type.value} attribute cannot define options")
        return self

    @property
    def option_values(self) -> list[str]:
        return [opt.value for opt in self.options or []]


class CategoryAttribute(BaseSchema):
    """
    category_attributes join row as fetched by the storage layer.

    external_mapping names the external taxonomy field feeding this attribute.
    """

    attribute: AttributeDefinition = Field(
        ...,
        validation_alias=AliasChoices("attribute", "attribute_definitions")
    )
    is_required: bool = False
    external_mapping: Optional[str] = None

    @property
    def name(self) -> str:
        return self.attribute.name

    @property
    def has_external_mapping(self) -> bool:
        return bool(self.external_mapping)


class CategoryAttributeSpec(CamelSchema):
    """
    Flattened category attribute used by batch validation of mapped data.

    Accepts camelCase keys (isRequired, validationRules) from callers.
    """

    name: str
    data_type: Optional[DataType] = None
    validation_rules: Optional[dict[str, Any]] = None
    default_value: Optional[Any] = None
    is_required: bool = False

    @classmethod
    def from_category_attribute(cls, row: CategoryAttribute) -> "CategoryAttributeSpec":
        """Flatten a join row, keeping only the rules that were actually set."""
        attribute = row.attribute
        return cls(
            name=attribute.name,
            data_type=attribute.data_type,
            validation_rules=attribute.validation_rules.model_dump(exclude_none=True),
            default_value=attribute.default_value,
            is_required=row.is_required,
        )
