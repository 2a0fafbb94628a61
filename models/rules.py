"""
Compiled field rules.

A rule is a tagged union discriminated on data_type: each variant only
carries the constraints meaningful for its type. text, email and url share
the text rule shape.
"""

from datetime import date
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field

from models.attribute import DataType
from models.base import BaseSchema


class TextRule(BaseSchema):
    """Rules for text, email and url fields."""
    data_type: Literal["text", "email", "url"]
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None


class NumberRule(BaseSchema):
    data_type: Literal["number"] = "number"
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None


class BooleanRule(BaseSchema):
    data_type: Literal["boolean"] = "boolean"


class DateRule(BaseSchema):
    data_type: Literal["date"] = "date"
    min_date: Optional[date] = None
    max_date: Optional[date] = None


class SelectRule(BaseSchema):
    data_type: Literal["select"] = "select"
    allowed_values: list[str]


class MultiSelectRule(BaseSchema):
    data_type: Literal["multi_select"] = "multi_select"
    allowed_values: list[str]
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None


FieldRule = Annotated[
    Union[TextRule, NumberRule, BooleanRule, DateRule, SelectRule, MultiSelectRule],
    Field(discriminator="data_type"),
]


class CompiledField(BaseSchema):
    """
    One attribute ready for validation.

    default_value rides along for the mapper; validators never consult it.
    """

    name: str
    display_label: str
    data_type: DataType
    is_required: bool = False
    default_value: Optional[Any] = None
    rule: FieldRule


class CompiledSchema(BaseSchema):
    """Compiled rule set keyed by attribute name, in display order."""

    fields: dict[str, CompiledField] = Field(default_factory=dict)

    def get(self, name: str) -> Optional[CompiledField]:
        return self.fields.get(name)

    def names(self) -> list[str]:
        return list(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __len__(self) -> int:
        return len(self.fields)
