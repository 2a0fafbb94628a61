"""
Unit tests for engine schemas.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from models.attribute import CategoryAttribute, CategoryAttributeSpec, DataType, ValidationRules
from models.mapping import MappingDescriptor, MappingTable, MappingType
from models.validation import ValidationResult
from tests.factories import CategoryAttributeRowFactory


class TestDataType:

    def test_has_options(self):
        assert DataType.SELECT.has_options is True
        assert DataType.MULTI_SELECT.has_options is True
        assert DataType.TEXT.has_options is False


class TestCategoryAttribute:

    def test_join_row_shape(self):
        row = CategoryAttribute.model_validate(
            CategoryAttributeRowFactory.create(name="brand_name", external_mapping="brand", is_required=True)
        )

        assert row.name == "brand_name"
        assert row.has_external_mapping is True
        assert row.is_required is True

    def test_blank_external_mapping(self):
        row = CategoryAttribute.model_validate(
            CategoryAttributeRowFactory.create(name="blade_size", external_mapping="")
        )
        assert row.has_external_mapping is False

    def test_flattened_spec(self):
        row = CategoryAttribute.model_validate(
            CategoryAttributeRowFactory.create(
                name="blade_size",
                is_required=True,
                validation_rules={"max_length": 8},
                default_value="10in",
            )
        )
        spec = CategoryAttributeSpec.from_category_attribute(row)

        assert spec.name == "blade_size"
        assert spec.validation_rules == {"max_length": 8}
        assert spec.default_value == "10in"
        assert spec.model_dump(by_alias=True)["isRequired"] is True


class TestMappingDescriptor:

    def test_external_attribute_kept_verbatim(self):
        descriptor = MappingDescriptor(external_attribute="Weight (kg) ", internal_field="weight")
        assert descriptor.external_attribute == "Weight (kg) "

    def test_rule_pattern_kept_verbatim(self):
        assert ValidationRules(pattern=" kg$").pattern == " kg$"

    def test_defaults(self):
        descriptor = MappingDescriptor(external_attribute="brand", internal_field="brand_name")

        assert descriptor.mapping_type == MappingType.DIRECT
        assert descriptor.is_required is False
        assert descriptor.has_validation is False

    def test_has_validation(self):
        assert MappingDescriptor(
            external_attribute="a", internal_field="b", validation="not_empty"
        ).has_validation is True
        assert MappingDescriptor(
            external_attribute="a", internal_field="b", validation_rules={}
        ).has_validation is True

    def test_empty_names_rejected(self):
        with pytest.raises(PydanticValidationError):
            MappingDescriptor(external_attribute="", internal_field="b")

    def test_dumps_camel_case(self):
        payload = MappingDescriptor(external_attribute="a", internal_field="b").model_dump(by_alias=True)
        assert payload["externalAttribute"] == "a"
        assert payload["mappingType"] == "direct"

    def test_table_external_attributes(self, core_table):
        assert {"product_id", "product_name", "in_stock"} <= core_table.external_attributes
        assert len(MappingTable()) == 0


class TestValidationResult:

    def test_warnings_do_not_invalidate(self):
        result = ValidationResult()
        result.add_warning("name", "Approaching character limit (9/10)", "APPROACHING_LIMIT")

        assert result.is_valid is True

    def test_extend(self):
        result = ValidationResult.valid()
        result.extend(ValidationResult.single_error("a", "bad", "X"))

        assert result.is_valid is False
        assert result.error_codes == ["X"]

    def test_response_is_camel_case(self):
        result = ValidationResult()
        result.add_warning("name", "m", "APPROACHING_LIMIT", suggestion="Shorten")

        payload = result.to_response()
        assert payload["isValid"] is True
        assert payload["warnings"][0]["suggestion"] == "Shorten"
