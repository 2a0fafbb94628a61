"""
Unit tests for the attribute mapper (fail-fast application of a table).

Tests:
1. Core mapping scenarios
2. Defaults and idempotence
3. Fail-fast validation
"""

import pytest

from exceptions import (
    FieldValidationFailedError,
    MappingError,
    RequiredFieldMissingError,
    UnknownFunctionError,
)
from models.mapping import MappingDescriptor, MappingTable, MappingType
from services.attribute_mapper import apply_mapping, map_value


# ===================
# TEST 1: CORE MAPPINGS
# ===================

class TestCoreMappings:
    """Applying the core table to external product records."""

    def test_minimal_record(self, core_table, registry):
        mapped = apply_mapping(
            core_table,
            {"product_id": "P1", "product_name": "Drill", "in_stock": 1},
            registry
        )

        assert mapped == {
            "external_id": "P1",
            "name": "Drill",
            "is_available": True,
            "location": "Local pickup available",
            "images": [],
            "condition": "good",
        }

    def test_full_record(self, core_table, registry):
        mapped = apply_mapping(core_table, {
            "product_id": "P2",
            "product_name": "Circular Saw",
            "product_description": "d" * 700,
            "location": "Warehouse 3",
            "image_urls": "https://img.example.com/saw.jpg",
            "in_stock": 0,
            "condition": "Brand new in box",
        }, registry)

        assert mapped["description"] == "d" * 500
        assert mapped["location"] == "Warehouse 3"
        assert mapped["images"] == ["https://img.example.com/saw.jpg"]
        assert mapped["is_available"] is False
        assert mapped["condition"] == "new"

    def test_empty_record_cites_first_required_field(self, core_table, registry):
        """product_id comes before product_name in table order."""
        with pytest.raises(RequiredFieldMissingError) as exc_info:
            apply_mapping(core_table, {}, registry)

        error = exc_info.value
        assert error.field == "external_id"
        assert error.code == "REQUIRED_FIELD_MISSING"
        assert error.message == "Required field external_id is missing"
        assert error.details["external_attribute"] == "product_id"
        assert error.status_code == 422

    def test_second_required_field(self, core_table, registry):
        with pytest.raises(MappingError) as exc_info:
            apply_mapping(core_table, {"product_id": "P1"}, registry)

        assert exc_info.value.field == "name"

    def test_unused_external_fields_dropped(self, core_table, registry):
        mapped = apply_mapping(
            core_table,
            {"product_id": "P1", "product_name": "Drill", "supplier_notes": "n/a"},
            registry
        )
        assert "supplier_notes" not in mapped


# ===================
# TEST 2: DEFAULTS
# ===================

class TestDefaults:

    @pytest.fixture
    def defaults_table(self):
        return MappingTable(descriptors={
            "location": MappingDescriptor(
                external_attribute="location",
                internal_field="location",
                default_value="Local pickup available",
            ),
            "tags": MappingDescriptor(
                external_attribute="tags",
                internal_field="tags",
                default_value=["tools"],
            ),
        })

    def test_empty_record_from_defaults(self, defaults_table, registry):
        first = apply_mapping(defaults_table, {}, registry)
        second = apply_mapping(defaults_table, {}, registry)

        assert first == {"location": "Local pickup available", "tags": ["tools"]}
        assert first == second

    def test_defaults_not_shared(self, defaults_table, registry):
        """Mutating one result never leaks into the next."""
        first = apply_mapping(defaults_table, {}, registry)
        first["tags"].append("garden")

        second = apply_mapping(defaults_table, {}, registry)
        assert second["tags"] == ["tools"]

    def test_empty_string_is_a_value(self, defaults_table, registry):
        """Only an absent (None) value falls back to the default."""
        mapped = apply_mapping(defaults_table, {"location": ""}, registry)
        assert mapped["location"] == ""

    def test_attribute_defaults_fill_absent_names(self, registry):
        table = MappingTable(
            descriptors={
                "blade": MappingDescriptor(external_attribute="blade", internal_field="blade_size"),
            },
            attribute_defaults={"blade_size": "8in", "warranty_years": 2},
        )
        mapped = apply_mapping(table, {"blade": "10in"}, registry)

        assert mapped == {"blade_size": "10in", "warranty_years": 2}

    def test_required_satisfied_by_default(self, registry):
        table = MappingTable(descriptors={
            "status": MappingDescriptor(
                external_attribute="status",
                internal_field="status",
                is_required=True,
                default_value="active",
            ),
        })
        assert apply_mapping(table, {}, registry) == {"status": "active"}

    def test_absent_optional_field_skips_validation(self, registry):
        """A validator on an optional field does not make it required."""
        table = MappingTable(descriptors={
            "weight": MappingDescriptor(
                external_attribute="weight_kg",
                internal_field="weight",
                validation="is_number",
            ),
        })
        assert apply_mapping(table, {}, registry) == {}

    def test_default_not_validated(self, registry):
        table = MappingTable(descriptors={
            "weight": MappingDescriptor(
                external_attribute="weight_kg",
                internal_field="weight",
                validation="is_number",
                validation_rules={"min_length": 5},
                default_value="n/a",
            ),
        })

        assert apply_mapping(table, {}, registry) == {"weight": "n/a"}
        with pytest.raises(FieldValidationFailedError):
            apply_mapping(table, {"weight_kg": "heavy"}, registry)


# ===================
# TEST 3: FAIL-FAST VALIDATION
# ===================

class TestFailFast:

    def test_named_validator_failure(self, registry):
        table = MappingTable(descriptors={
            "price": MappingDescriptor(
                external_attribute="price",
                internal_field="price",
                validation="is_number",
            ),
        })

        with pytest.raises(FieldValidationFailedError) as exc_info:
            apply_mapping(table, {"price": "ten"}, registry)

        assert exc_info.value.field == "price"
        assert exc_info.value.value == "ten"
        assert exc_info.value.message == "Validation failed for price: 'ten'"

    def test_rules_validate_transformed_value(self, registry):
        """Rules see the value after the transformation ran."""
        descriptor = MappingDescriptor(
            external_attribute="sku",
            internal_field="sku",
            mapping_type=MappingType.TRANSFORM,
            transformation="strip_text",
            validation_rules={"max_length": 4},
        )

        assert map_value(descriptor, "  AB12  ", registry) == "AB12"
        with pytest.raises(FieldValidationFailedError):
            map_value(descriptor, "ABCDE", registry)

    def test_no_partial_result(self, registry):
        """A failure late in the table discards earlier fields."""
        table = MappingTable(descriptors={
            "name": MappingDescriptor(external_attribute="title", internal_field="name"),
            "sku": MappingDescriptor(
                external_attribute="sku",
                internal_field="sku",
                validation_rules={"pattern": "^[A-Z]+$"},
            ),
        })

        with pytest.raises(FieldValidationFailedError):
            apply_mapping(table, {"title": "Drill", "sku": "abc"}, registry)

    def test_unknown_transformation_raises(self, registry):
        table = MappingTable(descriptors={
            "name": MappingDescriptor(
                external_attribute="title",
                internal_field="name",
                mapping_type=MappingType.TRANSFORM,
                transformation="slugify",
            ),
        })

        with pytest.raises(UnknownFunctionError) as exc_info:
            apply_mapping(table, {"title": "Drill"}, registry)

        assert exc_info.value.field == "name"

    def test_custom_transform(self, registry):
        registry.register_transform("cents_to_units", lambda v: v / 100)
        table = MappingTable(descriptors={
            "price": MappingDescriptor(
                external_attribute="price_cents",
                internal_field="price",
                mapping_type=MappingType.TRANSFORM,
                transformation="cents_to_units",
                validation="is_number",
            ),
        })

        assert apply_mapping(table, {"price_cents": 1250}, registry) == {"price": 12.5}
