"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from models.mapping import MappingTable
from services.mapping_compiler import CORE_MAPPINGS, MappingCompiler
from services.mapping_registry import MappingRegistry
from services.schema_compiler import compile_schema
from tests.factories import AttributeDefinitionFactory, CategoryAttributeRowFactory


# ===================
# SCHEMA FIXTURES
# ===================

@pytest.fixture
def tool_definitions() -> list[dict]:
    """
    Attribute definitions of a typical power-tool category.

    Covers every data type once.
    """
    return [
        AttributeDefinitionFactory.create(
            name="brand_name",
            data_type="text",
            is_required=True,
            validation_rules={"min_length": 2, "max_length": 50},
            display_order=1,
        ),
        AttributeDefinitionFactory.create(
            name="wattage",
            data_type="number",
            validation_rules={"min_value": 0, "max_value": 5000, "step": 0.5},
            display_order=2,
        ),
        AttributeDefinitionFactory.create(
            name="cordless",
            data_type="boolean",
            display_order=3,
        ),
        AttributeDefinitionFactory.create(
            name="purchase_date",
            data_type="date",
            validation_rules={"min_date": "2000-01-01", "max_date": "2030-12-31"},
            display_order=4,
        ),
        AttributeDefinitionFactory.create(
            name="power_source",
            data_type="select",
            options=[
                {"value": "battery", "label": "Battery"},
                {"value": "corded", "label": "Corded"},
            ],
            display_order=5,
        ),
        AttributeDefinitionFactory.create(
            name="accessories",
            data_type="multi_select",
            options=[
                {"value": "case", "label": "Carry case"},
                {"value": "charger", "label": "Charger"},
                {"value": "bits", "label": "Bit set"},
            ],
            validation_rules={"min_selections": 1, "max_selections": 2},
            display_order=6,
        ),
        AttributeDefinitionFactory.create(
            name="manual_url",
            data_type="url",
            display_order=7,
        ),
        AttributeDefinitionFactory.create(
            name="support_email",
            data_type="email",
            display_order=8,
        ),
    ]


@pytest.fixture
def tool_schema(tool_definitions):
    """Compiled schema for tool_definitions."""
    return compile_schema(tool_definitions)


# ===================
# MAPPING FIXTURES
# ===================

@pytest.fixture
def registry() -> MappingRegistry:
    """Fresh registry with the built-in functions (safe to mutate)."""
    return MappingRegistry.with_builtins()


@pytest.fixture
def core_table() -> MappingTable:
    """Table holding only the core mappings."""
    return MappingTable(descriptors=dict(CORE_MAPPINGS))


@pytest.fixture
def category_rows() -> list[dict]:
    """
    category_attributes join rows as the storage layer returns them.

    brand_name and blade_size are fed from the external taxonomy;
    warranty_years has no external mapping but carries a default.
    """
    return [
        CategoryAttributeRowFactory.create(
            name="brand_name",
            external_mapping="brand",
            is_required=True,
            validation_rules={"max_length": 20},
        ),
        CategoryAttributeRowFactory.create(
            name="blade_size",
            external_mapping="blade",
            default_value="10in",
        ),
        CategoryAttributeRowFactory.create(
            name="warranty_years",
            data_type="number",
            default_value=2,
        ),
    ]


@pytest.fixture
def mapping_compiler(category_rows, registry) -> MappingCompiler:
    """
    Compiler whose row loader serves category_rows for category 7.

    Any other category has no attributes.
    """
    def loader(category_id: int) -> list[dict]:
        return category_rows if category_id == 7 else []

    return MappingCompiler(registry=registry, row_loader=loader)
