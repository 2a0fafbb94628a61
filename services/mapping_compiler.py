"""
Mapping table compiler.

Builds the MappingTable for a category: the fixed core mappings overlaid
with descriptors derived from the category's attribute join rows. Category
rows are supplied by a loader collaborator; this module performs no I/O.

See services/attribute_mapper.py for applying a table.
"""

from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import InvalidMappingError, SchemaDefinitionError
from models.attribute import CategoryAttribute, CategoryAttributeSpec
from models.mapping import MappingDescriptor, MappingTable, MappingType
from models.validation import DataValidationResult
from services.attribute_mapper import apply_mapping
from services.mapping_registry import MappingRegistry, get_default_registry
from services.predicates import check_attribute_validity, validate_data
from services.suggestion_engine import get_suggestions

logger = structlog.get_logger(__name__)

RowInput = Union[CategoryAttribute, Mapping[str, Any]]
RowLoader = Callable[[int], Iterable[RowInput]]


# ===================
# CORE MAPPINGS
# ===================

CORE_MAPPINGS: Mapping[str, MappingDescriptor] = MappingProxyType({
    "id": MappingDescriptor(
        external_attribute="product_id",
        internal_field="external_id",
        mapping_type=MappingType.DIRECT,
        is_required=True,
    ),
    "title": MappingDescriptor(
        external_attribute="product_name",
        internal_field="name",
        mapping_type=MappingType.DIRECT,
        is_required=True,
    ),
    "description": MappingDescriptor(
        external_attribute="product_description",
        internal_field="description",
        mapping_type=MappingType.TRANSFORM,
        transformation="truncate_description",
    ),
    "location": MappingDescriptor(
        external_attribute="location",
        internal_field="location",
        mapping_type=MappingType.DIRECT,
        default_value="Local pickup available",
    ),
    "images": MappingDescriptor(
        external_attribute="image_urls",
        internal_field="images",
        mapping_type=MappingType.TRANSFORM,
        transformation="coerce_list",
        default_value=[],
    ),
    "availability": MappingDescriptor(
        external_attribute="in_stock",
        internal_field="is_available",
        mapping_type=MappingType.TRANSFORM,
        transformation="coerce_boolean",
        default_value=True,
    ),
    "condition": MappingDescriptor(
        external_attribute="condition",
        internal_field="condition",
        mapping_type=MappingType.TRANSFORM,
        transformation="normalize_condition",
        default_value="good",
    ),
})


# ===================
# TABLE CONSTRUCTION
# ===================

def parse_descriptor(key: str, raw: Union[MappingDescriptor, Mapping[str, Any]]) -> MappingDescriptor:
    """
    Parse one descriptor from category configuration.

    Raises:
        InvalidMappingError: If required keys are missing or values are malformed
    """
    if isinstance(raw, MappingDescriptor):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidMappingError(key, "descriptor must be an object")
    try:
        return MappingDescriptor.model_validate(raw)
    except PydanticValidationError as e:
        if any(err["type"] == "missing" for err in e.errors()):
            raise InvalidMappingError(key, "missing externalAttribute or internalField")
        raise InvalidMappingError(key, "; ".join(err["msg"] for err in e.errors()))


def validate_table(table: MappingTable, registry: Optional[MappingRegistry] = None) -> MappingTable:
    """
    Check a table's descriptors before use.

    Raises:
        InvalidMappingError: If internal_field is repeated or rules are malformed
        UnknownFunctionError: If a transformation/validation name is not registered
    """
    registry = registry or get_default_registry()
    claimed: dict[str, str] = {}

    for key, descriptor in table.items():
        if descriptor.internal_field in claimed:
            raise InvalidMappingError(
                key,
                f"internal field '{descriptor.internal_field}' already mapped by '{claimed[descriptor.internal_field]}'"
            )
        claimed[descriptor.internal_field] = key

        if descriptor.transformation:
            registry.get_transform(descriptor.transformation, field=key)
        if descriptor.validation:
            registry.get_validator(descriptor.validation, field=key)
        if descriptor.validation_rules is not None:
            try:
                check_attribute_validity(descriptor.validation_rules)
            except PydanticValidationError as e:
                raise InvalidMappingError(key, f"invalid validation rules: {e.errors()[0]['msg']}")

    return table


def build_table(
    descriptors: Mapping[str, Union[MappingDescriptor, Mapping[str, Any]]],
    attribute_defaults: Optional[Mapping[str, Any]] = None,
    registry: Optional[MappingRegistry] = None
) -> MappingTable:
    """
    Build and validate a table from declarative configuration.

    Args:
        descriptors: key -> descriptor (model or camelCase/snake_case dict)
        attribute_defaults: attribute name -> default injected after mapping
        registry: Registry the descriptor function names resolve against

    Raises:
        ConfigurationError: If any descriptor is malformed
    """
    table = MappingTable(
        descriptors={key: parse_descriptor(key, raw) for key, raw in descriptors.items()},
        attribute_defaults=dict(attribute_defaults or {}),
    )
    return validate_table(table, registry)


def _parse_row(row: RowInput) -> CategoryAttribute:
    if isinstance(row, CategoryAttribute):
        return row
    if not isinstance(row, Mapping):
        raise SchemaDefinitionError("<unnamed>", "category attribute row must be an object")
    try:
        return CategoryAttribute.model_validate(row)
    except PydanticValidationError as e:
        attribute = row.get("attribute_definitions") or row.get("attribute") or {}
        name = attribute.get("name") if isinstance(attribute, Mapping) else None
        raise SchemaDefinitionError(str(name or "<unnamed>"), "; ".join(err["msg"] for err in e.errors()))


class MappingCompiler:
    """
    Compiles category mapping tables on top of the core mappings.

    Usage:
        compiler = MappingCompiler(row_loader=storage.get_category_attributes)
        mapped = compiler.map_attributes(category_id, external_record)
    """

    def __init__(
        self,
        core: Mapping[str, MappingDescriptor] = CORE_MAPPINGS,
        registry: Optional[MappingRegistry] = None,
        row_loader: Optional[RowLoader] = None
    ):
        self.core = core
        self.registry = registry or get_default_registry()
        self.row_loader = row_loader

    # ===================
    # CATEGORY ROWS
    # ===================

    def load_rows(self, category_id: int) -> list[CategoryAttribute]:
        """
        Fetch and parse a category's attribute join rows via the loader.

        Raises:
            ConfigurationError: If no row loader was configured
        """
        if self.row_loader is None:
            raise InvalidMappingError(str(category_id), "no category row loader configured")
        rows = [_parse_row(row) for row in self.row_loader(category_id)]
        logger.debug("category_rows_loaded", category_id=category_id, count=len(rows))
        return rows

    def build_category_mappings(self, rows: Iterable[RowInput]) -> dict[str, MappingDescriptor]:
        """
        One direct descriptor per row carrying an external_mapping.

        Rows without an external mapping produce nothing here; their
        defaults are handled by compile_table.
        """
        mappings: dict[str, MappingDescriptor] = {}
        for row in (_parse_row(r) for r in rows):
            if not row.has_external_mapping:
                continue
            attribute = row.attribute
            rules = attribute.validation_rules.model_dump(exclude_none=True)
            mappings[attribute.name] = MappingDescriptor(
                external_attribute=row.external_mapping,
                internal_field=attribute.name,
                mapping_type=MappingType.DIRECT,
                is_required=row.is_required,
                default_value=attribute.default_value,
                validation_rules=rules or None,
            )
        return mappings

    def get_category_mappings(self, category_id: int) -> dict[str, MappingDescriptor]:
        """Category-specific descriptors for category_id."""
        return self.build_category_mappings(self.load_rows(category_id))

    # ===================
    # TABLE
    # ===================

    def compile_table(self, rows: Iterable[RowInput]) -> MappingTable:
        """
        Overlay category descriptors onto the core mappings.

        Category descriptors replace core ones on key collision, and also
        displace a core descriptor feeding the same internal field. Every
        category attribute with a default_value is scheduled for injection.

        Raises:
            ConfigurationError: If the resulting table is malformed
        """
        parsed = [_parse_row(r) for r in rows]
        category = self.build_category_mappings(parsed)
        claimed = {d.internal_field for d in category.values()}

        descriptors: dict[str, MappingDescriptor] = {}
        for key, descriptor in self.core.items():
            if key in category:
                continue
            if descriptor.internal_field in claimed:
                logger.debug("core_mapping_displaced", key=key, internal_field=descriptor.internal_field)
                continue
            descriptors[key] = descriptor
        descriptors.update(category)

        attribute_defaults = {
            row.attribute.name: row.attribute.default_value
            for row in parsed
            if row.attribute.default_value is not None
        }

        table = MappingTable(descriptors=descriptors, attribute_defaults=attribute_defaults)
        validate_table(table, self.registry)

        logger.debug(
            "mapping_table_compiled",
            core=len(self.core),
            category=len(category),
            total=len(table),
            defaults=list(attribute_defaults)
        )

        return table

    def get_table(self, category_id: int) -> MappingTable:
        return self.compile_table(self.load_rows(category_id))

    # ===================
    # FACADE
    # ===================

    def map_attributes(self, category_id: int, external_data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Map one external record into the internal item schema.

        Raises:
            MappingError: On the first failing descriptor (no partial result)
        """
        table = self.get_table(category_id)
        mapped = apply_mapping(table, external_data, self.registry)
        logger.info("category_attributes_mapped", category_id=category_id, fields=len(mapped))
        return mapped

    def validate_mapped_data(self, category_id: int, mapped_data: Mapping[str, Any]) -> DataValidationResult:
        """Collect-all integrity check of a mapped record against the category."""
        specs = [CategoryAttributeSpec.from_category_attribute(row) for row in self.load_rows(category_id)]
        return validate_data(specs, mapped_data)

    def get_mapping_suggestions(self, category_id: int, external_data: Mapping[str, Any]) -> dict[str, str]:
        """Suggest mappings for external fields the category table leaves unused."""
        return get_suggestions(self.get_table(category_id), external_data)


# Singleton instance
_mapping_compiler: Optional[MappingCompiler] = None


def get_mapping_compiler() -> MappingCompiler:
    """Get or create a MappingCompiler without a row loader (pure compile only)."""
    global _mapping_compiler
    if _mapping_compiler is None:
        _mapping_compiler = MappingCompiler()
    return _mapping_compiler
