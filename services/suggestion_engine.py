"""
Mapping suggestions for the admin mapping assistant.

Looks up unmapped external field names in a static alias dictionary.
Fields with no alias are dropped silently.
"""

from typing import Any, Mapping, Optional

import structlog

from models.mapping import MappingTable
from utils.text_utils import normalize_key

logger = structlog.get_logger(__name__)

# Normalized external name → internal field
FIELD_ALIASES: Mapping[str, str] = {
    "name": "name",
    "title": "name",
    "description": "description",
    "desc": "description",
    "category": "category",
    "cat": "category",
    "type": "type",
    "condition": "condition",
    "status": "status",
    "location": "location",
    "address": "location",
    "price": "price",
    "cost": "price",
    "value": "price",
    "image": "image",
    "img": "image",
    "photo": "image",
    "picture": "image",
}


def suggest_field(external_field: str) -> Optional[str]:
    """Internal field for an external name, or None when no alias matches."""
    return FIELD_ALIASES.get(normalize_key(external_field))


def get_suggestions(table: MappingTable, external_data: Mapping[str, Any]) -> dict[str, str]:
    """
    Propose internal fields for external fields the table does not consume.

    External fields already used as some descriptor's external attribute are
    never proposed.

    Args:
        table: Active mapping table
        external_data: Sample external record (only its keys are read)

    Returns:
        external field -> suggested internal field
    """
    mapped = table.external_attributes
    suggestions: dict[str, str] = {}

    for external_field in external_data:
        if external_field in mapped:
            continue
        suggested = suggest_field(external_field)
        if suggested:
            suggestions[external_field] = suggested

    logger.debug(
        "mapping_suggestions_built",
        external_fields=len(external_data),
        suggestions=len(suggestions)
    )

    return suggestions
