"""
Deterministic merge of two mapping tables.

Precedence on a shared key:
1. A transform descriptor beats a direct one
2. A required descriptor beats an optional one
3. Otherwise the first table's descriptor is kept

The merge is left-biased and not commutative: resolve(a, b) can differ
from resolve(b, a).
"""

from typing import Optional

import structlog

from models.mapping import MappingDescriptor, MappingTable, MappingType

logger = structlog.get_logger(__name__)


def pick_descriptor(
    existing: MappingDescriptor,
    incoming: MappingDescriptor
) -> tuple[MappingDescriptor, str]:
    """
    Choose between two descriptors for the same key.

    Returns:
        Tuple of (winner, reason)
    """
    if existing.mapping_type == MappingType.DIRECT and incoming.mapping_type == MappingType.TRANSFORM:
        return incoming, "transform_over_direct"
    if existing.mapping_type == MappingType.TRANSFORM and incoming.mapping_type == MappingType.DIRECT:
        return existing, "transform_over_direct"

    if incoming.is_required and not existing.is_required:
        return incoming, "required_over_optional"
    if existing.is_required and not incoming.is_required:
        return existing, "required_over_optional"

    return existing, "left_bias"


def resolve(table_a: MappingTable, table_b: MappingTable) -> MappingTable:
    """
    Merge table_b into table_a.

    Keys only in table_b are appended in table_b's order. attribute_defaults
    merge the same way, table_a winning ties.

    Args:
        table_a: Base table (wins full ties)
        table_b: Overlay table

    Returns:
        New merged MappingTable; inputs are untouched
    """
    merged: dict[str, MappingDescriptor] = dict(table_a.descriptors)
    conflicts = 0

    for key, incoming in table_b.items():
        existing: Optional[MappingDescriptor] = merged.get(key)
        if existing is None:
            merged[key] = incoming
            continue

        winner, reason = pick_descriptor(existing, incoming)
        merged[key] = winner
        conflicts += 1
        logger.debug(
            "mapping_conflict_resolved",
            key=key,
            reason=reason,
            kept="a" if winner is existing else "b"
        )

    defaults = {**table_b.attribute_defaults, **table_a.attribute_defaults}

    logger.info(
        "mapping_tables_merged",
        left=len(table_a),
        right=len(table_b),
        merged=len(merged),
        conflicts=conflicts
    )

    return MappingTable(descriptors=merged, attribute_defaults=defaults)
