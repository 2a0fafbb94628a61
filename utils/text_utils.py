"""
Text utilities for field names and free-text values from external taxonomies.

Used for attribute name generation, suggestion keys and condition normalization.
"""

import re
import unicodedata
from typing import Any, Optional

CANONICAL_CONDITIONS = ("new", "excellent", "good", "poor")

# Checked in order; first keyword hit wins
CONDITION_KEYWORDS = (
    ("new", ("new", "mint")),
    ("excellent", ("excellent", "like new")),
    ("good", ("good", "fair")),
    ("poor", ("poor", "damaged")),
)

DEFAULT_CONDITION = "good"


def fold_accents(text: str) -> str:
    """
    Strip accent marks, keeping the base characters.

    - "Décoration" → "Decoration"
    - "Tamaño" → "Tamano"
    """
    # NFD separates base chars from combining marks (category 'Mn')
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def normalize_key(field_name: Optional[str]) -> str:
    """
    Normalize an external field name for alias lookup.

    Lowercase ASCII letters and digits only:
    - "Product-Title" → "producttitle"
    - "IMG_1" → "img1"
    - "Catégorie" → "categorie"

    Args:
        field_name: External field name (any casing/punctuation)

    Returns:
        Normalized key, empty string for empty input
    """
    if not field_name:
        return ""
    return re.sub(r"[^a-z0-9]", "", fold_accents(field_name).lower())


def generate_attribute_name(display_label: str) -> str:
    """
    Derive a machine attribute name from a display label.

    - "Blade Size" → "blade_size"
    - "Power (Watts)" → "power_watts"
    - "Fuel-Type" → "fuel_type"

    The result matches the attribute name pattern unless the label has no
    usable characters or starts with a digit.
    """
    name = fold_accents(display_label).lower()
    name = re.sub(r"[^a-z0-9\s-]", "", name)
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"-+", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def truncate_text(value: Any, max_length: int) -> str:
    """
    Truncate a value's text to max_length characters.

    Empty values become "".
    """
    if value is None or value == "":
        return ""
    text = value if isinstance(value, str) else str(value)
    return text[:max_length]


def normalize_condition(value: Any) -> str:
    """
    Map free-text item condition onto the canonical vocabulary.

    - "Brand New" → "new"
    - "Excellent condition" → "excellent"
    - "Fair, some scratches" → "good"

    Unrecognized or empty input falls back to "good".
    """
    if value is None:
        return DEFAULT_CONDITION

    normalized = fold_accents(str(value)).lower().strip()
    if not normalized:
        return DEFAULT_CONDITION

    for canonical, keywords in CONDITION_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return canonical

    return DEFAULT_CONDITION
