"""
Unit tests for text utilities.
"""

import pytest

from utils.text_utils import (
    fold_accents,
    generate_attribute_name,
    normalize_condition,
    normalize_key,
    truncate_text,
)


class TestNormalization:

    def test_fold_accents(self):
        assert fold_accents("Décoration") == "Decoration"
        assert fold_accents("Tamaño") == "Tamano"

    @pytest.mark.parametrize("value,expected", [
        ("Product-Title", "producttitle"),
        ("IMG_1", "img1"),
        ("Catégorie", "categorie"),
        (None, ""),
        ("", ""),
    ])
    def test_normalize_key(self, value, expected):
        assert normalize_key(value) == expected


class TestGenerateAttributeName:

    @pytest.mark.parametrize("label,expected", [
        ("Blade Size", "blade_size"),
        ("Power (Watts)", "power_watts"),
        ("Fuel-Type", "fuel_type"),
        ("  Max   RPM  ", "max_rpm"),
        ("Tamaño", "tamano"),
    ])
    def test_generate(self, label, expected):
        assert generate_attribute_name(label) == expected


class TestTruncateText:

    def test_truncate(self):
        assert truncate_text("abcdef", 3) == "abc"
        assert truncate_text("ab", 3) == "ab"
        assert truncate_text(12345, 2) == "12"
        assert truncate_text(None, 3) == ""


class TestNormalizeCondition:

    @pytest.mark.parametrize("value,expected", [
        ("New", "new"),
        ("Brand new in box", "new"),
        ("Mint", "new"),
        ("Like new", "new"),
        ("Excellent", "excellent"),
        ("Good", "good"),
        ("Fair", "good"),
        ("Used", "good"),
        ("Working", "good"),
        ("Poor", "poor"),
        ("Damaged box", "poor"),
        ("Broken handle", "good"),
        ("Dañado", "good"),
        ("", "good"),
        (None, "good"),
    ])
    def test_condition(self, value, expected):
        assert normalize_condition(value) == expected
