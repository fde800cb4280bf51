"""Unit tests for Value Objects."""

import pytest

from medledger.domain.exceptions import ValidationError
from medledger.domain.model.value_objects import ItemKey, Quantity, coerce_count


class TestQuantity:

    def test_positive(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(2.5)  # type: ignore[arg-type]


class TestCoerceCount:

    def test_integers(self):
        assert coerce_count("7") == 7
        assert coerce_count(3) == 3

    def test_float_text_truncates(self):
        assert coerce_count("4.0") == 4

    def test_junk_is_zero(self):
        assert coerce_count("") == 0
        assert coerce_count(None) == 0
        assert coerce_count("n/a") == 0


class TestItemKey:

    def test_presentation_differences_are_equal(self):
        a = ItemKey("Amoxicillin", "500mg", "Cabinet 1")
        b = ItemKey(" amoxicillin ", "500MG", "cabinet  1")
        assert a.same_as(b)

    def test_location_matters_by_default(self):
        a = ItemKey("Amoxicillin", "500mg", "Cabinet 1")
        b = ItemKey("Amoxicillin", "500mg", "Cabinet 2")
        assert not a.same_as(b)
        assert a.same_as(b, with_location=False)

    def test_strict_dose_ignores_inner_spaces(self):
        a = ItemKey("Zinc", "5 mg", "Shelf")
        b = ItemKey("Zinc", "5mg", "Shelf")
        assert not a.same_as(b)
        assert a.same_as(b, strict_dose=True)

    def test_str(self):
        assert str(ItemKey("Zinc", "5mg", "Shelf")) == "Zinc 5mg @ Shelf"
        assert str(ItemKey("Zinc", "5mg")) == "Zinc 5mg"
