"""
Tests for barcode cleanup and plausibility.
"""

import pytest
from medicate.barcode import is_plausible_barcode, normalize_barcode


class TestNormalizeBarcode:
    def test_strips_non_digits(self):
        assert normalize_barcode(" 893-6036 021012 ") == "8936036021012"

    def test_none_and_numbers(self):
        assert normalize_barcode(None) == ""
        assert normalize_barcode(8936036021012) == "8936036021012"


class TestPlausibleBarcode:
    @pytest.mark.parametrize("code", ["12345678", "8936036021012", "12345678901234"])
    def test_plausible(self, code):
        assert is_plausible_barcode(code)

    @pytest.mark.parametrize("code", ["", "1234567", "123456789012345", "8936036O21012"])
    def test_implausible(self, code):
        assert not is_plausible_barcode(code)
