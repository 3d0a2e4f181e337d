"""
Tests for seed normalisation and barcode stat derivation.
"""
import pytest

from barcard.errors import ValidationError
from barcard.utils.stats import derive_stats, normalize_seed


class TestNormalizeSeed:

    def test_strips_non_digits(self):
        assert normalize_seed("80-05 12a3") == "8005123"

    def test_caps_length_at_13(self):
        assert normalize_seed("12345678901234567") == "1234567890123"

    def test_empty_and_none(self):
        assert normalize_seed("") == ""
        assert normalize_seed(None) == ""
        assert normalize_seed("abc") == ""


class TestDeriveStats:

    def test_single_digit(self):
        stats = derive_stats("5")
        assert (stats.hp, stats.attack, stats.defense) == (0, 0, 10)

    def test_zero(self):
        stats = derive_stats("0")
        assert (stats.hp, stats.attack, stats.defense) == (0, 0, 0)

    def test_exactly_nine_digits(self):
        # num % 5 = 4, num % 3 = 0, num % 4 = 1
        stats = derive_stats("123456789")
        num = 123456789
        assert stats.hp == 123 * (10 + num % 5)
        assert stats.attack == 456 * (1 + num % 3)
        assert stats.defense == 789 * (1 + num % 4)
        assert (stats.hp, stats.attack, stats.defense) == (1722, 456, 1578)

    def test_long_seed_uses_first_nine_digits_and_full_modulo(self):
        seed = "8005123456789"
        num = int(seed)
        stats = derive_stats(seed)
        assert stats.hp == 800 * (10 + num % 5)
        assert stats.attack == 512 * (1 + num % 3)
        assert stats.defense == 345 * (1 + num % 4)

    def test_trailing_digits_past_nine_do_not_change_slices(self):
        a = derive_stats("8005123450000")
        b = derive_stats("8005123459999")
        # Same slices, only the modulo factors may differ
        assert a.hp // (10 + 8005123450000 % 5) == b.hp // (10 + 8005123459999 % 5) == 800

    @pytest.mark.parametrize("seed", ["7", "42", "123", "98765", "12345678"])
    def test_padding_is_always_nine(self, seed):
        padded = seed.zfill(9)
        assert len(padded) == 9
        num = int(seed)
        stats = derive_stats(seed)
        assert stats.defense == int(padded[6:9]) * (1 + num % 4)

    @pytest.mark.parametrize("seed", ["", "12a", "-5", "１２３"])
    def test_invalid_seed(self, seed):
        with pytest.raises(ValidationError):
            derive_stats(seed)
