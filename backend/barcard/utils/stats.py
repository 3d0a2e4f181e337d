"""
Seed handling and barcode stat derivation.
Stats follow the Barcode Battler style: digit groups of the seed scaled by small modulo factors.
"""
import re

from barcard.schemas.card import DerivedStats
from barcard.errors import ValidationError

# Longest code accepted from the input field or the scanner (EAN-13)
MAX_SEED_LENGTH = 13

# Seeds are left-padded to this width before slicing
PADDED_WIDTH = 9

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_seed(raw: str) -> str:
    """
    Strip non-digit characters and cap the length.

    Args:
        raw: Text typed by the user or decoded by the scanner

    Returns:
        Digit-only seed of at most 13 characters (may be empty)
    """
    return _NON_DIGITS.sub("", raw or "")[:MAX_SEED_LENGTH]


def derive_stats(seed: str) -> DerivedStats:
    """
    Derive HP / attack / defense from a numeric seed.

    The seed is left-padded with '0' to 9 characters and sliced into three
    3-digit groups. Seeds longer than 9 digits are not padded and digits past
    index 9 are ignored by the slices, while the modulo factors always use the
    full integer value.

    Args:
        seed: Digit-only seed

    Returns:
        DerivedStats

    Raises:
        ValidationError: If the seed is empty or not all digits
    """
    if not seed or not seed.isascii() or not seed.isdigit():
        raise ValidationError("Please enter a valid number.")

    num = int(seed)
    padded = seed.zfill(PADDED_WIDTH)

    hp = int(padded[0:3]) * (10 + num % 5)
    attack = int(padded[3:6]) * (1 + num % 3)
    defense = int(padded[6:9]) * (1 + num % 4)

    return DerivedStats(hp=hp, attack=attack, defense=defense)
