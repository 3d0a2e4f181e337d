"""
Prompt formatting for the image model.
Turns a creature description plus its stats into a single text-to-image prompt.
"""
from barcard.schemas.card import CreatureRecord, DerivedStats

CARD_FRAME = (
    "The creature is shown inside an ornate trading card frame with a gilded border, "
    "a name banner at the top and a stat panel at the bottom."
)

STYLE_QUALIFIERS = (
    "detailed digital painting, dramatic lighting, vibrant colors, "
    "high fantasy game art, sharp focus, masterpiece"
)


def format_card_prompt(description: str, creature: CreatureRecord) -> str:
    """
    Build the image prompt for an AI-generated creature.

    Args:
        description: Creature description (possibly edited by the user)
        creature: Creature info supplying rarity and stats

    Returns:
        Prompt string, identical for identical inputs
    """
    return (
        f"A fantasy battle card featuring {description}.\n"
        f"Rarity: {creature.rarity.value}.\n"
        f"Stats - HP: {creature.hp}, ATK: {creature.atk}, DEF: {creature.defense}.\n"
        f"{CARD_FRAME}\n"
        f"Style: {STYLE_QUALIFIERS}."
    )


def format_stats_prompt(description: str, stats: DerivedStats) -> str:
    """
    Build the image prompt from barcode-derived stats.

    Args:
        description: Character description typed by the user
        stats: Stats derived from the seed digits

    Returns:
        Prompt string
    """
    return (
        "Generate a fantasy character based on the following:\n"
        f'Description: "{description}".\n'
        "This character is a powerful being derived from a unique numerical signature.\n"
        "Base stats:\n"
        f"- HP: {stats.hp}\n"
        f"- Attack: {stats.attack}\n"
        f"- Defense: {stats.defense}\n"
        "The visual design should reflect these stats. A high HP character might be large "
        "and sturdy, while a high attack character could have prominent weapons or energy auras. "
        "The art style should be detailed digital painting, suitable for a fantasy game."
    )
