"""
Pydantic schemas for creature cards and the front-end state snapshot.
"""
import enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from barcard.orchestrator.fsm import CardPhase


class Rarity(str, enum.Enum):
    """Card rarity tiers, lowest to highest."""
    N = "N"
    R = "R"
    SR = "SR"
    SSR = "SSR"


class StatRange(BaseModel):
    """Suggested stat window for one rarity tier."""
    hp: tuple[int, int]
    atk: tuple[int, int]
    defense: tuple[int, int]


# Advisory only: requested from the text model, never enforced locally
RARITY_RANGES: Dict[Rarity, StatRange] = {
    Rarity.N: StatRange(hp=(100, 1000), atk=(10, 100), defense=(10, 100)),
    Rarity.R: StatRange(hp=(1001, 3000), atk=(101, 300), defense=(101, 300)),
    Rarity.SR: StatRange(hp=(3001, 6000), atk=(301, 600), defense=(301, 600)),
    Rarity.SSR: StatRange(hp=(6001, 9999), atk=(601, 999), defense=(601, 999)),
}


class DerivedStats(BaseModel):
    """Stats computed locally from the seed digits."""
    hp: int
    attack: int
    defense: int


class CreatureRecord(BaseModel):
    """Creature info returned by the text model."""
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(min_length=1, description="Short visual description for the image prompt")
    rarity: Rarity
    hp: int = 0
    atk: int = 0
    defense: int = Field(default=0, alias="def")

    @field_validator("hp", "atk", "defense", mode="before")
    @classmethod
    def lenient_stat(cls, value):
        """Stats are advisory: null or non-numeric becomes 0, floats are truncated."""
        if isinstance(value, int):
            return int(value)
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0


class SeedRequest(BaseModel):
    """Seed typed into the numeric field."""
    seed: str = ""


class DescriptionRequest(BaseModel):
    """Edited creature description."""
    description: str = ""


class CardState(BaseModel):
    """Snapshot of everything the front-end renders."""
    model_config = ConfigDict(populate_by_name=True)

    phase: CardPhase = CardPhase.IDLE
    seed: str = ""
    description: str = ""
    creature: Optional[CreatureRecord] = None
    derived_stats: Optional[DerivedStats] = None
    image: Optional[str] = Field(default=None, description="data:<mime>;base64,... URI")
    is_loading: bool = False
    loading_step: Optional[str] = None
    error: Optional[str] = None
    scanner_open: bool = False
    scanner_status: Optional[str] = None
