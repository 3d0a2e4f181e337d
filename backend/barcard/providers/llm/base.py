"""
Base interface for creature info providers.
"""
from abc import ABC, abstractmethod

from barcard.schemas.card import CreatureRecord


class CreatureInfoProvider(ABC):
    """Abstract base class for text models that invent creatures."""

    @abstractmethod
    async def fetch_creature_info(self, seed: str) -> CreatureRecord:
        """
        Generate creature info for a seed.

        Args:
            seed: Non-empty numeric seed (validated by the caller)

        Returns:
            CreatureRecord

        Raises:
            CreatureInfoError: On any transport, parse or shape failure
        """
        pass

    async def aclose(self):
        """Release network resources."""
        pass
