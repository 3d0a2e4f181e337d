"""
Base interface for image providers.
"""
from abc import ABC, abstractmethod


class ImageProvider(ABC):
    """Abstract base class for text-to-image providers."""

    @abstractmethod
    async def generate_image(self, prompt: str) -> str:
        """
        Generate an image from a prompt.

        Args:
            prompt: Text prompt for image generation

        Returns:
            Image as a data URI (data:<mime>;base64,...)

        Raises:
            ImageGenerationError: On any failure
        """
        pass

    async def aclose(self):
        """Release network resources."""
        pass
