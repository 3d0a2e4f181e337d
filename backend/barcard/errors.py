"""
Error taxonomy for card generation.
"""


class CardError(Exception):
    """Base class for all Barcard errors."""


class ValidationError(CardError):
    """Bad local input (seed, description) or an action that is not allowed right now."""


class InvalidResponseShape(CardError):
    """Structured model response is missing required fields."""


class TransportError(CardError):
    """An external API could not be reached or rejected the request."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"{stage}: {message}")


class CreatureInfoError(CardError):
    """User-facing failure of the creature info stage."""

    MESSAGE = "Failed to generate creature information from the AI. Please try again."

    def __init__(self, message: str = MESSAGE):
        super().__init__(message)


class ImageGenerationError(CardError):
    """User-facing failure of the image stage."""


class ConfigurationError(CardError):
    """Required configuration is missing. Fatal at startup."""
