"""
Gemini client that invents a creature for a numeric seed.
Uses the REST generateContent endpoint with a structured JSON response schema.
"""
import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from barcard.errors import CardError, CreatureInfoError, InvalidResponseShape, TransportError
from barcard.providers.llm.base import CreatureInfoProvider
from barcard.schemas.card import RARITY_RANGES, CreatureRecord, Rarity

logger = logging.getLogger(__name__)


def _ranges_text(field: str) -> str:
    return ", ".join(
        f"{rarity.value}: {getattr(window, field)[0]}-{getattr(window, field)[1]}"
        for rarity, window in RARITY_RANGES.items()
    )


CREATURE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "description": {
            "type": "STRING",
            "description": (
                "A short, visual description of a fantasy creature for an image prompt "
                "(e.g., a majestic griffin with fiery wings, a goblin tinkerer with goggles)."
            ),
        },
        "rarity": {
            "type": "STRING",
            "enum": [r.value for r in Rarity],
            "description": "The rarity of the card, one of: N, R, SR, SSR.",
        },
        "hp": {"type": "INTEGER", "description": f"Health points. For {_ranges_text('hp')}."},
        "atk": {"type": "INTEGER", "description": f"Attack power. For {_ranges_text('atk')}."},
        "def": {"type": "INTEGER", "description": f"Defense power. For {_ranges_text('defense')}."},
    },
    "required": ["description", "rarity", "hp", "atk", "def"],
}


def build_creature_instruction(seed: str) -> str:
    """Instruction text sent along with the response schema."""
    return (
        f'Based on the seed number "{seed}", generate information for a random fantasy creature '
        "for a battle card. Generate a wide variety of creatures (e.g., goblin, griffin, golem, "
        "lich, sea serpent), NOT just dragons. The rarity should influence the stats. "
        "Create a short, compelling visual description for the image prompt."
    )


def parse_creature_response(data: dict) -> CreatureRecord:
    """
    Extract and validate the creature record from a generateContent response.

    Args:
        data: Decoded JSON body of the API response

    Returns:
        CreatureRecord

    Raises:
        InvalidResponseShape: If the body has no text part, the text is not a JSON
            object, or description/rarity are missing
    """
    candidates = data.get("candidates") or []
    if not candidates:
        raise InvalidResponseShape("No candidates in response")

    parts = candidates[0].get("content", {}).get("parts", [])
    text = parts[0].get("text", "") if parts else ""
    if not text.strip():
        raise InvalidResponseShape("Empty response")

    try:
        payload = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise InvalidResponseShape(f"Response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidResponseShape("Response JSON is not an object")

    # Basic validation
    if not payload.get("description") or not payload.get("rarity"):
        raise InvalidResponseShape("Invalid data structure received from API.")

    try:
        return CreatureRecord.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidResponseShape(f"Invalid creature record: {e.error_count()} error(s)") from e


class GeminiCreatureClient(CreatureInfoProvider):
    """
    Client for Google's Gemini models (gemini-2.5-flash).
    Constructed once at startup and shared by the controller.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Google AI API key
            model_name: Model identifier (default: gemini-2.5-flash)
            base_url: API root
            timeout: Request timeout in seconds
            http_client: Optional preconfigured AsyncClient
        """
        if not api_key:
            raise ValueError("Gemini API key is required")

        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        logger.info(f"Initialized GeminiCreatureClient with model: {self.model_name}")

    async def fetch_creature_info(self, seed: str) -> CreatureRecord:
        logger.info(f"[GEMINI] Generating creature for seed {seed}")

        try:
            data = await self._generate(build_creature_instruction(seed))
            record = parse_creature_response(data)
        except CardError as e:
            logger.error(f"[GEMINI] Error generating creature info: {e}")
            raise CreatureInfoError() from e
        except Exception as e:
            logger.error(f"[GEMINI] Unexpected error generating creature info: {e}", exc_info=True)
            raise CreatureInfoError() from e

        logger.info(f"[GEMINI] Creature ready: rarity={record.rarity.value}, hp={record.hp}")
        return record

    async def _generate(self, instruction: str) -> dict:
        url = f"{self.base_url}/models/{self.model_name}:generateContent"

        request_body = {
            "contents": [{"parts": [{"text": instruction}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": CREATURE_SCHEMA,
            },
        }

        try:
            response = await self._client.post(
                url,
                json=request_body,
                headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                "creature info", f"API error {e.response.status_code}: {e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError("creature info", f"Request error: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseShape("Response body is not JSON") from e

    async def aclose(self):
        await self._client.aclose()
