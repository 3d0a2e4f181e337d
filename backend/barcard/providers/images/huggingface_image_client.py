"""
Hugging Face inference client for text-to-image generation.
Returns generated images as base64 data URIs ready for display.
"""
import base64
import logging
from typing import Optional

import httpx

from barcard.errors import ImageGenerationError, TransportError
from barcard.providers.images.base import ImageProvider

logger = logging.getLogger(__name__)

# Fixed inference parameters
NUM_INFERENCE_STEPS = 50
GUIDANCE_SCALE = 7.5

DEFAULT_MIME = "image/png"


def to_data_uri(content: bytes, content_type: Optional[str]) -> str:
    """
    Encode raw image bytes as a data URI.

    Args:
        content: Image bytes
        content_type: MIME type reported by the provider (parameters are dropped)

    Returns:
        data:<mime>;base64,<payload>
    """
    mime = (content_type or "").split(";")[0].strip() or DEFAULT_MIME
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime};base64,{encoded}"


class HuggingFaceImageClient(ImageProvider):
    """Stable Diffusion via the Hugging Face inference API."""

    def __init__(
        self,
        api_key: str,
        model: str = "stabilityai/stable-diffusion-3.5-medium",
        base_url: str = "https://router.huggingface.co/hf-inference/models",
        num_inference_steps: int = NUM_INFERENCE_STEPS,
        guidance_scale: float = GUIDANCE_SCALE,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Hugging Face image client.

        Args:
            api_key: Hugging Face access token
            model: Model repository id
            base_url: Inference API root
            num_inference_steps: Denoising steps sent with every request
            guidance_scale: Classifier-free guidance sent with every request
            timeout: Request timeout in seconds
            http_client: Optional preconfigured AsyncClient
        """
        if not api_key:
            raise ValueError("Hugging Face API key is required")

        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.num_inference_steps = num_inference_steps
        self.guidance_scale = guidance_scale
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

        logger.info(f"Hugging Face image client initialized with model: {self.model}")

    async def generate_image(self, prompt: str) -> str:
        logger.info(f"[HF] Generating image with prompt: {prompt[:50]}...")

        try:
            content, content_type = await self._text_to_image(prompt)
            if not content:
                raise ValueError("Empty image payload")
        except Exception as e:
            logger.error(f"[HF] Error generating image: {e}")
            raise ImageGenerationError(f"Failed to generate image: {e}") from e

        data_uri = to_data_uri(content, content_type)
        logger.info(f"[HF] Image ready ({len(content)} bytes, {data_uri[5:data_uri.index(';')]})")
        return data_uri

    async def _text_to_image(self, prompt: str) -> tuple[bytes, Optional[str]]:
        url = f"{self.base_url}/{self.model}"

        payload = {
            "inputs": prompt,
            "parameters": {
                "num_inference_steps": self.num_inference_steps,
                "guidance_scale": self.guidance_scale,
            },
        }

        try:
            response = await self._client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}", "Accept": "image/*"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                "image", f"API error {e.response.status_code}: {e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError("image", f"Request error: {e}") from e

        return response.content, response.headers.get("content-type")

    async def aclose(self):
        await self._client.aclose()
