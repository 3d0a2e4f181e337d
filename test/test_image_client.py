"""
Tests for the Hugging Face image client against a mocked HTTP transport.
"""
import base64
import json

import httpx
import pytest

from barcard.errors import ImageGenerationError, TransportError
from barcard.providers.images.huggingface_image_client import HuggingFaceImageClient, to_data_uri

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def make_client(handler) -> HuggingFaceImageClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HuggingFaceImageClient(api_key="hf_token", http_client=http_client)


async def test_generate_image_returns_data_uri():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/jpeg"})

    client = make_client(handler)
    uri = await client.generate_image("a goblin card")
    await client.aclose()

    assert uri == "data:image/jpeg;base64," + base64.b64encode(PNG_BYTES).decode()
    assert captured["url"].endswith("/stabilityai/stable-diffusion-3.5-medium")
    assert captured["auth"] == "Bearer hf_token"
    assert captured["body"] == {
        "inputs": "a goblin card",
        "parameters": {"num_inference_steps": 50, "guidance_scale": 7.5},
    }


async def test_http_error_is_wrapped():
    client = make_client(lambda request: httpx.Response(503, text="Model is loading"))

    with pytest.raises(ImageGenerationError) as exc_info:
        await client.generate_image("a golem")

    assert str(exc_info.value).startswith("Failed to generate image:")
    assert "503" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, TransportError)


async def test_empty_payload_is_an_error():
    client = make_client(lambda request: httpx.Response(200, content=b"", headers={"content-type": "image/png"}))

    with pytest.raises(ImageGenerationError):
        await client.generate_image("a golem")


def test_to_data_uri_defaults_mime():
    assert to_data_uri(b"abc", None) == "data:image/png;base64,YWJj"
    assert to_data_uri(b"abc", "image/webp; charset=binary") == "data:image/webp;base64,YWJj"
