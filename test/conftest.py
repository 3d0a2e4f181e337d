"""
Shared fixtures: fake providers and a fake camera.
"""
import asyncio
from typing import Dict, List, Optional

import pytest

from barcard.config import Settings
from barcard.providers.images.base import ImageProvider
from barcard.providers.llm.base import CreatureInfoProvider
from barcard.schemas.card import CreatureRecord, Rarity

PNG_URI = "data:image/png;base64,iVBORw0KGgo="


def make_record(description: str = "a goblin tinkerer with brass goggles", rarity: Rarity = Rarity.R) -> CreatureRecord:
    return CreatureRecord(description=description, rarity=rarity, hp=1500, atk=150, defense=120)


class FakeInfoClient(CreatureInfoProvider):
    """Returns canned records per seed; optional gates hold a seed's response."""

    def __init__(
        self,
        records: Optional[Dict[str, CreatureRecord]] = None,
        error: Optional[Exception] = None,
        gates: Optional[Dict[str, asyncio.Event]] = None,
    ):
        self.records = records or {}
        self.error = error
        self.gates = gates or {}
        self.calls: List[str] = []
        self.closed = False

    async def fetch_creature_info(self, seed: str) -> CreatureRecord:
        self.calls.append(seed)
        if seed in self.gates:
            await self.gates[seed].wait()
        if self.error:
            raise self.error
        return self.records.get(seed) or make_record(description=f"creature {seed}")

    async def aclose(self):
        self.closed = True


class FakeImageClient(ImageProvider):
    def __init__(self, result: str = PNG_URI, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.prompts: List[str] = []
        self.closed = False

    async def generate_image(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.result

    async def aclose(self):
        self.closed = True


class FakeCapture:
    """cv2.VideoCapture stand-in yielding a fixed list of frames."""

    def __init__(self, frames: Optional[list] = None, opened: bool = True):
        self.frames = list(frames or [])
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if self.frames:
            return True, self.frames.pop(0)
        return False, None

    def release(self):
        self.released = True


def text_decoder(frame):
    """Frames are plain strings; empty string means no symbol."""
    return [frame] if frame else []


@pytest.fixture
def info_client():
    return FakeInfoClient()


@pytest.fixture
def image_client():
    return FakeImageClient()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        GEMINI_API_KEY="test-gemini",
        HUGGING_FACE_API_KEY="test-hf",
        DEBOUNCE_MS=20,
    )
