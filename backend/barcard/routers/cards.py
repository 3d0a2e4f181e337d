"""
Card router: the controls of the creature card front-end.
"""
import asyncio
import logging

import orjson
from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from barcard.errors import ValidationError
from barcard.orchestrator.controller import GenerationController
from barcard.schemas.card import CardState, DerivedStats, DescriptionRequest, SeedRequest
from barcard.utils.stats import derive_stats, normalize_seed

logger = logging.getLogger(__name__)

router = APIRouter()


class ScanRequest(BaseModel):
    """Code decoded by a client-side scanner."""
    text: str


def get_controller(request: Request) -> GenerationController:
    """FastAPI dependency for the process-wide controller."""
    return request.app.state.controller


@router.get("/state", response_model=CardState)
async def get_state(controller: GenerationController = Depends(get_controller)):
    """Current card state."""
    return controller.snapshot()


@router.put("/seed", response_model=CardState)
async def put_seed(request: SeedRequest, controller: GenerationController = Depends(get_controller)):
    """
    Update the numeric seed.

    Non-digits are stripped and the seed is capped at 13 digits. Creature info is
    requested once the seed has been stable for the debounce period.
    """
    return controller.set_seed(request.seed)


@router.put("/description", response_model=CardState)
async def put_description(
    request: DescriptionRequest,
    controller: GenerationController = Depends(get_controller)
):
    """Edit the creature description."""
    return controller.set_description(request.description)


@router.post("/generate", response_model=CardState)
async def generate(controller: GenerationController = Depends(get_controller)):
    """
    Generate the card image for the current creature.

    Returns:
        State after the attempt (image or error set)

    Raises:
        400: Seed, description or creature missing, or a generation is already running
    """
    try:
        return await controller.generate_image()
    except ValidationError as e:
        logger.warning(f"[CARD] Generate rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/scan", response_model=CardState)
async def post_scan(request: ScanRequest, controller: GenerationController = Depends(get_controller)):
    """Feed a code decoded by the client, same as typing it."""
    return controller.handle_scan(request.text)


@router.post("/scanner/open", response_model=CardState)
async def open_scanner(controller: GenerationController = Depends(get_controller)):
    """Start the server-side camera scanner."""
    try:
        return controller.open_scanner()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/scanner/close", response_model=CardState)
async def close_scanner(controller: GenerationController = Depends(get_controller)):
    """Stop the camera scanner."""
    return await controller.close_scanner()


@router.get("/stats/{seed}", response_model=DerivedStats)
async def get_stats(seed: str):
    """Barcode stats for any seed."""
    try:
        return derive_stats(normalize_seed(seed))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.websocket("/ws")
async def state_stream(websocket: WebSocket):
    """Push a state snapshot on connect and after every change."""
    controller: GenerationController = websocket.app.state.controller
    await websocket.accept()

    queue: asyncio.Queue[CardState] = asyncio.Queue()
    unsubscribe = controller.subscribe(queue.put_nowait)
    queue.put_nowait(controller.snapshot())

    try:
        while True:
            state = await queue.get()
            await websocket.send_text(orjson.dumps(state.model_dump(mode="json", by_alias=True)).decode())
    except WebSocketDisconnect:
        logger.debug("[WS] Client disconnected")
    finally:
        unsubscribe()
