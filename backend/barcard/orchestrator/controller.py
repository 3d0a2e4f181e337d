"""
Generation controller: owns the card state and sequences the two generation calls.

Seed input is debounced before creature info is requested; image generation is
an explicit user action once a description and creature are available.
"""
import logging
from typing import Callable, List, Optional

from barcard.errors import CardError, CreatureInfoError, ValidationError
from barcard.orchestrator.debounce import Debouncer
from barcard.orchestrator.fsm import FSM, CardPhase
from barcard.providers.images.base import ImageProvider
from barcard.providers.llm.base import CreatureInfoProvider
from barcard.scanner.session import ScannerSession
from barcard.schemas.card import CardState
from barcard.utils.prompt_formatter import format_card_prompt, format_stats_prompt
from barcard.utils.stats import derive_stats, normalize_seed

logger = logging.getLogger(__name__)

INFO_STEP = "Summoning creature info..."
IMAGE_STEP = "Painting creature card..."

StateListener = Callable[[CardState], None]
ScannerFactory = Callable[..., ScannerSession]


class GenerationController:
    """
    Single-user controller for the card front-end.

    Pipelines:
        creature: seed → (debounce) → text model → description + stats → image
        barcode:  seed → stats derived locally → image (no text model call)
    """

    def __init__(
        self,
        info_client: CreatureInfoProvider,
        image_client: ImageProvider,
        debounce_ms: int = 500,
        pipeline: str = "creature",
        scanner_factory: Optional[ScannerFactory] = None,
    ):
        """
        Args:
            info_client: Shared creature info provider
            image_client: Shared image provider
            debounce_ms: Quiet period before creature info is requested
            pipeline: "creature" or "barcode"
            scanner_factory: Builds a ScannerSession from callbacks (None disables scanning)
        """
        if pipeline not in ("creature", "barcode"):
            raise ValueError(f"Unknown pipeline: {pipeline}")

        self.info_client = info_client
        self.image_client = image_client
        self.pipeline = pipeline

        self.state = CardState()
        self.fsm = FSM("card")
        self.debouncer = Debouncer(debounce_ms, name="creature-info")

        # Only the fetch holding the latest sequence number may touch state
        self._info_seq = 0
        self._info_loading = False
        self._image_loading = False

        self._listeners: List[StateListener] = []
        self._scanner_factory = scanner_factory
        self._scanner: Optional[ScannerSession] = None

        logger.info(f"[CARD] Controller ready (pipeline={pipeline}, debounce={debounce_ms}ms)")

    # ------------------------------------------------------------------
    # State publishing
    # ------------------------------------------------------------------

    def snapshot(self) -> CardState:
        """Copy of the current state."""
        self._sync()
        return self.state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every state change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _sync(self):
        self.state.phase = self.fsm.current_state
        self.state.is_loading = self._info_loading or self._image_loading
        if self._image_loading:
            self.state.loading_step = IMAGE_STEP
        elif self._info_loading:
            self.state.loading_step = INFO_STEP
        else:
            self.state.loading_step = None

    def _publish(self):
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"[CARD] State listener failed: {e}")

    # ------------------------------------------------------------------
    # Seed & description
    # ------------------------------------------------------------------

    def set_seed(self, raw: str) -> CardState:
        """
        Update the seed from the numeric field.

        Non-digits are stripped. A non-empty seed (re)starts the debounce timer;
        an empty seed clears the creature immediately without any network call.
        Must be called from the running event loop.
        """
        seed = normalize_seed(raw)
        changed = seed != self.state.seed
        self.state.seed = seed

        if not seed:
            self._clear_creature()
            self.state.derived_stats = None
            self.fsm.reset()
            logger.info("[CARD] Seed cleared")
            self._publish()
            return self.snapshot()

        self.state.derived_stats = derive_stats(seed)

        if self.pipeline == "barcode":
            self._publish()
            return self.snapshot()

        if changed:
            self._clear_creature()
        elif self.state.creature is not None or self.debouncer.pending or self._info_loading:
            # Same seed, nothing to refetch
            return self.snapshot()

        self.fsm.transition_to(CardPhase.AWAITING_DEBOUNCE)
        self.debouncer.schedule(self._fetch_info)
        logger.debug(f"[CARD] Seed {seed} scheduled for creature info")

        self._publish()
        return self.snapshot()

    def set_description(self, description: str) -> CardState:
        """Replace the description used for the image prompt."""
        self.state.description = description or ""
        self._publish()
        return self.snapshot()

    def _clear_creature(self):
        self.debouncer.cancel()
        # Any fetch still in flight is now stale
        self._info_seq += 1
        self._info_loading = False
        self.state.creature = None
        self.state.description = ""
        # The card belonged to the previous seed
        self.state.image = None

    # ------------------------------------------------------------------
    # Creature info
    # ------------------------------------------------------------------

    async def _fetch_info(self):
        self._info_seq += 1
        seq = self._info_seq
        seed = self.state.seed

        self.fsm.transition_to(CardPhase.FETCHING_INFO)
        self._info_loading = True
        self.state.error = None
        self._publish()

        logger.info(f"[CARD] Fetching creature info for seed {seed} (request #{seq})")

        try:
            record = await self.info_client.fetch_creature_info(seed)
        except Exception as e:
            if seq != self._info_seq:
                logger.info(f"[CARD] Discarding stale failure of request #{seq}")
                return
            logger.error(f"[CARD] Creature info failed for seed {seed}: {e}")
            self._info_loading = False
            self.state.creature = None
            self.state.image = None
            self.state.error = str(e) if isinstance(e, CardError) else CreatureInfoError.MESSAGE
            if self.fsm.current_state == CardPhase.FETCHING_INFO:
                self.fsm.transition_to(CardPhase.IDLE)
            self._publish()
            return

        if seq != self._info_seq:
            logger.info(f"[CARD] Discarding stale result of request #{seq}")
            return

        self._info_loading = False
        self.state.creature = record
        self.state.description = record.description
        self.fsm.transition_to(CardPhase.INFO_READY)
        logger.info(f"[CARD] Creature ready for seed {seed}: {record.rarity.value}")
        self._publish()

    # ------------------------------------------------------------------
    # Image
    # ------------------------------------------------------------------

    def can_generate(self) -> bool:
        """Whether the generate action is enabled."""
        if self._info_loading or self._image_loading:
            return False
        if not self.state.seed or not self.state.description.strip():
            return False
        return self.pipeline == "barcode" or self.state.creature is not None

    async def generate_image(self) -> CardState:
        """
        Format the prompt and request the card image.

        Returns:
            State after the attempt settled (image or error set)

        Raises:
            ValidationError: If the action is not enabled; no network call is made
        """
        if self._info_loading or self._image_loading:
            raise ValidationError("A generation is already in progress.")

        description = self.state.description.strip()
        if not self.state.seed or not description:
            raise ValidationError("Please enter a number and a description.")

        if self.pipeline == "barcode":
            prompt = format_stats_prompt(description, derive_stats(self.state.seed))
        else:
            if self.state.creature is None:
                raise ValidationError("Creature information is not ready yet.")
            prompt = format_card_prompt(description, self.state.creature)

        self.fsm.transition_to(CardPhase.FETCHING_IMAGE)
        self._image_loading = True
        self.state.error = None
        self.state.image = None
        self._publish()

        try:
            image = await self.image_client.generate_image(prompt)
        except Exception as e:
            logger.error(f"[CARD] Image generation failed: {e}")
            self.state.image = None
            self.state.error = str(e) if isinstance(e, CardError) else "Failed to generate image."
            if self.fsm.current_state == CardPhase.FETCHING_IMAGE:
                self.fsm.transition_to(CardPhase.FAILED)
        else:
            self.state.image = image
            self.state.error = None
            if self.fsm.current_state == CardPhase.FETCHING_IMAGE:
                self.fsm.transition_to(CardPhase.DONE)
            logger.info("[CARD] Image ready")
        finally:
            self._image_loading = False
            self._publish()

        return self.snapshot()

    # ------------------------------------------------------------------
    # Scanner
    # ------------------------------------------------------------------

    def open_scanner(self) -> CardState:
        """Open the scanner overlay and start the camera."""
        if self._scanner_factory is None:
            raise ValidationError("Scanner is not available.")

        if self._scanner is None or not self._scanner.running:
            self._scanner = self._scanner_factory(
                on_scan=self.handle_scan,
                on_status=self._on_scanner_status,
                on_close=self._on_scanner_closed,
            )
            self._scanner.start()

        self.state.scanner_open = True
        self._publish()
        return self.snapshot()

    async def close_scanner(self) -> CardState:
        """Close the overlay; returns once the camera is released."""
        scanner = self._scanner
        self._scanner = None
        if scanner is not None:
            await scanner.stop()
        self.state.scanner_open = False
        self._publish()
        return self.snapshot()

    def handle_scan(self, text: str) -> CardState:
        """A decoded code behaves like typing the seed, and closes the overlay."""
        logger.info(f"[CARD] Scanned: {text}")
        if self._scanner is not None:
            self._scanner.request_stop()
        self.state.scanner_open = False
        return self.set_seed(text)

    def _on_scanner_status(self, status: str):
        self.state.scanner_status = status
        self._publish()

    def _on_scanner_closed(self):
        self.state.scanner_open = False
        self._publish()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self):
        """Cancel pending work and release the camera."""
        self.debouncer.cancel()
        if self._scanner is not None:
            await self.close_scanner()
        self._listeners.clear()
