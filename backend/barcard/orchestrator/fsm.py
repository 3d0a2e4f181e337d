"""
Finite State Machine (FSM) for creature card generation.
Manages state transitions: IDLE → AWAITING_DEBOUNCE → FETCHING_INFO → INFO_READY → FETCHING_IMAGE → DONE
"""
import logging
from enum import Enum
from typing import Dict

logger = logging.getLogger(__name__)


class CardPhase(str, Enum):
    """State definitions for the card generation workflow."""
    IDLE = "IDLE"
    AWAITING_DEBOUNCE = "AWAITING_DEBOUNCE"
    FETCHING_INFO = "FETCHING_INFO"
    INFO_READY = "INFO_READY"
    FETCHING_IMAGE = "FETCHING_IMAGE"
    DONE = "DONE"
    FAILED = "FAILED"


class FSM:
    """
    Finite State Machine for the card generation workflow.

    State transitions:
    IDLE → AWAITING_DEBOUNCE → FETCHING_INFO → INFO_READY → FETCHING_IMAGE → DONE
                                    ↓                            ↓
                                  IDLE (error)                 FAILED

    Any state can fall back to IDLE (seed cleared) or AWAITING_DEBOUNCE (seed changed).
    """

    # Valid state transitions
    TRANSITIONS: Dict[CardPhase, list[CardPhase]] = {
        CardPhase.IDLE: [CardPhase.AWAITING_DEBOUNCE, CardPhase.FETCHING_IMAGE],
        CardPhase.AWAITING_DEBOUNCE: [CardPhase.AWAITING_DEBOUNCE, CardPhase.FETCHING_INFO, CardPhase.IDLE],
        CardPhase.FETCHING_INFO: [
            CardPhase.INFO_READY,
            CardPhase.AWAITING_DEBOUNCE,
            CardPhase.IDLE,
        ],
        CardPhase.INFO_READY: [CardPhase.FETCHING_IMAGE, CardPhase.AWAITING_DEBOUNCE, CardPhase.IDLE],
        CardPhase.FETCHING_IMAGE: [
            CardPhase.DONE,
            CardPhase.FAILED,
            CardPhase.AWAITING_DEBOUNCE,
            CardPhase.IDLE,
        ],
        CardPhase.DONE: [CardPhase.FETCHING_IMAGE, CardPhase.AWAITING_DEBOUNCE, CardPhase.IDLE],
        CardPhase.FAILED: [CardPhase.FETCHING_IMAGE, CardPhase.AWAITING_DEBOUNCE, CardPhase.IDLE],
    }

    def __init__(self, name: str = "card", initial_state: CardPhase = CardPhase.IDLE):
        """
        Initialize FSM.

        Args:
            name: Label used in log lines
            initial_state: Starting state (default: IDLE)
        """
        self.name = name
        self.current_state = initial_state
        self.history: list[CardPhase] = [initial_state]

        logger.info(f"FSM initialized for {name} in state {initial_state.value}")

    def can_transition_to(self, target_state: CardPhase) -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target_state: Target state

        Returns:
            True if transition is allowed, False otherwise
        """
        allowed_states = self.TRANSITIONS.get(self.current_state, [])
        return target_state in allowed_states

    def transition_to(self, target_state: CardPhase) -> bool:
        """
        Attempt to transition to target state.

        Args:
            target_state: Target state

        Returns:
            True if transition succeeded, False otherwise
        """
        if not self.can_transition_to(target_state):
            logger.warning(
                f"Invalid transition for {self.name}: "
                f"{self.current_state.value} → {target_state.value}"
            )
            return False

        old_state = self.current_state
        self.current_state = target_state
        self.history.append(target_state)

        logger.debug(
            f"State transition for {self.name}: "
            f"{old_state.value} → {target_state.value}"
        )

        return True

    def reset(self):
        """Return to IDLE from any state."""
        if self.current_state != CardPhase.IDLE:
            self.current_state = CardPhase.IDLE
            self.history.append(CardPhase.IDLE)

    def __repr__(self) -> str:
        return f"FSM(name={self.name}, state={self.current_state.value})"
