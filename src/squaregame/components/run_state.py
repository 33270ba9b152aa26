from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ColorRunState:
    """Run-level state for a Color Match board.

    ``active`` is true only between a reset and completion or abandonment;
    taps, confirmations and the elapsed clock are ignored otherwise.
    """

    difficulty: str
    message: str = ""
    elapsed: float = 0.0
    completed: bool = False
    active: bool = False
    run_id: int = 0


@dataclass(slots=True)
class SwapRunState:
    """Run-level state for a Match-3 Rush session."""

    score: int = 0
    streak: int = 0
    message: str = ""
    game_over: bool = False
    alert_text: Optional[str] = None
    cascade_pending: bool = False
    cascade_depth: int = 0
    run_id: int = 0
