"""Game state resource describing the active screen."""
from dataclasses import dataclass
from enum import Enum, auto


class GameMode(Enum):
    """Top-level screens; the host shell renders whichever one is active."""
    ONBOARDING = auto()
    GAME_SELECT = auto()
    COLOR_MATCH = auto()
    MATCH3 = auto()
    LEADERBOARD = auto()


@dataclass
class GameState:
    """Singleton component storing the currently active game mode."""
    mode: GameMode = GameMode.ONBOARDING
