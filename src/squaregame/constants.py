from pathlib import Path

# ============================================================================
# GAME IDENTIFIERS
# ============================================================================
GAME_COLOR_MATCH = "color_match"
GAME_MATCH3 = "match3"


# ============================================================================
# COLOR MATCH
# ============================================================================
# Ordered palette; a difficulty uses the first N entries.
COLOR_PALETTE = ["pink", "yellow", "blue", "green", "purple", "orange", "red"]

# difficulty name -> (grid size, number of colors)
DIFFICULTY_LEVELS = {
    "easy": (3, 3),
    "medium": (5, 5),
    "hard": (7, 7),
}
DEFAULT_DIFFICULTY = "easy"


# ============================================================================
# MATCH-3 RUSH
# ============================================================================
MATCH3_BOARD_SIZE = 5
MATCH_RUN_LENGTH = 3

# category name -> display label
MATCH3_TILE_TYPES = {
    "red_star": "Red Star",
    "blue_circle": "Blue Circle",
    "green_heart": "Green Heart",
    "purple_square": "Purple Square",
    "gold_crown": "Gold Crown",
}

POINTS_PER_MATCH = 10
COMBO_BONUS_PER_STREAK = 5

# Delays (seconds) between the steps of a swap resolution.
SWAP_RESOLVE_DELAY = 0.3
MATCH_REFILL_DELAY = 0.6
REFILL_RESCAN_DELAY = 0.4

TIME_LIMIT = 60.0
TIME_WARNING_THRESHOLDS = (30, 10)
TIME_ALERT_DURATION = 2.0


# ============================================================================
# SCORES & PERSISTENCE
# ============================================================================
LEADERBOARD_SIZE = 10

STORAGE_KEYS = {
    GAME_COLOR_MATCH: "ColorMatchRecords",
    GAME_MATCH3: "Match3GameRecords",
}
USERNAME_KEY = "username"

# True when lower metrics rank first (elapsed time), False for points.
ASCENDING_METRIC = {
    GAME_COLOR_MATCH: True,
    GAME_MATCH3: False,
}

DEFAULT_SAVE_PATH = Path(__file__).resolve().parents[2] / "data" / "squaregame.json"
