from blinker import Signal
from typing import Dict

class EventBus:
    """Named blinker signals shared by the engines and the host shell."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so systems that are not stored anywhere still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)


# ============================================================================
# NAVIGATION & PROFILE
# ============================================================================
EVENT_USERNAME_SET = "username_set"                # payload: username=str
EVENT_GAME_SELECTED = "game_selected"              # payload: game=str ("color_match"|"match3"), difficulty=str|None
EVENT_LEADERBOARD_REQUESTED = "leaderboard_requested"  # payload: game=str|None
EVENT_BACK_TO_MENU = "back_to_menu"                # payload: None
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=GameMode|None, new_mode=GameMode


# ============================================================================
# COLOR MATCH INPUT
# ============================================================================
EVENT_COLOR_TILE_TAP = "color_tile_tap"            # payload: index=int
EVENT_COLOR_CONFIRM = "color_confirm"              # payload: None
EVENT_GAME_RESET = "game_reset"                    # payload: game=str, difficulty=str|None


# ============================================================================
# MATCH-3 INPUT & BOARD MECHANICS
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAPPED = "tile_swapped"                # payload: src=(r,c), dst=(r,c)
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], points=int, bonus=int, streak=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int


# ============================================================================
# COUNTDOWN
# ============================================================================
EVENT_TIME_WARNING = "time_warning"                # payload: threshold=int, remaining=float, text=str
EVENT_TIME_EXPIRED = "time_expired"                # payload: None


# ============================================================================
# RUN LIFECYCLE & SCORES
# ============================================================================
EVENT_STATE_CHANGED = "state_changed"              # payload: game=str, snapshot=ColorBoardSnapshot|SwapBoardSnapshot
EVENT_RUN_STARTED = "run_started"                  # payload: game=str, run_id=int
EVENT_RUN_ABANDONED = "run_abandoned"              # payload: game=str|None
EVENT_RUN_COMPLETED = "run_completed"              # payload: game=str, record=ScoreRecord
EVENT_SCORE_RECORDED = "score_recorded"            # payload: record=ScoreRecord, rank=int
