import logging
import random
from enum import Enum, auto
from typing import Optional, Tuple

from esper import World

from squaregame.components.board import Board
from squaregame.components.board_position import BoardPosition
from squaregame.components.countdown import Countdown
from squaregame.components.run_state import SwapRunState
from squaregame.components.selection import SwapPick
from squaregame.components.tile import TileType
from squaregame.constants import GAME_MATCH3, MATCH3_BOARD_SIZE, TIME_LIMIT, TIME_WARNING_THRESHOLDS
from squaregame.events.bus import (EventBus, EVENT_TILE_CLICK, EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED,
                                   EVENT_TILE_SWAP_INVALID, EVENT_TILE_SWAPPED, EVENT_GAME_RESET,
                                   EVENT_RUN_STARTED, EVENT_RUN_ABANDONED, EVENT_STATE_CHANGED)
from squaregame.systems.board_ops import (build_swap_snapshot, get_tile_registry, grid_types, is_adjacent,
                                          random_type, swap_types)
from squaregame.utils.snapshots import SwapBoardSnapshot

logger = logging.getLogger(__name__)

START_MESSAGE = "Match 3 tiles to score!"


class TapOutcome(Enum):
    IGNORED = auto()
    PICKED = auto()
    UNPICKED = auto()
    SWAPPED = auto()
    REJECTED = auto()


class SwapBoardSystem:
    """Owns the Match-3 Rush grid: session start, picking and swapping tiles.

    Resolution of the swapped grid is handled by MatchResolutionSystem and the
    session clock by CountdownSystem; all three share the board entity.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        rows: int = MATCH3_BOARD_SIZE,
        cols: int = MATCH3_BOARD_SIZE,
        *,
        time_limit: float = TIME_LIMIT,
        rng: random.Random | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.rng = rng or getattr(world, "random", None) or random.Random()
        self.scheduler = getattr(world, "scheduler", None)
        self.board_entity = self.world.create_entity(
            Board(rows=rows, cols=cols),
            SwapPick(),
            SwapRunState(),
            Countdown(limit=time_limit, remaining=time_limit, thresholds=tuple(TIME_WARNING_THRESHOLDS)),
        )
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)
        self.event_bus.subscribe(EVENT_RUN_ABANDONED, self.on_run_abandoned)
        self._init_board()
        self.start_new_game()

    def _init_board(self):
        board = self.board
        for r in range(board.rows):
            for c in range(board.cols):
                self.world.create_entity(BoardPosition(row=r, col=c), TileType(type_name=random_type(self.world, self.rng)))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    @property
    def state(self) -> SwapRunState:
        return self.world.component_for_entity(self.board_entity, SwapRunState)

    @property
    def pick(self) -> SwapPick:
        return self.world.component_for_entity(self.board_entity, SwapPick)

    @property
    def countdown(self) -> Countdown:
        return self.world.component_for_entity(self.board_entity, Countdown)

    def snapshot(self) -> SwapBoardSnapshot:
        return build_swap_snapshot(self.world)

    def publish(self) -> None:
        self.event_bus.emit(EVENT_STATE_CHANGED, game=GAME_MATCH3, snapshot=self.snapshot())

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_new_game(self) -> SwapBoardSnapshot:
        state = self.state
        if self.scheduler is not None:
            self.scheduler.cancel(owner=GAME_MATCH3)
        for _, (_, tile) in self.world.get_components(BoardPosition, TileType):
            tile.type_name = random_type(self.world, self.rng)
        self.pick.position = None
        state.score = 0
        state.streak = 0
        state.message = START_MESSAGE
        state.game_over = False
        state.alert_text = None
        state.cascade_pending = False
        state.cascade_depth = 0
        state.run_id += 1
        self.countdown.restart()
        logger.debug("match3 run %d started", state.run_id)
        self.event_bus.emit(EVENT_RUN_STARTED, game=GAME_MATCH3, run_id=state.run_id)
        self.publish()
        return self.snapshot()

    def abandon(self) -> None:
        """Stop the session without recording a score (player left the screen)."""
        if self.scheduler is not None:
            self.scheduler.cancel(owner=GAME_MATCH3)
        state = self.state
        state.cascade_pending = False
        state.alert_text = None
        self.pick.position = None
        self.countdown.running = False
        self.publish()

    def accepts_input(self) -> bool:
        state = self.state
        countdown = self.countdown
        return not (state.game_over or countdown.expired or not countdown.running or state.cascade_pending)

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def tap(self, row: int, col: int) -> TapOutcome:
        if not self.accepts_input() or not self.board.contains(row, col):
            return TapOutcome.IGNORED
        pick = self.pick
        state = self.state
        position = (row, col)
        if pick.position is None:
            pick.position = position
            label = get_tile_registry(self.world).label_for(grid_types(self.world)[position])
            state.message = f"Selected {label}"
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
            self.publish()
            return TapOutcome.PICKED
        if pick.position == position:
            pick.position = None
            state.message = "Selection cleared"
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason="same_tile")
            self.publish()
            return TapOutcome.UNPICKED
        if is_adjacent(pick.position, position):
            self.swap(pick.position, position)
            return TapOutcome.SWAPPED
        src = pick.position
        pick.position = None
        state.message = "Select adjacent tiles only!"
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=position)
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason="not_adjacent")
        self.publish()
        return TapOutcome.REJECTED

    def swap(self, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
        """Exchange the categories of two neighbouring cells and hand off to resolution."""
        if not self.accepts_input():
            return False
        board = self.board
        if not (board.contains(*a) and board.contains(*b)) or not is_adjacent(a, b):
            return False
        if not swap_types(self.world, a, b):
            return False
        self.pick.position = None
        self.state.cascade_pending = True
        self.state.cascade_depth = 0
        self.event_bus.emit(EVENT_TILE_SWAPPED, src=a, dst=b)
        self.publish()
        return True

    def picked(self) -> Optional[Tuple[int, int]]:
        return self.pick.position

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.tap(row, col)

    def on_game_reset(self, sender, **kwargs):
        if kwargs.get('game') == GAME_MATCH3:
            self.start_new_game()

    def on_run_abandoned(self, sender, **kwargs):
        game = kwargs.get('game')
        if game is None or game == GAME_MATCH3:
            self.abandon()
