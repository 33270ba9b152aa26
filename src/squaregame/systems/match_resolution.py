import logging
import random
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from esper import World

from squaregame.constants import (COMBO_BONUS_PER_STREAK, GAME_MATCH3, MATCH_REFILL_DELAY, MATCH_RUN_LENGTH,
                                  POINTS_PER_MATCH, REFILL_RESCAN_DELAY, SWAP_RESOLVE_DELAY)
from squaregame.events.bus import (EventBus, EVENT_TILE_SWAPPED, EVENT_MATCH_FOUND, EVENT_REFILL_COMPLETED,
                                   EVENT_CASCADE_COMPLETE, EVENT_STATE_CHANGED)
from squaregame.systems.board_ops import (build_swap_snapshot, find_matched_positions, get_board, get_run_state,
                                          grid_types, refill_positions)

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

NO_MATCH_MESSAGE = "No matches. Try again!"


@dataclass(frozen=True, slots=True)
class ResolutionTimings:
    """Delays (seconds) between resolution steps; zeros make a cascade synchronous."""
    swap_delay: float = SWAP_RESOLVE_DELAY
    refill_delay: float = MATCH_REFILL_DELAY
    rescan_delay: float = REFILL_RESCAN_DELAY


IMMEDIATE = ResolutionTimings(0.0, 0.0, 0.0)


def score_for(matched_count: int, streak: int) -> Tuple[int, int]:
    """Return ``(points, bonus)`` for one resolution pass.

    Ten points per three matched cells; from the second consecutive pass on a
    combo bonus of ``streak * 5`` is added on top.
    """
    points = POINTS_PER_MATCH * (matched_count // MATCH_RUN_LENGTH)
    bonus = streak * COMBO_BONUS_PER_STREAK if streak > 1 else 0
    return points, bonus


class MatchResolutionSystem:
    """Scans the grid after a swap, scores matches, refills and cascades.

    Each pass is a delayed continuation of the swap that started it: the scan
    runs ``swap_delay`` after the swap, the refill ``refill_delay`` after a
    scoring scan and the next scan ``rescan_delay`` after the refill. A cascade
    is capped at one pass per grid cell.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        timings: ResolutionTimings | None = None,
        rng: random.Random | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.timings = timings or ResolutionTimings()
        self.rng = rng or getattr(world, "random", None) or random.Random()
        self.scheduler = getattr(world, "scheduler")
        self.event_bus.subscribe(EVENT_TILE_SWAPPED, self.on_tile_swapped)

    @property
    def max_cascade_depth(self) -> int:
        return get_board(self.world).cell_count

    def on_tile_swapped(self, sender, **kwargs):
        state = get_run_state(self.world)
        run_id = state.run_id
        self.scheduler.schedule(
            self.timings.swap_delay,
            lambda: self._continue(run_id, self.resolve),
            owner=GAME_MATCH3,
            run_id=run_id,
            kind="resolve",
        )

    def _continue(self, run_id: int, step) -> None:
        state = get_run_state(self.world)
        if state.run_id != run_id or state.game_over:
            return
        step()

    def resolve(self) -> FrozenSet[Position]:
        """Run one scan pass and return the matched cells (empty when nothing matched)."""
        state = get_run_state(self.world)
        if state.game_over:
            return frozenset()
        board = get_board(self.world)
        matched = frozenset(find_matched_positions(grid_types(self.world), board.rows, board.cols))
        if not matched:
            state.streak = 0
            state.message = NO_MATCH_MESSAGE
            self._finish_cascade()
            return matched

        state.streak += 1
        points, bonus = score_for(len(matched), state.streak)
        state.score += points + bonus
        if bonus:
            state.message = f"🔥 {state.streak}x COMBO! +{points + bonus}"
        else:
            state.message = f"✨ Match! +{points} points!"
        state.cascade_pending = True
        state.cascade_depth += 1
        positions = sorted(matched)
        logger.debug("match pass depth=%d cells=%d points=%d bonus=%d", state.cascade_depth, len(positions), points, bonus)
        self.event_bus.emit(
            EVENT_MATCH_FOUND,
            positions=positions,
            points=points,
            bonus=bonus,
            streak=state.streak,
            depth=state.cascade_depth,
        )
        self._publish()
        run_id = state.run_id
        self.scheduler.schedule(
            self.timings.refill_delay,
            lambda: self._continue(run_id, lambda: self._refill(positions)),
            owner=GAME_MATCH3,
            run_id=run_id,
            kind="refill",
        )
        return matched

    def _refill(self, positions: List[Position]) -> None:
        state = get_run_state(self.world)
        new_tiles = refill_positions(self.world, positions, self.rng)
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)
        if state.cascade_depth >= self.max_cascade_depth:
            logger.debug("cascade stopped at depth bound %d", state.cascade_depth)
            self._finish_cascade()
            return
        self._publish()
        run_id = state.run_id
        self.scheduler.schedule(
            self.timings.rescan_delay,
            lambda: self._continue(run_id, self.resolve),
            owner=GAME_MATCH3,
            run_id=run_id,
            kind="resolve",
        )

    def _finish_cascade(self) -> None:
        state = get_run_state(self.world)
        depth = state.cascade_depth
        state.cascade_pending = False
        state.cascade_depth = 0
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
        self._publish()

    def _publish(self) -> None:
        self.event_bus.emit(EVENT_STATE_CHANGED, game=GAME_MATCH3, snapshot=build_swap_snapshot(self.world))
