import logging

from esper import World

from squaregame.components.countdown import Countdown
from squaregame.components.run_state import SwapRunState
from squaregame.components.score_record import ScoreRecord
from squaregame.components.selection import SwapPick
from squaregame.constants import GAME_MATCH3, TIME_ALERT_DURATION
from squaregame.events.bus import (EventBus, EVENT_TICK, EVENT_TIME_WARNING, EVENT_TIME_EXPIRED,
                                   EVENT_RUN_COMPLETED, EVENT_STATE_CHANGED)
from squaregame.systems.board_ops import build_swap_snapshot

logger = logging.getLogger(__name__)

WARNING_TEXT = {
    30: "⏳ Only 30 seconds left! Be quick!",
    10: "⚠️ Only 10 seconds left!",
}


def warning_text(threshold: int) -> str:
    return WARNING_TEXT.get(threshold, f"Only {threshold} seconds left!")


class CountdownSystem:
    """Drives the Match-3 Rush session clock.

    Each warning threshold fires once per session, on the first tick that
    brings the remaining time to or below it. Reaching zero ends the session:
    input stops, pending resolution steps are dropped and the final score is
    published as a ScoreRecord.
    """

    def __init__(self, world: World, event_bus: EventBus, *, alert_duration: float = TIME_ALERT_DURATION):
        self.world = world
        self.event_bus = event_bus
        self.alert_duration = alert_duration
        self.scheduler = getattr(world, "scheduler")
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        for entity, (countdown, state) in self.world.get_components(Countdown, SwapRunState):
            if not countdown.running or countdown.expired or dt <= 0:
                continue
            countdown.remaining -= dt
            if countdown.remaining <= 0:
                countdown.remaining = 0.0
                self._expire(entity, countdown, state)
                continue
            for threshold in sorted(countdown.thresholds, reverse=True):
                if threshold in countdown.fired or countdown.remaining > threshold:
                    continue
                countdown.fired.add(threshold)
                self._warn(state, threshold, countdown.remaining)
            self._publish()

    def _warn(self, state: SwapRunState, threshold: int, remaining: float) -> None:
        text = warning_text(threshold)
        state.alert_text = text
        self.event_bus.emit(EVENT_TIME_WARNING, threshold=threshold, remaining=remaining, text=text)
        run_id = state.run_id
        self.scheduler.cancel(owner=GAME_MATCH3, kind="alert_hide")
        self.scheduler.schedule(
            self.alert_duration,
            lambda: self._hide_alert(run_id),
            owner=GAME_MATCH3,
            run_id=run_id,
            kind="alert_hide",
        )

    def _hide_alert(self, run_id: int) -> None:
        for _, state in self.world.get_component(SwapRunState):
            if state.run_id == run_id:
                state.alert_text = None
                self._publish()

    def _expire(self, entity: int, countdown: Countdown, state: SwapRunState) -> None:
        countdown.expired = True
        countdown.running = False
        self.scheduler.cancel(owner=GAME_MATCH3)
        state.game_over = True
        state.cascade_pending = False
        state.alert_text = None
        state.message = f"Time's up! Final score: {state.score}"
        pick = self.world.try_component(entity, SwapPick)
        if pick is not None:
            pick.position = None
        record = ScoreRecord(mode=GAME_MATCH3, metric=state.score)
        logger.debug("match3 run %d expired with score %d", state.run_id, state.score)
        self.event_bus.emit(EVENT_TIME_EXPIRED)
        self.event_bus.emit(EVENT_RUN_COMPLETED, game=GAME_MATCH3, record=record)
        self._publish()

    def _publish(self) -> None:
        self.event_bus.emit(EVENT_STATE_CHANGED, game=GAME_MATCH3, snapshot=build_swap_snapshot(self.world))
