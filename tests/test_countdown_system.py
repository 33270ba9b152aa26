import random

from squaregame.constants import GAME_MATCH3
from squaregame.events.bus import EventBus, EVENT_TIME_WARNING, EVENT_TIME_EXPIRED, EVENT_RUN_COMPLETED, EVENT_TICK
from squaregame.systems.board import SwapBoardSystem, TapOutcome
from squaregame.systems.board_ops import set_grid_types
from squaregame.systems.countdown_system import CountdownSystem
from squaregame.systems.match_resolution import MatchResolutionSystem
from squaregame.world import create_world

from tests.helpers import BLUE, RED, stable_rows


def make_session():
    bus = EventBus()
    world = create_world(bus, rng=random.Random(4))
    board = SwapBoardSystem(world, bus, 5, 5)
    MatchResolutionSystem(world, bus)
    CountdownSystem(world, bus)
    set_grid_types(world, stable_rows())
    return bus, world, board


def test_fine_grained_ticks_fire_each_warning_exactly_once():
    bus, _, board = make_session()
    warnings = []
    bus.subscribe(EVENT_TIME_WARNING, lambda s, **k: warnings.append(k["threshold"]))

    for _ in range(5100):  # 51 seconds at 10ms
        bus.emit(EVENT_TICK, dt=0.01)

    assert warnings == [30, 10]
    assert 8.9 < board.countdown.remaining < 9.1


def test_coarse_ticks_still_fire_crossed_thresholds_once():
    bus, _, board = make_session()
    warnings = []
    bus.subscribe(EVENT_TIME_WARNING, lambda s, **k: warnings.append(k["threshold"]))

    bus.emit(EVENT_TICK, dt=25.0)  # 35 left
    assert warnings == []
    bus.emit(EVENT_TICK, dt=10.0)  # 25 left
    assert warnings == [30]
    bus.emit(EVENT_TICK, dt=20.0)  # 5 left
    bus.emit(EVENT_TICK, dt=1.0)
    assert warnings == [30, 10]


def test_warning_shows_alert_then_hides_it():
    bus, _, board = make_session()

    bus.emit(EVENT_TICK, dt=29.5)  # 30.5 left
    assert board.state.alert_text is None
    bus.emit(EVENT_TICK, dt=1.0)
    assert board.state.alert_text == "⏳ Only 30 seconds left! Be quick!"
    bus.emit(EVENT_TICK, dt=1.0)
    assert board.state.alert_text is not None
    bus.emit(EVENT_TICK, dt=1.5)
    assert board.state.alert_text is None


def test_expiry_ends_session_and_emits_score_record():
    bus, _, board = make_session()
    expired = []
    completed = []
    bus.subscribe(EVENT_TIME_EXPIRED, lambda s, **k: expired.append(True))
    bus.subscribe(EVENT_RUN_COMPLETED, lambda s, **k: completed.append(k))
    board.state.score = 70

    bus.emit(EVENT_TICK, dt=61.0)

    assert expired == [True]
    assert board.state.game_over
    assert board.countdown.expired
    assert board.countdown.remaining == 0.0
    assert board.snapshot().time_remaining == 0.0
    assert len(completed) == 1
    assert completed[0]["game"] == GAME_MATCH3
    assert completed[0]["record"].metric == 70
    assert completed[0]["record"].level is None
    assert board.tap(0, 0) == TapOutcome.IGNORED

    bus.emit(EVENT_TICK, dt=5.0)
    assert len(completed) == 1


def test_expiry_drops_pending_resolution():
    bus, world, board = make_session()
    rows = stable_rows()
    rows[0] = [RED, RED, BLUE, RED, BLUE]
    set_grid_types(world, rows)
    board.countdown.remaining = 0.1
    board.tap(0, 2)
    board.tap(0, 3)

    bus.emit(EVENT_TICK, dt=0.2)

    assert board.state.game_over
    assert world.scheduler.pending(owner=GAME_MATCH3) == []
    for _ in range(40):
        bus.emit(EVENT_TICK, dt=0.05)
    assert board.state.score == 0


def test_new_game_rearms_warnings():
    bus, _, board = make_session()
    warnings = []
    bus.subscribe(EVENT_TIME_WARNING, lambda s, **k: warnings.append(k["threshold"]))

    bus.emit(EVENT_TICK, dt=31.0)
    board.start_new_game()
    bus.emit(EVENT_TICK, dt=31.0)

    assert warnings == [30, 30]
