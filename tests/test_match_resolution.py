import random

import pytest

from squaregame.events.bus import EventBus, EVENT_MATCH_FOUND, EVENT_REFILL_COMPLETED, EVENT_CASCADE_COMPLETE
from squaregame.systems.board import SwapBoardSystem
from squaregame.systems.board_ops import find_matched_positions, grid_types, set_grid_types
from squaregame.systems.match_resolution import IMMEDIATE, MatchResolutionSystem, score_for
from squaregame.world import create_world

from tests.helpers import BLUE, GOLD, GREEN, RED, FirstChoiceRandom, drive, stable_rows


def make_engine(rng=None, timings=None, size=5):
    bus = EventBus()
    world = create_world(bus, rng=rng or random.Random(2))
    board = SwapBoardSystem(world, bus, size, size)
    resolution = MatchResolutionSystem(world, bus, timings=timings)
    set_grid_types(world, stable_rows(size, size))
    return bus, world, board, resolution


def capture(bus, name):
    events = []
    bus.subscribe(name, lambda s, **k: events.append(k))
    return events


def test_window_scan_unions_overlapping_runs():
    types = {(r, c): f"t{r}{c}" for r in range(5) for c in range(5)}
    for c in range(4):
        types[(1, c)] = RED
    types[(0, 1)] = RED
    types[(2, 1)] = RED

    matched = find_matched_positions(types, 5, 5)

    # Row of four plus a vertical three crossing it at (1, 1).
    assert matched == {(1, 0), (1, 1), (1, 2), (1, 3), (0, 1), (2, 1)}


def test_stable_grid_has_no_matches():
    _, world, _, _ = make_engine()
    assert find_matched_positions(grid_types(world), 5, 5) == set()


@pytest.mark.parametrize(
    "matched, streak, expected",
    [
        (3, 1, (10, 0)),
        (5, 1, (10, 0)),
        (6, 1, (20, 0)),
        (3, 2, (10, 10)),
        (9, 3, (30, 15)),
    ],
)
def test_score_for(matched, streak, expected):
    assert score_for(matched, streak) == expected


def test_swap_into_row_match_scores_ten_then_refills_and_rescans():
    bus, world, board, _ = make_engine()
    rows = stable_rows()
    rows[0] = [RED, RED, BLUE, RED, BLUE]
    set_grid_types(world, rows)
    found = capture(bus, EVENT_MATCH_FOUND)
    refills = capture(bus, EVENT_REFILL_COMPLETED)
    complete = capture(bus, EVENT_CASCADE_COMPLETE)

    board.tap(0, 2)
    board.tap(0, 3)
    types = grid_types(world)
    assert [types[(0, c)] for c in range(5)] == [RED, RED, RED, BLUE, BLUE]
    assert not found

    drive(bus, 7)  # past the swap delay, short of the refill delay
    assert found[0]["positions"] == [(0, 0), (0, 1), (0, 2)]
    assert found[0]["points"] == 10
    assert found[0]["bonus"] == 0
    assert board.state.score == 10
    assert board.state.streak == 1
    assert board.state.message == "✨ Match! +10 points!"
    assert not refills

    drive(bus, 16)  # past the refill delay
    assert refills and refills[0]["new_tiles"] == [(0, 0), (0, 1), (0, 2)]

    drive(bus, 600)  # generous: each cascade pass takes one second
    assert complete
    assert not board.state.cascade_pending
    assert board.state.streak == 0


def test_resolve_on_stable_grid_is_idempotent_and_resets_streak():
    bus, world, board, resolution = make_engine()
    board.state.streak = 2
    before = grid_types(world)
    complete = capture(bus, EVENT_CASCADE_COMPLETE)

    assert resolution.resolve() == frozenset()
    assert board.state.streak == 0
    assert grid_types(world) == before
    assert resolution.resolve() == frozenset()
    assert grid_types(world) == before
    assert board.state.message == "No matches. Try again!"
    assert board.state.score == 0
    assert len(complete) == 2


def test_consecutive_match_awards_combo_bonus():
    _, world, board, resolution = make_engine()
    rows = stable_rows()
    rows[4] = [GOLD, GREEN, GREEN, GREEN, BLUE]
    set_grid_types(world, rows)
    board.state.streak = 1
    board.state.score = 10

    matched = resolution.resolve()

    assert matched == {(4, 1), (4, 2), (4, 3)}
    assert board.state.streak == 2
    assert board.state.score == 10 + 10 + 10
    assert board.state.message == "🔥 2x COMBO! +20"


def test_cascade_is_bounded_by_grid_size():
    bus, world, board, resolution = make_engine(rng=FirstChoiceRandom(), timings=IMMEDIATE)
    set_grid_types(world, [[RED] * 5 for _ in range(5)])
    found = capture(bus, EVENT_MATCH_FOUND)
    complete = capture(bus, EVENT_CASCADE_COMPLETE)

    assert board.swap((0, 0), (0, 1))

    # Every refill recreates a full board of one category; only the bound stops it.
    assert len(found) == resolution.max_cascade_depth == 25
    assert complete[-1]["depth"] == 25
    assert not board.state.cascade_pending


@pytest.mark.parametrize("seed", range(20))
def test_swap_resolve_cascade_terminates_for_any_seed(seed):
    bus, world, board, resolution = make_engine(rng=random.Random(seed), timings=IMMEDIATE)
    board.start_new_game()
    complete = capture(bus, EVENT_CASCADE_COMPLETE)

    board.swap((2, 2), (2, 3))

    assert complete
    assert complete[-1]["depth"] <= resolution.max_cascade_depth
    assert not board.state.cascade_pending
    assert board.state.score >= 0


def test_pending_steps_are_dropped_after_game_over():
    bus, world, board, resolution = make_engine()
    rows = stable_rows()
    rows[0] = [RED, RED, BLUE, RED, BLUE]
    set_grid_types(world, rows)
    found = capture(bus, EVENT_MATCH_FOUND)

    board.tap(0, 2)
    board.tap(0, 3)
    board.state.game_over = True
    drive(bus, 40)

    assert found == []
    assert board.state.score == 0
