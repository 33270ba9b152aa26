from squaregame.components.game_state import GameMode
from squaregame.constants import GAME_COLOR_MATCH, GAME_MATCH3
from squaregame.events.bus import (EventBus, EVENT_BACK_TO_MENU, EVENT_GAME_MODE_CHANGED, EVENT_GAME_RESET,
                                   EVENT_GAME_SELECTED, EVENT_LEADERBOARD_REQUESTED, EVENT_RUN_ABANDONED)
from squaregame.systems.game_flow_system import GameFlowSystem
from squaregame.systems.profile_system import ProfileSystem
from squaregame.utils.game_state import get_game_mode
from squaregame.world import create_world


def make_flow(save_path):
    bus = EventBus()
    world = create_world(bus, save_path=save_path)
    profile = ProfileSystem(world, bus)
    flow = GameFlowSystem(world, bus)
    return bus, world, profile, flow


def test_blank_username_is_refused(tmp_path):
    _, world, profile, _ = make_flow(tmp_path / "store.json")

    assert profile.set_username("   ") is False
    assert profile.set_username("") is False
    assert not profile.has_username
    assert get_game_mode(world) == GameMode.ONBOARDING


def test_username_is_trimmed_persisted_and_opens_the_game_selector(tmp_path):
    path = tmp_path / "store.json"
    bus, world, profile, _ = make_flow(path)
    modes = []
    bus.subscribe(EVENT_GAME_MODE_CHANGED, lambda s, **k: modes.append(k["new_mode"]))

    assert profile.set_username("  ada  ")

    assert profile.username == "ada"
    assert modes == [GameMode.GAME_SELECT]

    _, world_again, profile_again, _ = make_flow(path)
    assert profile_again.username == "ada"
    assert get_game_mode(world_again) == GameMode.GAME_SELECT


def test_navigation_requires_a_username(tmp_path):
    bus, world, _, flow = make_flow(tmp_path / "store.json")

    bus.emit(EVENT_GAME_SELECTED, game=GAME_MATCH3)
    bus.emit(EVENT_LEADERBOARD_REQUESTED)

    assert flow.active_game is None
    assert get_game_mode(world) == GameMode.ONBOARDING


def test_selecting_a_game_starts_a_fresh_run(tmp_path):
    bus, world, profile, flow = make_flow(tmp_path / "store.json")
    profile.set_username("ada")
    resets = []
    bus.subscribe(EVENT_GAME_RESET, lambda s, **k: resets.append(k))

    bus.emit(EVENT_GAME_SELECTED, game=GAME_COLOR_MATCH)

    assert get_game_mode(world) == GameMode.COLOR_MATCH
    assert flow.active_game == GAME_COLOR_MATCH
    assert resets == [{"game": GAME_COLOR_MATCH, "difficulty": "easy"}]


def test_unknown_game_is_ignored(tmp_path):
    bus, world, profile, flow = make_flow(tmp_path / "store.json")
    profile.set_username("ada")

    bus.emit(EVENT_GAME_SELECTED, game="chess")

    assert flow.active_game is None
    assert get_game_mode(world) == GameMode.GAME_SELECT


def test_leaving_a_game_abandons_its_run(tmp_path):
    bus, world, profile, flow = make_flow(tmp_path / "store.json")
    profile.set_username("ada")
    abandoned = []
    bus.subscribe(EVENT_RUN_ABANDONED, lambda s, **k: abandoned.append(k["game"]))

    bus.emit(EVENT_GAME_SELECTED, game=GAME_MATCH3)
    bus.emit(EVENT_LEADERBOARD_REQUESTED)
    assert get_game_mode(world) == GameMode.LEADERBOARD

    bus.emit(EVENT_BACK_TO_MENU)
    assert get_game_mode(world) == GameMode.GAME_SELECT
    assert abandoned == [GAME_MATCH3]
