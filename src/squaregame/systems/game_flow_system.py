"""High-level coordinator for screen transitions."""
from __future__ import annotations

from esper import World

from squaregame.components.game_state import GameMode
from squaregame.components.player_profile import PlayerProfile
from squaregame.constants import DEFAULT_DIFFICULTY, GAME_COLOR_MATCH, GAME_MATCH3
from squaregame.events.bus import (
    EVENT_BACK_TO_MENU,
    EVENT_GAME_RESET,
    EVENT_GAME_SELECTED,
    EVENT_LEADERBOARD_REQUESTED,
    EVENT_RUN_ABANDONED,
    EVENT_USERNAME_SET,
    EventBus,
)
from squaregame.utils.game_state import get_game_mode, set_game_mode

GAME_MODES = {
    GAME_COLOR_MATCH: GameMode.COLOR_MATCH,
    GAME_MATCH3: GameMode.MATCH3,
}


class GameFlowSystem:
    """Moves between onboarding, the game selector, the two games and the leaderboard.

    Entering a game starts a fresh run through ``EVENT_GAME_RESET``; leaving it
    emits ``EVENT_RUN_ABANDONED`` so the engine drops anything still pending.
    """

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.active_game: str | None = None

        self.event_bus.subscribe(EVENT_USERNAME_SET, self._on_username_set)
        self.event_bus.subscribe(EVENT_GAME_SELECTED, self._on_game_selected)
        self.event_bus.subscribe(EVENT_LEADERBOARD_REQUESTED, self._on_leaderboard_requested)
        self.event_bus.subscribe(EVENT_BACK_TO_MENU, self._on_back_to_menu)

        if get_game_mode(self.world) in (None, GameMode.ONBOARDING) and self._has_username():
            set_game_mode(self.world, self.event_bus, GameMode.GAME_SELECT)

    @property
    def mode(self) -> GameMode | None:
        return get_game_mode(self.world)

    def _has_username(self) -> bool:
        for _, profile in self.world.get_component(PlayerProfile):
            return profile.has_username
        return False

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_username_set(self, sender, **payload) -> None:
        if self.mode == GameMode.ONBOARDING:
            set_game_mode(self.world, self.event_bus, GameMode.GAME_SELECT)

    def _on_game_selected(self, sender, **payload) -> None:
        game = payload.get("game")
        mode = GAME_MODES.get(game)
        if mode is None or not self._has_username():
            return
        self._leave_active_game()
        self.active_game = game
        set_game_mode(self.world, self.event_bus, mode)
        difficulty = payload.get("difficulty") or (DEFAULT_DIFFICULTY if game == GAME_COLOR_MATCH else None)
        self.event_bus.emit(EVENT_GAME_RESET, game=game, difficulty=difficulty)

    def _on_leaderboard_requested(self, sender, **payload) -> None:
        if not self._has_username():
            return
        self._leave_active_game()
        set_game_mode(self.world, self.event_bus, GameMode.LEADERBOARD)

    def _on_back_to_menu(self, sender, **payload) -> None:
        if not self._has_username():
            return
        self._leave_active_game()
        set_game_mode(self.world, self.event_bus, GameMode.GAME_SELECT)

    def _leave_active_game(self) -> None:
        if self.active_game is None:
            return
        game = self.active_game
        self.active_game = None
        self.event_bus.emit(EVENT_RUN_ABANDONED, game=game)
