"""Wires the world, event bus and every system a host shell needs.

The shell renders snapshots and forwards input; it never touches components
directly.
"""
from __future__ import annotations

import random
from pathlib import Path

from squaregame.components.game_state import GameMode
from squaregame.constants import DEFAULT_DIFFICULTY, MATCH3_BOARD_SIZE
from squaregame.events.bus import EVENT_TICK, EventBus
from squaregame.systems.board import SwapBoardSystem
from squaregame.systems.color_match_system import ColorMatchSystem
from squaregame.systems.countdown_system import CountdownSystem
from squaregame.systems.game_flow_system import GameFlowSystem
from squaregame.systems.match_resolution import MatchResolutionSystem, ResolutionTimings
from squaregame.systems.profile_system import ProfileSystem
from squaregame.systems.score_store_system import ScoreStoreSystem
from squaregame.world import create_world


class GameSession:
    def __init__(
        self,
        *,
        save_path: Path | str | None = None,
        rng: random.Random | None = None,
        board_size: int = MATCH3_BOARD_SIZE,
        difficulty: str = DEFAULT_DIFFICULTY,
        timings: ResolutionTimings | None = None,
    ):
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus, initial_mode=GameMode.ONBOARDING, rng=rng, save_path=save_path)

        # Persistence systems
        self.profile_system = ProfileSystem(self.world, self.event_bus)
        self.score_store = ScoreStoreSystem(self.world, self.event_bus)

        # Game engines
        self.color_match = ColorMatchSystem(self.world, self.event_bus, difficulty)
        self.swap_board = SwapBoardSystem(self.world, self.event_bus, rows=board_size, cols=board_size)
        self.match_resolution = MatchResolutionSystem(self.world, self.event_bus, timings=timings)
        self.countdown = CountdownSystem(self.world, self.event_bus)

        # Navigation; the games only start running once selected.
        self.color_match.abandon()
        self.swap_board.abandon()
        self.game_flow = GameFlowSystem(self.world, self.event_bus)

    @property
    def scheduler(self):
        return self.world.scheduler

    @property
    def mode(self) -> GameMode | None:
        return self.game_flow.mode

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)
