import random
from pathlib import Path

from esper import World
from .events.bus import EventBus
from squaregame.components.game_state import GameState, GameMode
from squaregame.components.tile_type_registry import TileTypeRegistry
from squaregame.components.tile_types import TileTypes
from squaregame.constants import DEFAULT_SAVE_PATH, MATCH3_TILE_TYPES
from squaregame.systems.scheduler_system import SchedulerSystem
from squaregame.utils.key_value_store import KeyValueStore


def create_world(
    event_bus: EventBus,
    initial_mode: GameMode = GameMode.ONBOARDING,
    *,
    rng: random.Random | None = None,
    save_path: Path | str | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "store", KeyValueStore(save_path if save_path is not None else DEFAULT_SAVE_PATH))
    setattr(world, "scheduler", SchedulerSystem(world, event_bus))

    # Register the global game state resource.
    world.create_entity(GameState(mode=initial_mode))

    # Single registry entity with the canonical Match-3 categories.
    world.create_entity(
        TileTypeRegistry(),
        TileTypes(types=dict(MATCH3_TILE_TYPES)),
    )
    return world
