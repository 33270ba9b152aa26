from __future__ import annotations

import random
from collections import defaultdict
from typing import Dict, List

from squaregame.constants import MATCH3_TILE_TYPES
from squaregame.events.bus import EVENT_TICK, EventBus

TYPES = list(MATCH3_TILE_TYPES)
RED, BLUE, GREEN, PURPLE, GOLD = TYPES


class FirstChoiceRandom(random.Random):
    """Random source whose ``choice`` always returns the first element."""

    def choice(self, seq):
        return seq[0]


def stable_rows(rows: int = 5, cols: int = 5) -> List[List[str]]:
    """A grid with no horizontal or vertical run of three."""
    return [[TYPES[(2 * r + c) % len(TYPES)] for c in range(cols)] for r in range(rows)]


def drive(bus: EventBus, ticks: int, dt: float = 0.05) -> None:
    for _ in range(ticks):
        bus.emit(EVENT_TICK, dt=dt)


def indices_by_color(system) -> Dict[str, List[int]]:
    groups: Dict[str, List[int]] = defaultdict(list)
    for index in range(system.tile_count):
        groups[system.color_at(index)].append(index)
    return dict(groups)
