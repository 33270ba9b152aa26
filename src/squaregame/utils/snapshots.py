"""Immutable views of engine state handed to the host shell."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class ColorTileView:
    index: int
    color: str
    matched: bool
    selected: bool


@dataclass(frozen=True, slots=True)
class ColorBoardSnapshot:
    difficulty: str
    grid_size: int
    tiles: Tuple[ColorTileView, ...]
    selection: Tuple[int, ...]
    message: str
    elapsed: float
    completed: bool
    active: bool

    @property
    def matched_count(self) -> int:
        return sum(1 for tile in self.tiles if tile.matched)

    @property
    def target_color(self) -> Optional[str]:
        if not self.selection:
            return None
        return self.tiles[self.selection[0]].color


@dataclass(frozen=True, slots=True)
class SwapBoardSnapshot:
    rows: int
    cols: int
    grid: Tuple[Tuple[str, ...], ...]
    picked: Optional[Position]
    score: int
    streak: int
    message: str
    time_remaining: float
    game_over: bool
    alert_text: Optional[str]
    resolving: bool

    def type_at(self, row: int, col: int) -> str:
        return self.grid[row][col]
