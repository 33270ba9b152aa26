from __future__ import annotations

import random
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from esper import World

from squaregame.components.board import Board
from squaregame.components.board_position import BoardPosition
from squaregame.components.countdown import Countdown
from squaregame.components.run_state import SwapRunState
from squaregame.components.selection import SwapPick
from squaregame.components.tile import TileType
from squaregame.components.tile_type_registry import TileTypeRegistry
from squaregame.components.tile_types import TileTypes
from squaregame.constants import MATCH_RUN_LENGTH
from squaregame.utils.snapshots import SwapBoardSnapshot

Position = Tuple[int, int]


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Match-3 board not created")


def get_run_state(world: World) -> SwapRunState:
    for _, state in world.get_component(SwapRunState):
        return state
    raise RuntimeError("Match-3 run state not created")


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def grid_types(world: World) -> Dict[Position, str]:
    """Map every cell to its current category."""
    return {
        (position.row, position.col): tile.type_name
        for _, (position, tile) in world.get_components(BoardPosition, TileType)
    }


def set_grid_types(world: World, rows: Sequence[Sequence[str]]) -> None:
    """Overwrite categories row by row. Cells outside ``rows`` are left alone."""
    for _, (position, tile) in world.get_components(BoardPosition, TileType):
        if position.row < len(rows) and position.col < len(rows[position.row]):
            tile.type_name = rows[position.row][position.col]


def random_type(world: World, rng: random.Random) -> str:
    return rng.choice(get_tile_registry(world).spawnable_types())


def swap_types(world: World, a: Position, b: Position) -> bool:
    ent_a = get_entity_at(world, *a)
    ent_b = get_entity_at(world, *b)
    if ent_a is None or ent_b is None:
        return False
    type_a = world.component_for_entity(ent_a, TileType)
    type_b = world.component_for_entity(ent_b, TileType)
    type_a.type_name, type_b.type_name = type_b.type_name, type_a.type_name
    return True


def refill_positions(world: World, positions: Iterable[Position], rng: random.Random) -> List[Position]:
    """Give every listed cell a fresh uniformly random category."""
    targets = set(positions)
    refilled: List[Position] = []
    spawnable = get_tile_registry(world).spawnable_types()
    for _, (position, tile) in world.get_components(BoardPosition, TileType):
        key = (position.row, position.col)
        if key in targets:
            tile.type_name = rng.choice(spawnable)
            refilled.append(key)
    return sorted(refilled)


def find_matched_positions(
    types: Dict[Position, str],
    rows: int,
    cols: int,
    run_length: int = MATCH_RUN_LENGTH,
) -> Set[Position]:
    """Union of cells covered by any same-category window of ``run_length``.

    Every horizontal and vertical window is checked on its own, so a run of
    four contributes both of its overlapping windows but each cell is counted
    once in the result.
    """
    matched: Set[Position] = set()
    # Horizontal windows
    for r in range(rows):
        for c in range(cols - run_length + 1):
            window = [(r, c + offset) for offset in range(run_length)]
            if _uniform(types, window):
                matched.update(window)
    # Vertical windows
    for c in range(cols):
        for r in range(rows - run_length + 1):
            window = [(r + offset, c) for offset in range(run_length)]
            if _uniform(types, window):
                matched.update(window)
    return matched


def _uniform(types: Dict[Position, str], window: List[Position]) -> bool:
    first = types.get(window[0])
    if first is None:
        return False
    return all(types.get(pos) == first for pos in window[1:])


def build_swap_snapshot(world: World) -> SwapBoardSnapshot:
    board = get_board(world)
    state = get_run_state(world)
    types = grid_types(world)
    picked = None
    for _, pick in world.get_component(SwapPick):
        picked = pick.position
        break
    remaining = 0.0
    for _, countdown in world.get_component(Countdown):
        remaining = countdown.remaining
        break
    return SwapBoardSnapshot(
        rows=board.rows,
        cols=board.cols,
        grid=tuple(tuple(types.get((r, c), "") for c in range(board.cols)) for r in range(board.rows)),
        picked=picked,
        score=state.score,
        streak=state.streak,
        message=state.message,
        time_remaining=max(0.0, remaining),
        game_over=state.game_over,
        alert_text=state.alert_text,
        resolving=state.cascade_pending,
    )
