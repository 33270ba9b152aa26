"""Color Match: select every tile of one color, then confirm the group."""
from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import List

from esper import World

from squaregame.components.color_tile import MatchedFlag, TileColor, TileIndex
from squaregame.components.run_state import ColorRunState
from squaregame.components.score_record import ScoreRecord
from squaregame.components.selection import ColorSelection
from squaregame.constants import COLOR_PALETTE, DEFAULT_DIFFICULTY, DIFFICULTY_LEVELS, GAME_COLOR_MATCH
from squaregame.events.bus import (
    EVENT_COLOR_CONFIRM,
    EVENT_COLOR_TILE_TAP,
    EVENT_GAME_RESET,
    EVENT_RUN_ABANDONED,
    EVENT_RUN_COMPLETED,
    EVENT_RUN_STARTED,
    EVENT_STATE_CHANGED,
    EVENT_TICK,
    EventBus,
)
from squaregame.utils.formatting import format_elapsed
from squaregame.utils.snapshots import ColorBoardSnapshot, ColorTileView

logger = logging.getLogger(__name__)

START_MESSAGE = "Pick a tile to choose a color"


class ColorMatchOutcome(Enum):
    IGNORED = auto()
    SELECTED = auto()
    DESELECTED = auto()
    MATCHED = auto()
    ALL_MATCHED = auto()
    EMPTY_SELECTION = auto()
    MIXED_COLORS = auto()
    INCOMPLETE_GROUP = auto()


def grid_size_for(difficulty: str) -> int:
    try:
        return DIFFICULTY_LEVELS[difficulty][0]
    except KeyError:
        raise ValueError(f"unknown difficulty {difficulty!r}") from None


def build_color_distribution(difficulty: str) -> List[str]:
    """Unshuffled board colors for ``difficulty``: each color repeated ``total // colors`` times."""
    if difficulty not in DIFFICULTY_LEVELS:
        raise ValueError(f"unknown difficulty {difficulty!r}")
    size, num_colors = DIFFICULTY_LEVELS[difficulty]
    total = size * size
    palette = COLOR_PALETTE[:num_colors]
    tiles_per_color = total // num_colors
    colors = [color for color in palette for _ in range(tiles_per_color)]
    # Boards whose size is not a multiple of the color count take one extra tile per color in order.
    for i in range(total - len(colors)):
        colors.append(palette[i % num_colors])
    return colors


def _label(color: str) -> str:
    return color.capitalize()


class ColorMatchSystem:
    """Board, selection and confirmation rules for the Color Match game.

    A confirmation is all-or-nothing: it succeeds only when the selection is
    exactly the set of unmatched tiles of the first picked tile's color.
    Anything else clears the selection and leaves every tile as it was.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        difficulty: str = DEFAULT_DIFFICULTY,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.rng = rng or getattr(world, "random", None) or random.Random()
        self.state_entity = self.world.create_entity(ColorRunState(difficulty=difficulty), ColorSelection())
        self._tile_entities: List[int] = []

        self.event_bus.subscribe(EVENT_COLOR_TILE_TAP, self.on_tile_tap)
        self.event_bus.subscribe(EVENT_COLOR_CONFIRM, self.on_confirm)
        self.event_bus.subscribe(EVENT_GAME_RESET, self.on_game_reset)
        self.event_bus.subscribe(EVENT_RUN_ABANDONED, self.on_run_abandoned)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.reset(difficulty)

    # Accessors ----------------------------------------------------------

    @property
    def state(self) -> ColorRunState:
        return self.world.component_for_entity(self.state_entity, ColorRunState)

    @property
    def selection(self) -> ColorSelection:
        return self.world.component_for_entity(self.state_entity, ColorSelection)

    @property
    def tile_count(self) -> int:
        return len(self._tile_entities)

    def color_at(self, index: int) -> str:
        return self.world.component_for_entity(self._tile_entities[index], TileColor).color

    def is_matched(self, index: int) -> bool:
        return self.world.component_for_entity(self._tile_entities[index], MatchedFlag).matched

    def unmatched_count(self, color: str) -> int:
        return sum(
            1
            for entity in self._tile_entities
            if self.world.component_for_entity(entity, TileColor).color == color
            and not self.world.component_for_entity(entity, MatchedFlag).matched
        )

    def snapshot(self) -> ColorBoardSnapshot:
        state = self.state
        selected = set(self.selection.indices)
        tiles = tuple(
            ColorTileView(
                index=index,
                color=self.color_at(index),
                matched=self.is_matched(index),
                selected=index in selected,
            )
            for index in range(self.tile_count)
        )
        return ColorBoardSnapshot(
            difficulty=state.difficulty,
            grid_size=grid_size_for(state.difficulty),
            tiles=tiles,
            selection=tuple(self.selection.indices),
            message=state.message,
            elapsed=state.elapsed,
            completed=state.completed,
            active=state.active,
        )

    def publish(self) -> None:
        self.event_bus.emit(EVENT_STATE_CHANGED, game=GAME_COLOR_MATCH, snapshot=self.snapshot())

    # Lifecycle ----------------------------------------------------------

    def reset(self, difficulty: str | None = None) -> ColorBoardSnapshot:
        """Deal a fresh shuffled board for ``difficulty`` (or the current one)."""
        state = self.state
        difficulty = difficulty or state.difficulty
        colors = build_color_distribution(difficulty)
        self.rng.shuffle(colors)
        for entity in self._tile_entities:
            self.world.delete_entity(entity, immediate=True)
        self._tile_entities = [
            self.world.create_entity(TileIndex(index=index), TileColor(color=color), MatchedFlag())
            for index, color in enumerate(colors)
        ]
        self.selection.clear()
        state.difficulty = difficulty
        state.message = START_MESSAGE
        state.elapsed = 0.0
        state.completed = False
        state.run_id += 1
        state.active = True
        logger.debug("color match run %d started (%s, %d tiles)", state.run_id, difficulty, len(colors))
        self.event_bus.emit(EVENT_RUN_STARTED, game=GAME_COLOR_MATCH, run_id=state.run_id)
        self.publish()
        return self.snapshot()

    def abandon(self) -> None:
        """Stop the run without recording it. Input is refused until the next reset."""
        self.state.active = False
        self.selection.clear()
        self.publish()

    # Player actions -----------------------------------------------------

    def tap(self, index: int) -> ColorMatchOutcome:
        state = self.state
        if not state.active:
            return ColorMatchOutcome.IGNORED
        if not 0 <= index < self.tile_count:
            state.message = "Invalid tile"
            self.publish()
            return ColorMatchOutcome.IGNORED
        if self.is_matched(index):
            return ColorMatchOutcome.IGNORED
        indices = self.selection.indices
        color = _label(self.color_at(index))
        if index in indices:
            indices.remove(index)
            state.message = f"Deselected {color} tile"
            outcome = ColorMatchOutcome.DESELECTED
        else:
            indices.append(index)
            if len(indices) == 1:
                state.message = f"Target color: {color}. Find every {color} tile!"
            else:
                state.message = f"{len(indices)} tiles selected"
            outcome = ColorMatchOutcome.SELECTED
        self.publish()
        return outcome

    def confirm_match(self) -> ColorMatchOutcome:
        state = self.state
        indices = self.selection.indices
        if not state.active:
            return ColorMatchOutcome.IGNORED
        if not indices:
            state.message = "Select some tiles first"
            self.publish()
            return ColorMatchOutcome.EMPTY_SELECTION

        target = self.color_at(indices[0])
        if any(self.color_at(index) != target for index in indices):
            self.selection.clear()
            state.message = "Not all selected tiles are the same color!"
            self.publish()
            return ColorMatchOutcome.MIXED_COLORS

        total = self.unmatched_count(target)
        if len(indices) < total:
            found = len(indices)
            self.selection.clear()
            state.message = f"Found {found} of {total} {_label(target)} tiles. Try again!"
            self.publish()
            return ColorMatchOutcome.INCOMPLETE_GROUP

        for index in indices:
            self.world.component_for_entity(self._tile_entities[index], MatchedFlag).matched = True
        self.selection.clear()

        if all(self.is_matched(index) for index in range(self.tile_count)):
            self._complete()
            return ColorMatchOutcome.ALL_MATCHED
        state.message = f"Matched all {_label(target)} tiles!"
        self.publish()
        return ColorMatchOutcome.MATCHED

    def _complete(self) -> None:
        state = self.state
        state.completed = True
        state.active = False
        state.message = f"All colors matched in {format_elapsed(state.elapsed)}!"
        record = ScoreRecord(mode=GAME_COLOR_MATCH, metric=round(state.elapsed, 2), level=state.difficulty)
        logger.debug("color match run %d completed in %.2fs", state.run_id, state.elapsed)
        self.publish()
        self.event_bus.emit(EVENT_RUN_COMPLETED, game=GAME_COLOR_MATCH, record=record)

    # Event handlers -----------------------------------------------------

    def on_tile_tap(self, sender, **kwargs):
        index = kwargs.get('index')
        if index is None:
            return
        self.tap(index)

    def on_confirm(self, sender, **kwargs):
        self.confirm_match()

    def on_game_reset(self, sender, **kwargs):
        if kwargs.get('game') == GAME_COLOR_MATCH:
            self.reset(kwargs.get('difficulty'))

    def on_run_abandoned(self, sender, **kwargs):
        game = kwargs.get('game')
        if game is None or game == GAME_COLOR_MATCH:
            self.abandon()

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        if not self.state.active or dt <= 0:
            return
        self.state.elapsed += dt
