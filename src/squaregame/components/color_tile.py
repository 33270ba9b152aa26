from dataclasses import dataclass


@dataclass(slots=True)
class TileIndex:
    """Position of a Color Match tile in the flattened, row-major board."""
    index: int


@dataclass(frozen=True, slots=True)
class TileColor:
    """Color assigned when the board is generated; never changes afterwards."""
    color: str


@dataclass(slots=True)
class MatchedFlag:
    """Set once the tile's color group is confirmed; locks the tile for the run."""
    matched: bool = False
