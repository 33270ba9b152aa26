from dataclasses import dataclass

@dataclass(slots=True)
class BoardPosition:
    """Grid cell of a Match-3 tile. Tiles never move; only their type changes."""
    row: int
    col: int
