from dataclasses import dataclass

@dataclass(slots=True)
class TileType:
    """Per-cell category assignment for the Match-3 grid.

    Swaps and refills rewrite ``type_name`` in place. Display labels live on the
    singleton entity holding TileTypeRegistry + TileTypes.
    """
    type_name: str
