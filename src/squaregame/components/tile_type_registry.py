from dataclasses import dataclass

@dataclass(slots=True)
class TileTypeRegistry:
    """Tag component for the single entity that stores the Match-3 categories.

    The same entity carries a TileTypes component with name -> label mappings.
    """
    pass
