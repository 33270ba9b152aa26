from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(slots=True)
class ColorSelection:
    """Ordered, not-yet-confirmed Color Match picks. The first pick sets the target color."""
    indices: List[int] = field(default_factory=list)

    def clear(self) -> None:
        self.indices.clear()


@dataclass(slots=True)
class SwapPick:
    """The pending swap candidate on the Match-3 grid, if any."""
    position: Optional[Tuple[int, int]] = None
