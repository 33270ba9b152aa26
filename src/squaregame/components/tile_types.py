from dataclasses import dataclass, field
from typing import Dict, Iterable, List

@dataclass(slots=True)
class TileTypes:
    """Canonical Match-3 categories stored on a single entity.

    ``types`` maps a category name to its display label. ``spawnable`` is the
    subset refills and new boards draw from, in a stable order.
    """
    types: Dict[str, str]
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spawnable:
            self.set_spawnable(self.spawnable)
        else:
            self.spawnable = list(self.types.keys())

    def label_for(self, type_name: str) -> str:
        return self.types.get(type_name, type_name)

    def spawnable_types(self) -> List[str]:
        return list(self.spawnable)

    def set_spawnable(self, type_names: Iterable[str]) -> None:
        seen: set[str] = set()
        filtered: List[str] = []
        for name in type_names:
            if name in self.types and name not in seen:
                filtered.append(name)
                seen.add(name)
        self.spawnable = filtered or list(self.types.keys())
