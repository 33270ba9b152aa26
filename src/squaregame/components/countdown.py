from dataclasses import dataclass, field
from typing import Set, Tuple


@dataclass(slots=True)
class Countdown:
    """Session clock for Match-3 Rush.

    ``fired`` remembers which warning thresholds already notified during the
    current session so each one fires at most once.
    """

    limit: float
    remaining: float
    thresholds: Tuple[int, ...] = ()
    fired: Set[int] = field(default_factory=set)
    running: bool = False
    expired: bool = False

    def restart(self) -> None:
        self.remaining = self.limit
        self.fired.clear()
        self.running = True
        self.expired = False
