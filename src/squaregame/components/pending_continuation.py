from dataclasses import dataclass
from typing import Callable


@dataclass(slots=True)
class PendingContinuation:
    """A delayed follow-up of an operation that already started.

    ``run_id`` pins the continuation to the run that scheduled it; ``kind`` lets
    callers cancel one family of continuations (e.g. only the alert hide).
    """

    kind: str
    remaining: float
    callback: Callable[[], None]
    owner: str
    run_id: int
