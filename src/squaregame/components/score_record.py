from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _new_record_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ScoreRecord:
    """Result of one completed run.

    ``metric`` is elapsed seconds for Color Match and points for Match-3.
    ``level`` carries the Color Match difficulty and is ``None`` for Match-3.
    """

    mode: str
    metric: float
    level: Optional[str] = None
    id: str = field(default_factory=_new_record_id)
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode,
            "level": self.level,
            "metric": self.metric,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> ScoreRecord:
        """Build a record from its JSON form.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when the payload is
        malformed; callers loading persisted data skip such entries.
        """
        timestamp = datetime.fromisoformat(str(payload["timestamp"]))
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        level = payload.get("level")
        metric = payload["metric"]
        if isinstance(metric, bool) or not isinstance(metric, (int, float)):
            raise TypeError(f"metric must be numeric, got {metric!r}")
        return cls(
            mode=str(payload["mode"]),
            metric=metric,
            level=str(level) if level is not None else None,
            id=str(payload["id"]),
            timestamp=timestamp,
        )
