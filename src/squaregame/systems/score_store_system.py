from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from esper import World

from squaregame.components.score_record import ScoreRecord
from squaregame.constants import ASCENDING_METRIC, LEADERBOARD_SIZE, STORAGE_KEYS
from squaregame.events.bus import EVENT_RUN_COMPLETED, EVENT_SCORE_RECORDED, EventBus
from squaregame.utils.key_value_store import KeyValueStore, resolve_store

logger = logging.getLogger(__name__)


def storage_key_for(mode: str) -> str:
    return STORAGE_KEYS.get(mode, f"{mode}_records")


def sort_records(mode: str, records: List[ScoreRecord]) -> None:
    """Sort in place: fastest time first for timed modes, highest score first otherwise.

    The sort is stable, so equal metrics keep the order they were recorded in.
    """
    if ASCENDING_METRIC.get(mode, False):
        records.sort(key=lambda record: record.metric)
    else:
        records.sort(key=lambda record: record.metric, reverse=True)


class ScoreStoreSystem:
    """Durable, append-only leaderboard of completed runs, one collection per game mode."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        store: KeyValueStore | None = None,
        save_path: Path | None = None,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self._store = resolve_store(world, store, save_path)
        self._records: Dict[str, List[ScoreRecord]] = {}
        self.event_bus.subscribe(EVENT_RUN_COMPLETED, self._on_run_completed)
        self.load()

    def load(self) -> None:
        self._records = {}
        for mode in STORAGE_KEYS:
            self._records[mode] = self._load_mode(mode)

    def _load_mode(self, mode: str) -> List[ScoreRecord]:
        payload = self._store.get(storage_key_for(mode), [])
        if not isinstance(payload, list):
            logger.warning("discarding %s scores: expected a list", mode)
            return []
        records: List[ScoreRecord] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            try:
                records.append(ScoreRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping malformed %s score entry: %s", mode, exc)
        sort_records(mode, records)
        return records

    def record(self, entry: ScoreRecord) -> int:
        """Append ``entry``, re-sort its mode and persist. Returns its 1-based rank."""
        records = self._records.setdefault(entry.mode, [])
        records.append(entry)
        sort_records(entry.mode, records)
        self._store.set(storage_key_for(entry.mode), [record.to_dict() for record in records])
        rank = next(i for i, record in enumerate(records, start=1) if record is entry)
        self.event_bus.emit(EVENT_SCORE_RECORDED, record=entry, rank=rank)
        return rank

    def top_n(self, mode: str, n: int = LEADERBOARD_SIZE, level: Optional[str] = None) -> List[ScoreRecord]:
        if n <= 0:
            return []
        records = self._records.get(mode, [])
        if level is not None:
            records = [record for record in records if record.level == level]
        return list(records[:n])

    def best_for(self, mode: str, level: Optional[str] = None) -> Optional[ScoreRecord]:
        top = self.top_n(mode, 1, level)
        return top[0] if top else None

    def all_records(self, mode: str) -> List[ScoreRecord]:
        return list(self._records.get(mode, []))

    def _on_run_completed(self, sender, **payload) -> None:
        record = payload.get("record")
        if isinstance(record, ScoreRecord):
            self.record(record)
