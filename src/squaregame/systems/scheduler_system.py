from __future__ import annotations

import logging
from typing import Callable, List

from esper import World

from squaregame.components.pending_continuation import PendingContinuation
from squaregame.events.bus import EVENT_TICK, EventBus

logger = logging.getLogger(__name__)


class SchedulerSystem:
    """Runs delayed continuations of already-started operations on ``EVENT_TICK``.

    Each continuation is its own entity so a new run can drop everything the
    previous run left in flight with a single ``cancel(owner=...)``. A delay of
    zero or less runs the callback immediately.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        owner: str,
        run_id: int,
        kind: str = "continuation",
    ) -> int | None:
        if delay <= 0:
            callback()
            return None
        return self.world.create_entity(
            PendingContinuation(kind=kind, remaining=float(delay), callback=callback, owner=owner, run_id=run_id)
        )

    def cancel(self, *, owner: str | None = None, kind: str | None = None) -> int:
        """Drop pending continuations matching ``owner``/``kind``. Returns how many were dropped."""
        dropped = 0
        for entity, pending in list(self.world.get_component(PendingContinuation)):
            if owner is not None and pending.owner != owner:
                continue
            if kind is not None and pending.kind != kind:
                continue
            self.world.delete_entity(entity, immediate=True)
            dropped += 1
        if dropped:
            logger.debug("cancelled %d pending continuation(s) owner=%s kind=%s", dropped, owner, kind)
        return dropped

    def pending(self, *, owner: str | None = None, kind: str | None = None) -> List[PendingContinuation]:
        return [
            pending
            for _, pending in self.world.get_component(PendingContinuation)
            if (owner is None or pending.owner == owner) and (kind is None or pending.kind == kind)
        ]

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        if dt <= 0:
            return
        due: List[tuple[int, PendingContinuation]] = []
        for entity, pending in list(self.world.get_component(PendingContinuation)):
            pending.remaining -= dt
            if pending.remaining <= 0:
                due.append((entity, pending))
        # Oldest first so a refill scheduled before a rescan always runs before it.
        due.sort(key=lambda item: item[0])
        for entity, pending in due:
            if not self.world.entity_exists(entity):
                # Cancelled by an earlier callback in this same tick.
                continue
            self.world.delete_entity(entity, immediate=True)
            pending.callback()
