from __future__ import annotations

from pathlib import Path

from esper import World

from squaregame.components.player_profile import PlayerProfile
from squaregame.constants import USERNAME_KEY
from squaregame.events.bus import EVENT_USERNAME_SET, EventBus
from squaregame.utils.key_value_store import KeyValueStore, resolve_store
from squaregame.utils.singletons import get_or_create_singleton


class ProfileSystem:
    """Persists the player's username chosen during onboarding."""

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
        profile = self.profile
        stored = self._store.get(USERNAME_KEY, "")
        profile.username = stored.strip() if isinstance(stored, str) else ""

    @property
    def profile(self) -> PlayerProfile:
        return get_or_create_singleton(self.world, PlayerProfile, PlayerProfile)

    @property
    def has_username(self) -> bool:
        return self.profile.has_username

    @property
    def username(self) -> str:
        return self.profile.username

    def set_username(self, text: str) -> bool:
        """Store ``text`` with surrounding whitespace removed. Blank names are refused."""
        name = (text or "").strip()
        if not name:
            return False
        self.profile.username = name
        self._store.set(USERNAME_KEY, name)
        self.event_bus.emit(EVENT_USERNAME_SET, username=name)
        return True
