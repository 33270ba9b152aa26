from dataclasses import dataclass


@dataclass(slots=True)
class PlayerProfile:
    """Local player identity collected during onboarding."""
    username: str = ""

    @property
    def has_username(self) -> bool:
        return bool(self.username)
