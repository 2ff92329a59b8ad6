from __future__ import annotations

from dataclasses import dataclass, field

from voicecollections.database import User
from voicecollections.models import PreferencesResponse


@dataclass
class SessionContext:
    """The signed-in user and their settings, passed explicitly to services.

    Built from an ``AuthSession`` row, which exists from sign-in until sign-out.
    """

    user: User
    session_id: str
    preferences: PreferencesResponse = field(default_factory=PreferencesResponse)

    @property
    def user_id(self) -> str:
        return self.user.id
