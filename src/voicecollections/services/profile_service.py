"""Profile, provider credential and theme preferences of a user."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voicecollections.database import Profile, User, UserPreferences
from voicecollections.errors import PersistenceError
from voicecollections.models import (
    PreferencesResponse,
    ProfileResponse,
    UpdatePreferencesRequest,
    UpdateProfileRequest,
)

logger = logging.getLogger(__name__)


def mask_token(token: str | None) -> str | None:
    """Keep only the last four characters of a secret."""
    if not token:
        return None
    return f"...{token[-4:]}" if len(token) > 4 else "..."


class ProfileService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get(self, model, key: str):
        try:
            return await self.db.get(model, key)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load {model.__tablename__}") from e

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e!s}", exc_info=True)
            raise PersistenceError(f"Failed to {action}") from e

    async def get_profile(self, user: User) -> ProfileResponse:
        profile = await self._get(Profile, user.id)
        return ProfileResponse(
            id=user.id,
            email=user.email,
            username=profile.username if profile else None,
            has_botnoi_token=bool(profile and profile.botnoi_token),
            botnoi_token_hint=mask_token(profile.botnoi_token) if profile else None,
            updated_at=profile.updated_at if profile else None,
        )

    async def update_profile(self, user: User, changes: UpdateProfileRequest) -> ProfileResponse:
        """Upsert the profile row. An empty token string removes the stored token."""
        profile = await self._get(Profile, user.id)
        if profile is None:
            profile = Profile(id=user.id)
            self.db.add(profile)

        fields = changes.model_dump(exclude_unset=True)
        if "username" in fields:
            profile.username = (fields["username"] or "").strip() or None
        if "botnoi_token" in fields:
            profile.botnoi_token = (fields["botnoi_token"] or "").strip() or None
            logger.info(f"Botnoi token {'updated' if profile.botnoi_token else 'removed'} for user {user.id}")

        await self._commit("save profile")
        return await self.get_profile(user)

    async def get_credential(self, user_id: str) -> str | None:
        """Return the Botnoi token stored for *user_id*, if any."""
        profile = await self._get(Profile, user_id)
        return profile.botnoi_token if profile else None

    async def get_preferences(self, user_id: str) -> PreferencesResponse:
        """Stored preferences, or the defaults when the user never saved any."""
        prefs = await self._get(UserPreferences, user_id)
        if prefs is None:
            return PreferencesResponse()
        return PreferencesResponse(dark_mode=prefs.dark_mode, accent_color=prefs.accent_color)

    async def update_preferences(
        self, user_id: str, changes: UpdatePreferencesRequest
    ) -> PreferencesResponse:
        prefs = await self._get(UserPreferences, user_id)
        if prefs is None:
            defaults = PreferencesResponse()
            prefs = UserPreferences(
                user_id=user_id, dark_mode=defaults.dark_mode, accent_color=defaults.accent_color
            )
            self.db.add(prefs)

        if changes.dark_mode is not None:
            prefs.dark_mode = changes.dark_mode
        if changes.accent_color is not None:
            prefs.accent_color = changes.accent_color

        await self._commit("save preferences")
        return PreferencesResponse(dark_mode=prefs.dark_mode, accent_color=prefs.accent_color)
