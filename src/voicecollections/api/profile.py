"""Profile, Botnoi credential and preference endpoints."""

import logging

from fastapi import APIRouter, Depends

from voicecollections.api.auth import get_current_session
from voicecollections.api.utils import get_profile_service, to_http_exception
from voicecollections.errors import VoiceCollectionsError
from voicecollections.models import (
    PreferencesResponse,
    ProfileResponse,
    UpdatePreferencesRequest,
    UpdateProfileRequest,
)
from voicecollections.services.profile_service import ProfileService
from voicecollections.session import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    session: SessionContext = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        return await profiles.get_profile(session.user)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e


@router.put("", response_model=ProfileResponse)
async def update_profile(
    request: UpdateProfileRequest,
    session: SessionContext = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Update username and/or the Botnoi API token."""
    logger.info(f"Updating profile for user {session.user_id}")
    try:
        return await profiles.update_profile(session.user, request)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    session: SessionContext = Depends(get_current_session),
) -> PreferencesResponse:
    return session.preferences


@router.put("/preferences", response_model=PreferencesResponse)
async def update_preferences(
    request: UpdatePreferencesRequest,
    session: SessionContext = Depends(get_current_session),
    profiles: ProfileService = Depends(get_profile_service),
) -> PreferencesResponse:
    try:
        preferences = await profiles.update_preferences(session.user_id, request)
    except VoiceCollectionsError as e:
        raise to_http_exception(e) from e
    session.preferences = preferences
    return preferences
