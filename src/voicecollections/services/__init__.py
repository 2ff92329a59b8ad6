"""Stateless, testable building blocks (e.g. extraction, request building) live here."""

from .collection_service import CollectionService
from .profile_service import ProfileService
from .speech_generator import SpeechGenerator
