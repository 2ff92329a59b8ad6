"""Error taxonomy for the ingestion -> synthesis -> persistence pipeline."""

from __future__ import annotations


class VoiceCollectionsError(Exception):
    """Base class for every error surfaced to the triggering user action."""


# =============================================================================
# Extraction
# =============================================================================


class ExtractionError(VoiceCollectionsError):
    """A document could not be decoded into plain text."""

    def __init__(
        self, format: str, cause: BaseException | str | None = None, message: str | None = None
    ) -> None:
        self.format = format
        self.cause = cause
        if message is None:
            message = f"Failed to extract text from {format} document"
            if cause:
                message = f"{message}: {cause}"
        super().__init__(message)


class UnsupportedFormatError(ExtractionError):
    def __init__(self, content_type: str | None = None, filename: str | None = None) -> None:
        self.content_type = content_type
        self.filename = filename
        super().__init__("unsupported", message="Unsupported file type")


# =============================================================================
# Request validation
# =============================================================================


class ValidationError(VoiceCollectionsError):
    """A speech request or record has a bad or missing field."""


class EmptyTextError(ValidationError):
    def __init__(self, message: str = "Please enter some text to convert to speech.") -> None:
        super().__init__(message)


class MissingCredentialError(ValidationError):
    def __init__(
        self,
        message: str = "Botnoi API key not found. Please set your API key in profile settings.",
    ) -> None:
        super().__init__(message)


class InvalidParameterError(ValidationError):
    pass


# =============================================================================
# Remote synthesis
# =============================================================================


class RemoteError(VoiceCollectionsError):
    """The TTS provider answered with a non-success status (or was unreachable)."""

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"TTS provider request failed: {body}")
        else:
            super().__init__(f"TTS provider error ({status}): {body}")


class MalformedResponseError(VoiceCollectionsError):
    """The provider reported success but the body carries no usable audio reference."""

    def __init__(self, body: str) -> None:
        self.body = body
        super().__init__("TTS provider returned a response without an audio URL")


class SynthesisTimeoutError(VoiceCollectionsError, TimeoutError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"TTS provider did not respond within {timeout:g} seconds")


class GenerationInProgressError(VoiceCollectionsError):
    """A generation for the same target is still pending."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__("Speech generation is already in progress. Please wait for it to finish.")


# =============================================================================
# Persistence
# =============================================================================


class PersistenceError(VoiceCollectionsError):
    """A store operation failed."""


class CollectionNotFoundError(VoiceCollectionsError):
    def __init__(self, collection_id: str) -> None:
        self.collection_id = collection_id
        super().__init__(f"Collection {collection_id} not found or access denied")


class BulkDeleteError(PersistenceError):
    """Bulk delete rejected: some ids do not exist for the owner, nothing was deleted."""

    def __init__(self, missing_ids: list[str]) -> None:
        self.missing_ids = missing_ids
        super().__init__(
            f"{len(missing_ids)} collection(s) not found; no collections were deleted"
        )
