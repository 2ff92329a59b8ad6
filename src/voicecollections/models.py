from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

# =============================================================================
# Voice parameters
# =============================================================================

MIN_SPEED = 0.5
MAX_SPEED = 3.0
DEFAULT_CATEGORY = "Uncategorized"
NO_SERIES = "No Series"
DEFAULT_ACCENT_COLOR = "#16a34a"


class Speaker(str, Enum):
    """Botnoi speaker ids offered to users."""

    SPEAKER_1 = "1"
    SPEAKER_2 = "2"
    SPEAKER_3 = "3"
    SPEAKER_4 = "4"


class Volume(str, Enum):
    """Nominal volume levels; the value is the gain token sent to the provider."""

    LOW = "0.5"
    NORMAL = "1"
    HIGH = "1.5"

    @property
    def gain(self) -> float:
        return float(self.value)


class Language(str, Enum):
    THAI = "th"
    ENGLISH = "en"


class OutputFormat(str, Enum):
    MP3 = "mp3"
    WAV = "wav"


class DocumentFormat(str, Enum):
    """Upload formats understood by the text extractors."""

    PLAIN_TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    UNSUPPORTED = "unsupported"


class VoiceParameters(BaseModel):
    """Voice settings chosen by the user.

    Speed is deliberately unbounded here: the speech request builder owns the
    range check so that it can report it as an ``InvalidParameterError``.
    """

    speaker: Speaker = Field(Speaker.SPEAKER_1, description="Botnoi speaker id")
    volume: Volume = Field(Volume.NORMAL, description="Volume level (0.5, 1 or 1.5)")
    speed: float = Field(1.0, description="Playback speed multiplier, 0.5 to 3.0")
    language: Language = Field(Language.THAI, description="Text language")


class SpeechRequest(BaseModel):
    """Validated request ready to be sent to the TTS provider."""

    text: str
    voice: VoiceParameters
    output_format: OutputFormat = OutputFormat.MP3
    credential: str = Field(..., repr=False)


class SynthesisResult(BaseModel):
    audio_url: str


# =============================================================================
# Documents
# =============================================================================


class ExtractedDocumentResponse(BaseModel):
    """Text extracted from an uploaded document."""

    title: str = Field(..., description="File name without its extension")
    filename: str | None = None
    format: DocumentFormat
    text: str
    character_count: int


class VoiceOption(BaseModel):
    id: str
    name: str
    gender: str | None = None
    description: str | None = None


class VoiceOptionsResponse(BaseModel):
    provider: str
    speakers: list[VoiceOption]
    volumes: dict[str, str]
    languages: list[str]
    output_formats: list[str]
    min_speed: float = MIN_SPEED
    max_speed: float = MAX_SPEED


# =============================================================================
# Voice collections
# =============================================================================


class CollectionDetails(BaseModel):
    """Fields describing a collection, shared by create and generate-and-save."""

    title: str = Field(..., description="Collection title")
    category: str = Field(DEFAULT_CATEGORY, description="Collection category")
    book_series: str | None = Field(None, description="Optional book series name")
    cover_image_url: str | None = Field(None, description="Optional cover image URL")


class CreateCollectionRequest(CollectionDetails):
    """Save text as a collection, without audio ("ungenerated")."""

    original_text: str = Field(..., description="Source text")
    voice: VoiceParameters = Field(default_factory=VoiceParameters)


class UpdateCollectionRequest(BaseModel):
    """Editable collection details. Omitted fields are left as they are."""

    title: str | None = None
    category: str | None = None
    book_series: str | None = None
    cover_image_url: str | None = None


class GenerateSpeechRequest(BaseModel):
    """Generate speech for unsaved text, optionally saving it as a collection."""

    text: str
    voice: VoiceParameters = Field(default_factory=VoiceParameters)
    output_format: OutputFormat = OutputFormat.MP3
    save: bool = Field(False, description="Save the text and audio as a collection")
    details: CollectionDetails | None = Field(
        None, description="Collection details, required when save is true"
    )


class GenerateCollectionAudioRequest(BaseModel):
    """(Re)generate audio for a stored collection."""

    voice: VoiceParameters | None = Field(
        None, description="New voice settings; the stored ones are used when omitted"
    )
    output_format: OutputFormat = OutputFormat.MP3


class CollectionSort(str, Enum):
    CREATED_AT = "created_at"
    TITLE = "title"
    CATEGORY = "category"
    SERIES = "series"


class CollectionFilters(BaseModel):
    """Filters for collection listing."""

    search: str | None = None
    category: str | None = None
    series: str | None = None
    generated: bool | None = None
    sort_by: CollectionSort = CollectionSort.CREATED_AT


class CollectionResponse(BaseModel):
    id: str
    user_id: str
    title: str
    original_text: str
    audio_url: str | None = None
    is_generated: bool
    status: str = Field(..., description="'generated' or 'ungenerated'")
    speaker: str
    volume: str
    speed: float
    language: str
    category: str
    book_series: str | None = None
    cover_image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class CollectionListResponse(BaseModel):
    """Paginated collection list with filter facets."""

    collections: list[CollectionResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    categories: list[str] = Field(default_factory=list)
    series: list[str] = Field(default_factory=list)
    groups: dict[str, list[str]] | None = Field(
        None, description="Collection ids grouped by series, when requested"
    )


class SpeechResponse(BaseModel):
    audio_url: str
    collection: CollectionResponse | None = None


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int
    ids: list[str]


# =============================================================================
# Profile and preferences
# =============================================================================


class ProfileResponse(BaseModel):
    id: str
    email: str
    username: str | None = None
    has_botnoi_token: bool
    botnoi_token_hint: str | None = Field(
        None, description="Last characters of the stored token"
    )
    updated_at: datetime | None = None


class UpdateProfileRequest(BaseModel):
    username: str | None = None
    botnoi_token: str | None = Field(
        None, description="Botnoi API token; an empty string removes it"
    )


class PreferencesResponse(BaseModel):
    dark_mode: bool = False
    accent_color: str = DEFAULT_ACCENT_COLOR


class UpdatePreferencesRequest(BaseModel):
    dark_mode: bool | None = None
    accent_color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")

    @field_validator("accent_color")
    @classmethod
    def lower_accent_color(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
