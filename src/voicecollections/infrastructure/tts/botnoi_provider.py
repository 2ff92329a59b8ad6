from __future__ import annotations

import logging

import httpx

from voicecollections.errors import MalformedResponseError, RemoteError, SynthesisTimeoutError
from voicecollections.infrastructure.tts.base import TTSProvider, Voice
from voicecollections.models import SpeechRequest, SynthesisResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api-voice.botnoi.ai/openapi/v1/generate_audio"
TOKEN_HEADER = "Botnoi-Token"


class BotnoiProvider(TTSProvider):
    """TTS provider for the Botnoi Voice open API.

    Botnoi stores the generated file itself (``save_file``) and answers with a
    URL to it, so nothing is downloaded here.
    """

    name: str = "botnoi"

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 45.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self._client = client

    def list_voices(self) -> list[Voice]:
        """Botnoi speakers exposed to users, keyed by their numeric id."""
        return [
            Voice(id="1", name="Speaker 1"),
            Voice(id="2", name="Speaker 2"),
            Voice(id="3", name="Speaker 3"),
            Voice(id="4", name="Speaker 4"),
        ]

    def _payload(self, request: SpeechRequest) -> dict[str, object]:
        return {
            "text": request.text,
            "speaker": request.voice.speaker.value,
            "volume": request.voice.volume.value,
            "speed": request.voice.speed,
            "type_media": request.output_format.value,
            "save_file": "true",
            "language": request.voice.language.value,
        }

    async def synthesize(self, request: SpeechRequest) -> SynthesisResult:
        """POST the request once. No retries."""
        headers = {TOKEN_HEADER: request.credential, "Content-Type": "application/json"}
        payload = self._payload(request)

        logger.info(
            f"Requesting Botnoi synthesis: {len(request.text)} chars, speaker={payload['speaker']}, "
            f"language={payload['language']}, format={payload['type_media']}"
        )

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.api_url, json=payload, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"Botnoi request timed out after {self.timeout}s")
            raise SynthesisTimeoutError(self.timeout) from e
        except httpx.HTTPError as e:
            logger.error(f"Botnoi request failed: {e}")
            raise RemoteError(None, str(e)) from e

        if not response.is_success:
            logger.warning(f"Botnoi API error: status={response.status_code}")
            raise RemoteError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(response.text) from e

        audio_url = data.get("audio_url") if isinstance(data, dict) else None
        if not isinstance(audio_url, str) or not audio_url.strip():
            logger.warning("Botnoi response did not contain an audio_url")
            raise MalformedResponseError(response.text)

        logger.info("Botnoi synthesis succeeded")
        return SynthesisResult(audio_url=audio_url)
