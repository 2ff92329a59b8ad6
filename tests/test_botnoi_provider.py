"""Tests for the Botnoi provider using httpx.MockTransport."""

import json

import httpx
import pytest

from voicecollections.errors import MalformedResponseError, RemoteError, SynthesisTimeoutError
from voicecollections.infrastructure.tts import BotnoiProvider
from voicecollections.models import SpeechRequest, VoiceParameters

API_URL = "https://botnoi.test/openapi/v1/generate_audio"


def make_request(**voice) -> SpeechRequest:
    return SpeechRequest(
        text="สวัสดีครับ",
        voice=VoiceParameters(**voice),
        output_format="mp3",
        credential="secret-token",
    )


def make_provider(handler) -> tuple[BotnoiProvider, list[httpx.Request]]:
    calls: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return BotnoiProvider(api_url=API_URL, timeout=5.0, client=client), calls


@pytest.mark.asyncio
async def test_success_returns_audio_url():
    provider, calls = make_provider(
        lambda r: httpx.Response(200, json={"audio_url": "https://cdn.botnoi.ai/a.mp3"})
    )

    result = await provider.synthesize(make_request())

    assert result.audio_url == "https://cdn.botnoi.ai/a.mp3"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_request_wire_format():
    provider, calls = make_provider(
        lambda r: httpx.Response(200, json={"audio_url": "https://cdn.botnoi.ai/a.mp3"})
    )

    await provider.synthesize(
        make_request(speaker="2", volume="0.5", speed=1.25, language="en")
    )

    sent = calls[0]
    assert sent.method == "POST"
    assert str(sent.url) == API_URL
    assert sent.headers["Botnoi-Token"] == "secret-token"
    assert json.loads(sent.content) == {
        "text": "สวัสดีครับ",
        "speaker": "2",
        "volume": "0.5",
        "speed": 1.25,
        "type_media": "mp3",
        "save_file": "true",
        "language": "en",
    }


@pytest.mark.asyncio
async def test_unauthorized_is_remote_error():
    provider, _ = make_provider(lambda r: httpx.Response(401, text="invalid token"))

    with pytest.raises(RemoteError) as exc_info:
        await provider.synthesize(make_request())

    assert exc_info.value.status == 401
    assert exc_info.value.body == "invalid token"


@pytest.mark.asyncio
async def test_server_error_is_not_retried():
    provider, calls = make_provider(lambda r: httpx.Response(500, text="boom"))

    with pytest.raises(RemoteError) as exc_info:
        await provider.synthesize(make_request())

    assert exc_info.value.status == 500
    assert len(calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"message": "ok"},
        {"audio_url": ""},
        {"audio_url": None},
        {"audio_url": 42},
        ["https://cdn.botnoi.ai/a.mp3"],
    ],
)
async def test_success_without_audio_url_is_malformed(body):
    provider, _ = make_provider(lambda r: httpx.Response(200, json=body))

    with pytest.raises(MalformedResponseError):
        await provider.synthesize(make_request())


@pytest.mark.asyncio
async def test_non_json_body_is_malformed():
    provider, _ = make_provider(lambda r: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedResponseError) as exc_info:
        await provider.synthesize(make_request())

    assert exc_info.value.body == "<html>oops</html>"


@pytest.mark.asyncio
async def test_timeout_is_distinct_from_remote_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    provider, calls = make_provider(handler)

    with pytest.raises(SynthesisTimeoutError) as exc_info:
        await provider.synthesize(make_request())

    assert not isinstance(exc_info.value, RemoteError)
    assert isinstance(exc_info.value, TimeoutError)
    assert exc_info.value.timeout == 5.0
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_connection_failure_is_remote_error_without_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider, _ = make_provider(handler)

    with pytest.raises(RemoteError) as exc_info:
        await provider.synthesize(make_request())

    assert exc_info.value.status is None
    assert "connection refused" in exc_info.value.body


def test_list_voices():
    provider = BotnoiProvider()
    assert [v.id for v in provider.list_voices()] == ["1", "2", "3", "4"]
    assert provider.name == "botnoi"
