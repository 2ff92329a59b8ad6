import pytest

from voicecollections.errors import (
    EmptyTextError,
    InvalidParameterError,
    MissingCredentialError,
    ValidationError,
)
from voicecollections.models import Language, OutputFormat, Speaker, VoiceParameters, Volume
from voicecollections.services.speech_request import build_speech_request


def voice(**overrides) -> VoiceParameters:
    params = {"speaker": "1", "volume": "1", "speed": 1.0, "language": "th"}
    params.update(overrides)
    return VoiceParameters(**params)


def test_valid_request_is_assembled():
    request = build_speech_request(
        "  สวัสดี  ", voice(speaker="3", volume="1.5"), OutputFormat.WAV, credential="tok"
    )

    assert request.text == "สวัสดี"
    assert request.voice.speaker == Speaker.SPEAKER_3
    assert request.voice.volume == Volume.HIGH
    assert request.voice.language == Language.THAI
    assert request.output_format == OutputFormat.WAV
    assert request.credential == "tok"


def test_credential_is_hidden_from_repr():
    request = build_speech_request("Hello", voice(), credential="very-secret")
    assert "very-secret" not in repr(request)


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
def test_blank_text_rejected(text):
    with pytest.raises(EmptyTextError):
        build_speech_request(text, voice(), credential="tok")


def test_blank_text_reported_before_other_problems():
    with pytest.raises(EmptyTextError):
        build_speech_request("   ", voice(speed=10.0), credential=None)


@pytest.mark.parametrize("credential", [None, "", "   "])
def test_missing_credential(credential):
    with pytest.raises(MissingCredentialError):
        build_speech_request("Hello", voice(), credential=credential)


def test_missing_credential_reported_before_bad_speed():
    with pytest.raises(MissingCredentialError):
        build_speech_request("Hello", voice(speed=0.1), credential=None)


@pytest.mark.parametrize("speed", [0.5, 1.0, 2.25, 3.0])
def test_speed_bounds_are_inclusive(speed):
    request = build_speech_request("Hello", voice(speed=speed), credential="tok")
    assert request.voice.speed == speed


@pytest.mark.parametrize("speed", [0.49, 3.01, 0.0, -1.0])
def test_speed_out_of_range(speed):
    with pytest.raises(InvalidParameterError):
        build_speech_request("Hello", voice(speed=speed), credential="tok")


def test_validation_errors_share_a_base():
    for exc in (EmptyTextError(), MissingCredentialError(), InvalidParameterError("x")):
        assert isinstance(exc, ValidationError)


def test_volume_gain():
    assert Volume.LOW.gain == 0.5
    assert Volume.NORMAL.gain == 1.0
    assert Volume.HIGH.gain == 1.5
