from voicecollections import __main__ as launcher
from voicecollections.api.settings import get_settings


def test_main_runs_uvicorn_with_settings(monkeypatch):
    calls = []
    monkeypatch.setattr(launcher.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    launcher.main()

    settings = get_settings()
    assert len(calls) == 1
    app, kwargs = calls[0]
    assert app == "voicecollections.api.main:app"
    assert kwargs["host"] == settings.host
    assert kwargs["port"] == settings.port
    assert kwargs["reload"] is (settings.env == "dev")
