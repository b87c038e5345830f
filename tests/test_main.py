"""Tests for src/main.py: TLS bootstrap and app wiring."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import src.main as main
from src.core.config import Settings
from src.main import TLSConfigurationError, create_app, load_tls_credentials


def test_missing_certificate_is_refused(test_settings: Settings) -> None:
    with pytest.raises(TLSConfigurationError):
        load_tls_credentials(test_settings)


def test_missing_key_is_refused(test_settings: Settings) -> None:
    Path(test_settings.SSL_CERTFILE).write_text("cert")
    with pytest.raises(TLSConfigurationError):
        load_tls_credentials(test_settings)


def test_credentials_found(test_settings: Settings) -> None:
    Path(test_settings.SSL_KEYFILE).write_text("key")
    Path(test_settings.SSL_CERTFILE).write_text("cert")
    keyfile, certfile = load_tls_credentials(test_settings)
    assert keyfile == Path(test_settings.SSL_KEYFILE)
    assert certfile == Path(test_settings.SSL_CERTFILE)


def test_run_exits_without_credentials(
    test_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The server never binds a port without certificates."""

    def must_not_serve(*args, **kwargs) -> None:
        raise AssertionError("uvicorn.run should not be reached")

    monkeypatch.setattr(main, "get_settings", lambda: test_settings)
    monkeypatch.setattr(main.uvicorn, "run", must_not_serve)
    with pytest.raises(SystemExit) as exit_info:
        main.run()
    assert exit_info.value.code == 1


def test_run_serves_over_https(
    test_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    Path(test_settings.SSL_KEYFILE).write_text("key")
    Path(test_settings.SSL_CERTFILE).write_text("cert")
    served: dict = {}

    def fake_serve(app, **kwargs) -> None:
        served.update(kwargs)

    monkeypatch.setattr(main, "get_settings", lambda: test_settings)
    monkeypatch.setattr(main.uvicorn, "run", fake_serve)
    main.run()
    assert served["port"] == test_settings.PORT
    assert served["ssl_keyfile"] == test_settings.SSL_KEYFILE
    assert served["ssl_certfile"] == test_settings.SSL_CERTFILE


def test_lifespan_writes_log_files(test_settings: Settings) -> None:
    with TestClient(create_app(test_settings)) as client:
        client.get("/health")
    log_dir = Path(test_settings.LOG_DIR)
    assert (log_dir / "combined.log").exists()
    assert (log_dir / "error.log").exists()


def test_sweeper_started_when_enabled(test_settings: Settings) -> None:
    settings = test_settings.model_copy(update={"SWEEPER_ENABLED": True})
    app = create_app(settings)
    with TestClient(app):
        assert app.state.sweeper.running
    assert not app.state.sweeper.running


def test_api_prefix_is_configurable(test_settings: Settings) -> None:
    settings = test_settings.model_copy(update={"API_PREFIX": ""})
    with TestClient(create_app(settings)) as client:
        assert client.get("/lobbies").status_code == 200
        assert client.get("/api/lobbies").status_code == 404
