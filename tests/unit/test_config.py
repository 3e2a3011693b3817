from pathlib import Path

from idvmock.core.config import load_paths, load_settings


def test_settings_defaults(monkeypatch) -> None:
    for name in (
        "PORT",
        "BASE_URL",
        "CALLBACK_DELAY_MS",
        "MOCK_CLIENT_ID",
        "MOCK_CLIENT_SECRET",
        "JWT_SECRET",
        "SDK_TOKEN_EXPIRY",
        "IDVMOCK_ENV",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()
    assert settings.port == 3000
    assert settings.base_url == "http://localhost:3000"
    assert settings.callback_delay_ms == 2000
    assert settings.client_id == "your-client-id"
    assert settings.client_secret == "your-client-secret"
    assert settings.sdk_token_expiry_seconds == 3600
    assert settings.is_development is True


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "4000")
    monkeypatch.setenv("BASE_URL", "https://mock.example.test/")
    monkeypatch.setenv("CALLBACK_DELAY_MS", "500")
    monkeypatch.setenv("SDK_TOKEN_EXPIRY", "not-a-number")
    monkeypatch.setenv("IDVMOCK_ENV", "Production")

    settings = load_settings()
    assert settings.port == 4000
    assert settings.base_url == "https://mock.example.test"
    assert settings.callback_delay_ms == 500
    assert settings.sdk_token_expiry_seconds == 3600
    assert settings.is_development is False


def test_paths_honour_home_and_db_overrides(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("IDVMOCK_HOME", raising=False)
    monkeypatch.delenv("DB_PATH", raising=False)
    paths = load_paths(tmp_path)
    assert paths.data_dir == tmp_path.resolve() / ".idvmock"
    assert paths.db_path == tmp_path.resolve() / ".idvmock" / "idvmock.db"

    monkeypatch.setenv("IDVMOCK_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("DB_PATH", str(tmp_path / "custom.sqlite"))
    paths = load_paths(tmp_path)
    assert paths.data_dir == (tmp_path / "home").resolve()
    assert paths.db_path == (tmp_path / "custom.sqlite").resolve()
