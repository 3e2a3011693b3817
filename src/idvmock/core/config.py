from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    data_dir: Path
    db_path: Path


@dataclass(frozen=True)
class Settings:
    port: int
    base_url: str
    callback_delay_ms: int
    client_id: str
    client_secret: str
    jwt_secret: str
    sdk_token_expiry_seconds: int
    environment: str

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


DEFAULT_DATA_DIRNAME = ".idvmock"
DEFAULT_PORT = 3000
DEFAULT_CALLBACK_DELAY_MS = 2000
DEFAULT_SDK_TOKEN_EXPIRY_SECONDS = 3600
DEFAULT_CLIENT_ID = "your-client-id"
DEFAULT_CLIENT_SECRET = "your-client-secret"
DEFAULT_JWT_SECRET = "idvmock-secret-key-change-in-production"


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    home_raw = os.getenv("IDVMOCK_HOME")
    if home_raw:
        data_dir = Path(home_raw).expanduser().resolve()
    else:
        data_dir = root / DEFAULT_DATA_DIRNAME

    db_raw = os.getenv("DB_PATH")
    db_path = Path(db_raw).expanduser().resolve() if db_raw else data_dir / "idvmock.db"

    return AppPaths(project_root=root, data_dir=data_dir, db_path=db_path)


def load_settings() -> Settings:
    port = _read_int_env("PORT", DEFAULT_PORT)
    base_url = (os.getenv("BASE_URL") or f"http://localhost:{port}").rstrip("/")
    return Settings(
        port=port,
        base_url=base_url,
        callback_delay_ms=_read_int_env("CALLBACK_DELAY_MS", DEFAULT_CALLBACK_DELAY_MS),
        client_id=os.getenv("MOCK_CLIENT_ID") or DEFAULT_CLIENT_ID,
        client_secret=os.getenv("MOCK_CLIENT_SECRET") or DEFAULT_CLIENT_SECRET,
        jwt_secret=os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET,
        sdk_token_expiry_seconds=_read_int_env("SDK_TOKEN_EXPIRY", DEFAULT_SDK_TOKEN_EXPIRY_SECONDS),
        environment=(os.getenv("IDVMOCK_ENV") or "development").strip().lower(),
    )
