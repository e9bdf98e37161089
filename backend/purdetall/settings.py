import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = Path(__file__).resolve().parents[1]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    db_path: str = str(BACKEND_DIR / "data" / "purdetall.sqlite3")
    upload_dir: str = str(BACKEND_DIR / "uploads")
    public_dir: str = str(BACKEND_DIR / "public")
    auth_secret: str = "dev-insecure-secret-change-me"
    token_ttl_hours: int = 24
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    trusted_hosts: list[str] = field(default_factory=lambda: ["*"])
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 15 * 60
    max_body_bytes: int = 10 * 1024 * 1024
    max_upload_bytes: int = 5 * 1024 * 1024
    email_host: str = ""
    email_port: int = 587
    email_user: str = ""
    email_password: str = ""
    email_from: str = ""
    log_level: str = "INFO"
    bcrypt_rounds: int = 12


def load_settings(db_path: Optional[str] = None) -> Settings:
    defaults = Settings()
    return Settings(
        db_path=db_path or os.getenv("SITE_DB_PATH", defaults.db_path),
        upload_dir=os.getenv("UPLOAD_DIR", defaults.upload_dir),
        public_dir=os.getenv("PUBLIC_DIR", defaults.public_dir),
        auth_secret=os.getenv("AUTH_SECRET", defaults.auth_secret),
        token_ttl_hours=_env_int("AUTH_TOKEN_TTL_HOURS", defaults.token_ttl_hours),
        cors_origins=_parse_csv_env("CORS_ORIGINS", "*"),
        trusted_hosts=_parse_csv_env("TRUSTED_HOSTS", "*"),
        rate_limit_max=_env_int("RATE_LIMIT_MAX", defaults.rate_limit_max),
        rate_limit_window_seconds=_env_int("RATE_LIMIT_WINDOW_SECONDS", defaults.rate_limit_window_seconds),
        max_body_bytes=_env_int("MAX_BODY_BYTES", defaults.max_body_bytes),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
        email_host=os.getenv("EMAIL_HOST", "").strip(),
        email_port=_env_int("EMAIL_PORT", defaults.email_port),
        email_user=os.getenv("EMAIL_USER", "").strip(),
        email_password=os.getenv("EMAIL_PASS", ""),
        email_from=os.getenv("EMAIL_FROM", "").strip(),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", defaults.bcrypt_rounds),
    )
