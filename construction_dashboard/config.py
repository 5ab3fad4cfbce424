# construction_dashboard/config.py
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from construction_dashboard.services.exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///construction_dashboard.db"
DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60
DEFAULT_BCRYPT_ROUNDS = 12


@dataclass(frozen=True)
class Settings:
    """
    애플리케이션 전역 설정값입니다.
    서명 키(secret_key)는 기본값이 없으며, 비어 있으면 초기화 단계에서 중단됩니다.
    """
    secret_key: Optional[str]
    database_url: str = DEFAULT_DATABASE_URL
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    log_level: str = "INFO"
    log_format: str = "text"
    host: str = ""
    port: int = 8000
    seed_demo_data: bool = True

    def require_secret_key(self) -> str:
        """서명 키를 반환합니다. 설정되지 않았다면 ConfigurationError를 발생시킵니다."""
        if not self.secret_key:
            raise ConfigurationError("DASHBOARD_SECRET_KEY is not set; refusing to start without a signing secret.")
        return self.secret_key


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'.")


def _bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got '{raw}'.")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    환경 변수에서 설정을 읽어 Settings 객체를 만듭니다.

    Args:
        environ: 읽어 올 환경 변수 매핑. 생략하면 os.environ을 사용합니다.
    """
    environ = os.environ if environ is None else environ
    log_format = environ.get("LOG_FORMAT", "text").lower()
    if log_format not in ("text", "json"):
        raise ConfigurationError(f"LOG_FORMAT must be 'text' or 'json', got '{log_format}'.")

    return Settings(
        secret_key=environ.get("DASHBOARD_SECRET_KEY") or None,
        database_url=environ.get("DATABASE_URL", DEFAULT_DATABASE_URL),
        token_ttl_seconds=_int(environ, "TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS),
        bcrypt_rounds=_int(environ, "BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        log_format=log_format,
        host=environ.get("HOST", ""),
        port=_int(environ, "PORT", 8000),
        seed_demo_data=_bool(environ, "SEED_DEMO_DATA", True),
    )
