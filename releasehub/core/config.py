from pathlib import Path

from dataclasses import dataclass
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

MAX_RELEASE_ID_ATTEMPTS = 1000


def _resolve_path(value: str, fallback: str) -> str:
    raw = (value or "").strip() or fallback
    path = Path(raw)
    if not path.is_absolute():
        path = (PROJECT_ROOT / path).resolve()
    return str(path)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    APP_NAME: str = "releasehub"
    DATABASE_URL: str = "sqlite:///data/releasehub.db"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE_PATH: str = ""
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Release storage
    RELEASE_ROOT: str = "data/release"
    RELEASE_ID_MAX_ATTEMPTS: int = MAX_RELEASE_ID_ATTEMPTS
    DOWNLOAD_CHUNK_SIZE_BYTES: int = 1024 * 1024
    DOWNLOAD_SPOOL_MAX_BYTES: int = 16 * 1024 * 1024

    # Links and naming
    BASE_URL: str = "http://127.0.0.1:8000"
    FILENAME_TEMPLATE: str = "release-{{ version }}-{{ date }}.bin"
    NOTIFY_EMAIL_SUBJECT_TEMPLATE: str = "New release {{ release.version }} is available"

    # Admin credentials (HTTP Basic)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""

    # Email
    EMAIL_FROM: str = "notify@releasehub.local"
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_VALIDATE_CERTS: bool = True

    # Email retry
    EMAIL_RETRY_MAX_ATTEMPTS: int = 4
    EMAIL_RETRY_BASE_DELAY_SECONDS: int = 2
    EMAIL_RETRY_MAX_DELAY_SECONDS: int = 30

    @model_validator(mode="after")
    def normalize_and_validate(self) -> "AppSettings":
        self.LOG_LEVEL = (self.LOG_LEVEL or "INFO").upper()
        self.LOG_DIR = _resolve_path(self.LOG_DIR, "logs")
        self.LOG_FILE_PATH = _resolve_path(self.LOG_FILE_PATH, str(Path(self.LOG_DIR) / "releasehub.log"))
        self.RELEASE_ROOT = _resolve_path(self.RELEASE_ROOT, "data/release")
        self.BASE_URL = (self.BASE_URL or "http://127.0.0.1:8000").strip().rstrip("/")

        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set.")
        if not 1 <= self.RELEASE_ID_MAX_ATTEMPTS <= MAX_RELEASE_ID_ATTEMPTS:
            raise RuntimeError(f"RELEASE_ID_MAX_ATTEMPTS must be between 1 and {MAX_RELEASE_ID_ATTEMPTS}.")
        if self.DOWNLOAD_CHUNK_SIZE_BYTES <= 0:
            raise RuntimeError("DOWNLOAD_CHUNK_SIZE_BYTES must be positive.")
        if not self.FILENAME_TEMPLATE.strip():
            raise RuntimeError("FILENAME_TEMPLATE must not be empty.")
        return self

    def make_link(self, link_id: str) -> str:
        return f"{self.BASE_URL}/download/{link_id}"


settings = AppSettings()


@dataclass(frozen=True)
class MailConfig:
    MAIL_USERNAME: str
    MAIL_PASSWORD: str
    MAIL_FROM: str
    MAIL_PORT: int
    MAIL_SERVER: str
    MAIL_STARTTLS: bool
    MAIL_SSL_TLS: bool
    USE_CREDENTIALS: bool
    VALIDATE_CERTS: bool


def build_mail_config(app_settings: AppSettings) -> MailConfig:
    return MailConfig(
        MAIL_USERNAME=app_settings.SMTP_USERNAME,
        MAIL_PASSWORD=app_settings.SMTP_PASSWORD,
        MAIL_FROM=app_settings.EMAIL_FROM,
        MAIL_PORT=app_settings.SMTP_PORT,
        MAIL_SERVER=app_settings.SMTP_HOST,
        MAIL_STARTTLS=app_settings.SMTP_USE_TLS,
        MAIL_SSL_TLS=app_settings.SMTP_USE_SSL,
        USE_CREDENTIALS=bool(app_settings.SMTP_USERNAME and app_settings.SMTP_PASSWORD),
        VALIDATE_CERTS=app_settings.SMTP_VALIDATE_CERTS,
    )
