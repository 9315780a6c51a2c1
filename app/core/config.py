# app/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",  # strips the BOM from .env files saved on Windows
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # App
    # =========================
    APP_NAME: str = "Portfolio Learning Hub"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # "*", comma separated list, or empty for local defaults
    CORS_ORIGINS: str = ""

    # =========================
    # Database
    # =========================
    # "database" (persistent) | "memory" (tests / demo)
    STORAGE_BACKEND: str = "database"
    DATABASE_URL: str = Field(default="")
    AUTO_CREATE_TABLES: bool = True

    # =========================
    # Uploads
    # =========================
    UPLOAD_DIR: str = "./server/uploads"
    MAX_UPLOAD_MB: int = 10
    ALLOWED_UPLOAD_EXTS: str = (
        ".pdf,.doc,.docx,.ppt,.pptx,.txt,"
        ".jpg,.jpeg,.png,.gif,"
        ".mp4,.avi,.mov,.mp3,.wav"
    )


def get_database_url(settings: Settings) -> str:
    url = (settings.DATABASE_URL or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")

    # Old Render/Heroku style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    # Force psycopg (SQLAlchemy 2.x)
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)

    return url


def allowed_upload_exts(settings: Settings) -> set[str]:
    """
    Accepted extensions, lowercase with the leading dot.
    Ex: {".pdf", ".png", ".mp4"}
    """
    raw = (settings.ALLOWED_UPLOAD_EXTS or "").strip()
    if not raw:
        return set()
    exts = set()
    for x in raw.split(","):
        x = x.strip().lower()
        if not x:
            continue
        exts.add(x if x.startswith(".") else f".{x}")
    return exts


def max_upload_bytes(settings: Settings) -> int:
    """
    Upload ceiling in bytes.
    """
    mb = int(settings.MAX_UPLOAD_MB or 10)
    return mb * 1024 * 1024
