"""OTP Ledger — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./otp_ledger.db"
    # Ignored for SQLite, which serialises writers with BEGIN IMMEDIATE
    db_isolation_level: str = "SERIALIZABLE"

    # ── OTP ───────────────────────────────────────────────
    otp_length: int = 5
    otp_ttl_seconds: int = 300  # 5 minutes

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Ledger"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    request_timeout_seconds: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
