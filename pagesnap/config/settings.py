"""
Service settings loaded from the environment.

All fields can be overridden with PAGESNAP_* environment variables or a .env
file. The remote browser credential is also accepted as plain BROWSERLESS_TOKEN.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """PageSnap configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PAGESNAP_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # === Server ===
    host: str = "127.0.0.1"
    port: int = 8300
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # === Remote browser ===
    browserless_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAGESNAP_BROWSERLESS_TOKEN", "BROWSERLESS_TOKEN"),
        description="Bearer token for the remote browser endpoint; unset means local only",
    )
    browserless_endpoint: str = "wss://production-sfo.browserless.io"

    # === Timeouts (milliseconds) ===
    protocol_timeout_ms: int = Field(default=120_000, gt=0)
    navigation_timeout_ms: int = Field(default=30_000, gt=0)
    image_settle_timeout_ms: int = Field(default=10_000, ge=0)

    # === Output ===
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=1024, gt=0)
    pdf_format: str = "A4"
    pdf_margin: str = "20px"
    pdf_filename: str = "page.pdf"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install an explicit settings instance (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
