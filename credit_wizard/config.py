"""Configuration management using Pydantic Settings"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "credit-wizard"
    log_level: str = "INFO"

    # PDF rendering service (Gotenberg-compatible)
    pdf_renderer_url: str = "http://localhost:3000"
    pdf_timeout_seconds: float = 10.0

    # Mail transport
    mail_adapter: Literal["log", "postmark"] = "log"
    postmark_server_token: Optional[str] = None
    postmark_message_stream: str = "outbound"

    # Sessions
    session_ttl_seconds: float = 1800.0  # Idle sessions are discarded after 30 minutes


settings = Settings()
