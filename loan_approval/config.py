"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    application_store_base: str = "http://localhost:8001"

    # Service
    service_name: str = "loan-approval"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Workflow hand-off targets reported to the presentation layer
    next_step_path: str = "/documentos"
    restart_path: str = "/simular"


settings = Settings()
