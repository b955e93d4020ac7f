from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    PROJECT_NAME: str = "Organic Certification Dashboard"

    # API remota (fuente de verdad de granjas, agricultores, inspecciones...)
    GATEWAY_BASE_URL: str = "https://organic-certification-production.up.railway.app"
    GATEWAY_API_PREFIX: str = "/api/v1"
    # None = sin timeout en cliente
    GATEWAY_TIMEOUT_SECONDS: Optional[float] = None

    # "complete" o "finalize" según la versión del backend
    INSPECTION_COMPLETION_ACTION: str = "complete"

    CERTIFICATE_CRITICAL_DAYS: int = 30
    CERTIFICATE_WARNING_DAYS: int = 90

    WIZARD_MAX_SESSIONS: int = 200

    LOG_DIR: str = "/logs"
    LOG_JSON: bool = False
    LOG_TO_FILE: bool = True


settings = Settings()
