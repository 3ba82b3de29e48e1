"""Retail Service Configuration"""
from pydantic_settings import SettingsConfigDict

from retail_service.common_config import CommonSettings


class Settings(CommonSettings):
    """Retail Service specific settings"""

    service_name: str = "retail-service"
    otel_service_name: str = "retail-service"

    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
