"""Configuration management for the OncoScan prediction service."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = Field("local", alias="APP_ENV")
    host: str = Field("localhost", alias="APP_HOST")
    port: int = Field(3000, alias="APP_PORT")
    cors_origins_raw: str = Field("*", alias="CORS_ORIGINS")
    model_url: str = Field("", alias="MODEL_URL")
    local_model_url: str = Field("models/oncoscan.pt", alias="LOCAL_MODEL_URL")
    model_cache_dir: str = Field("models/cache", alias="ONCOSCAN_MODEL_CACHE")
    store_backend: str = Field("filesystem", alias="ONCOSCAN_STORE")
    store_dir: str = Field("data/predictions", alias="ONCOSCAN_STORE_DIR")
    locale: str = Field("en", alias="ONCOSCAN_LOCALE")
    cancer_threshold: float = Field(1.0, alias="ONCOSCAN_CANCER_THRESHOLD")
    serialize_inference: bool = Field(False, alias="ONCOSCAN_SERIALIZE_INFERENCE")
    log_dir: str = Field("logs", alias="ONCOSCAN_LOG_DIR")
    log_level: str = Field("INFO", alias="ONCOSCAN_LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True
        protected_namespaces = ("settings_",)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]

    @property
    def is_local(self) -> bool:
        return self.environment.strip().lower() == "local"

    @property
    def model_source(self) -> str:
        """Model location for the current environment."""
        return self.local_model_url if self.is_local else self.model_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
