from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from the environment and ``.env``."""

    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    PROJECT_NAME: str = "Pharmacy API"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Pharmacy inventory, sales and payables API"
    API_V1_STR: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "pharmacy"

    # Comma separated, e.g. "http://localhost:3000,https://pharmacy.example.com"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    SECRET_KEY: str = "change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Prescription images
    MAX_FILE_SIZE: int = 5 * 1024 * 1024
    UPLOAD_DIR: str = "uploads"

    # Medicines expiring within this many days are flagged
    EXPIRY_WARNING_DAYS: int = 30

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
