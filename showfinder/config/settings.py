"""Application configuration settings."""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings
from pydantic import model_validator

class Settings(BaseSettings):
    """Application settings."""

    # Application
    PROJECT_NAME: str = "Card Show Finder"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite:///./showfinder.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
    LOG_DIR: str = "logs"

    # Geocoding (Nominatim usage policy requires a descriptive User-Agent)
    GEOCODER_USER_AGENT: str = "CardShowFinder/1.0 (https://cardshowfinder.com)"
    GEOCODER_DOMAIN: str = "nominatim.openstreetmap.org"
    GEOCODER_TIMEOUT: int = 5  # seconds
    GEOCODER_DEBUG_FALLBACK: bool = False

    # Radius search
    DEFAULT_RADIUS_MILES: float = 25.0
    DEFAULT_WINDOW_DAYS: int = 30
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    EMERGENCY_RESULT_LIMIT: int = 50

    # Coordinates outside this box are reported as suspicious (continental North America)
    EXPECTED_REGION_MIN_LAT: float = 15.0
    EXPECTED_REGION_MAX_LAT: float = 72.0
    EXPECTED_REGION_MIN_LNG: float = -170.0
    EXPECTED_REGION_MAX_LNG: float = -50.0

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"
    }

    @model_validator(mode='after')
    def validate_region(self) -> 'Settings':
        """Validate the expected-region bounding box."""
        if self.EXPECTED_REGION_MIN_LAT >= self.EXPECTED_REGION_MAX_LAT:
            raise ValueError("EXPECTED_REGION_MIN_LAT must be below EXPECTED_REGION_MAX_LAT")
        if self.EXPECTED_REGION_MIN_LNG >= self.EXPECTED_REGION_MAX_LNG:
            raise ValueError("EXPECTED_REGION_MIN_LNG must be below EXPECTED_REGION_MAX_LNG")
        return self

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
