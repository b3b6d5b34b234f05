import os
from typing import Optional
from dotenv import load_dotenv

from estatemap.utils.exceptions import ConfigurationError

# Load environment variables
load_dotenv()

class Settings:
    """Application configuration settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://localhost:5432/estate")
    DB_MIN_CONNECTIONS: int = int(os.getenv("DB_MIN_CONNECTIONS", "2"))
    DB_MAX_CONNECTIONS: int = int(os.getenv("DB_MAX_CONNECTIONS", "20"))

    # Flask
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key")
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))
    API_VERSION: str = os.getenv("API_VERSION", "v1")

    # Cache
    USE_CACHE: bool = os.getenv("USE_CACHE", "false").lower() == "true"
    CACHE_TTL: int = int(os.getenv("CACHE_TTL", "60"))
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))
    RATE_LIMIT_PER_HOUR: int = int(os.getenv("RATE_LIMIT_PER_HOUR", "7200"))  # 120 * 60

    # Security
    ALLOWED_ORIGINS: list = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

    # Google Maps (route information)
    GOOGLE_MAPS_API_KEY: Optional[str] = os.getenv("GOOGLE_MAPS_API_KEY") or None
    DIRECTIONS_TIMEOUT: float = float(os.getenv("DIRECTIONS_TIMEOUT", "10"))

    # Monitoring
    SLOW_REQUEST_SECONDS: float = float(os.getenv("SLOW_REQUEST_SECONDS", "2.0"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")

    @classmethod
    def validate(cls) -> None:
        """Validate required settings"""
        if not cls.DATABASE_URL:
            raise ConfigurationError("DATABASE_URL is required")

        if cls.DB_MIN_CONNECTIONS < 1 or cls.DB_MAX_CONNECTIONS < cls.DB_MIN_CONNECTIONS:
            raise ConfigurationError(
                f"Invalid pool size: min={cls.DB_MIN_CONNECTIONS}, max={cls.DB_MAX_CONNECTIONS}"
            )

        if cls.LOG_FORMAT not in ["json", "console"]:
            raise ConfigurationError(f"Invalid LOG_FORMAT: {cls.LOG_FORMAT}")

# Create singleton instance
settings = Settings()
