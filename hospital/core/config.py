from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from urllib.parse import quote_plus
import os


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Hospital Management System"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")
    LOG_LEVEL: str = "INFO"
    PORT: int = 3000

    # CORS / hosts (comma-separated)
    FRONTEND_ORIGIN: str = "https://curenation.netlify.app"
    ALLOWED_HOSTS: str = "*"

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "hospital_management"
    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: str = "sqlite:///./test.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30

    # Security
    SECRET_KEY: str = "change-this-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_HASH_ROUNDS: int = 10
    MIN_PASSWORD_LENGTH: int = 8
    DEFAULT_PATIENT_PASSWORD: str = "patient123"

    # Seeded admin account
    ADMIN_ID: str = "admin123"
    ADMIN_PASSWORD: str = "admin@123"

    # Appointment lifecycle
    STRICT_STATUS_TRANSITIONS: bool = False

    # Redis (rate limiting on auth endpoints)
    REDIS_URL: str = "redis://localhost:6379"
    AUTH_RATE_LIMIT: int = 20
    AUTH_RATE_LIMIT_WINDOW: int = 3600

    @property
    def get_database_url(self) -> str:
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = quote_plus(self.DB_PASSWORD)
        return (
            f"postgresql://{self.DB_USER}:{password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.FRONTEND_ORIGIN.split(",") if o.strip()]

    @property
    def allowed_hosts(self) -> List[str]:
        return [h.strip() for h in self.ALLOWED_HOSTS.split(",") if h.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() in ("development", "dev", "local")


# Create settings instance
settings = Settings()
