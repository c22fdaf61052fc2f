"""
Configuration management using Pydantic Settings.
Supports environment-based configuration for the document store, the Redis
backend and credential handling.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from enum import Enum


DEFAULT_COLLECTIONS = [
    "users",
    "trips",
    "accommodations",
    "bookings",
    "reviews",
    "payments",
]


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackendType(str, Enum):
    """Blob backends the document store can run on"""
    MEMORY = "memory"
    REDIS = "redis"


class StoreSettings(BaseSettings):
    """Document store configuration"""

    backend: BackendType = Field(default=BackendType.MEMORY)
    namespace: str = Field(default="tripdb", min_length=1)
    collections: List[str] = Field(default_factory=lambda: list(DEFAULT_COLLECTIONS))
    default_list_limit: int = Field(default=100, ge=1, le=10000)
    # Cap for whole-collection scans (count, search, delete_many)
    scan_limit: int = Field(default=1000, ge=1, le=100000)
    conflict_retries: int = Field(default=3, ge=0, le=20)

    model_config = {"env_prefix": "STORE_"}


class RedisSettings(BaseSettings):
    """Redis blob backend configuration"""

    host: str = Field(default="localhost")
    port: int = Field(default=6379, ge=1, le=65535)
    password: Optional[str] = Field(default=None)
    db: int = Field(default=0, ge=0, le=15)
    socket_timeout: int = Field(default=5, ge=1, le=30)

    @property
    def url(self) -> str:
        """Generate Redis URL from configuration"""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    model_config = {"env_prefix": "REDIS_"}


class AuthSettings(BaseSettings):
    """Password hashing and token signing configuration"""

    jwt_secret: str = Field(default="fallback-secret")
    jwt_expires_in: str = Field(default="24h", description="e.g. 3600, 30m, 24h, 7d")
    jwt_algorithm: str = Field(default="HS256")
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    model_config = {"env_prefix": "AUTH_"}


class Settings(BaseSettings):
    """Main application settings"""

    app_name: str = Field(default="tripdb")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    # Nested Settings
    store: StoreSettings = Field(default_factory=StoreSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = Settings()
    return settings
