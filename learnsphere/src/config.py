"""
LearnSphere API configuration using Pydantic Settings.

Provides centralized configuration for:
- Storage (MongoDB or in-memory development store)
- Authentication (JWT and password hashing)
- Perplexity Sonar API access and prompt engineering
- Response caching
- API settings (CORS, rate limiting, security headers)
- Logging and monitoring

All settings support environment variable overrides and .env file loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from functools import lru_cache


MOCK_SONAR_API_KEY = "dummy_api_key_for_testing"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "LEARNSPHERE_" (e.g., LEARNSPHERE_MONGO_URL).

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="LearnSphere API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="API version"
    )
    api_prefix: str = Field(
        default="/api",
        description="API URL prefix"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="development",
        description="Environment: development|test|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=5001,
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Storage Settings
    # =========================================================================

    storage_backend: str = Field(
        default="mongo",
        description="Storage backend: mongo|memory"
    )
    mongo_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL"
    )
    mongo_database: str = Field(
        default="learnsphere",
        description="MongoDB database name"
    )
    mongo_server_selection_timeout_ms: int = Field(
        default=5000,
        description="MongoDB server selection timeout (milliseconds)",
        gt=0
    )
    seed_demo_users: bool = Field(
        default=True,
        description="Seed the demo admin and user accounts into the in-memory store"
    )

    # =========================================================================
    # JWT Authentication Settings
    # =========================================================================

    jwt_secret_key: str = Field(
        default="change-this-secret-key-in-production-minimum-32-characters",
        description="Secret key for JWT token signing (MUST be changed in production)",
        min_length=32
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm (HS256, HS384, HS512)"
    )
    jwt_access_token_expire_minutes: int = Field(
        default=30 * 24 * 60,
        description="Access token expiration time in minutes",
        gt=0,
        le=90 * 24 * 60
    )
    jwt_issuer: str = Field(
        default="learnsphere-api",
        description="JWT issuer claim"
    )

    # =========================================================================
    # Password Settings
    # =========================================================================

    password_bcrypt_rounds: int = Field(
        default=10,
        description="BCrypt hash rounds (higher = slower but more secure)",
        ge=4,
        le=14
    )
    password_min_length: int = Field(
        default=6,
        description="Minimum password length",
        ge=6,
        le=128
    )
    password_reset_expire_minutes: int = Field(
        default=10,
        description="Password reset token lifetime in minutes",
        gt=0,
        le=1440
    )
    last_active_update_minutes: int = Field(
        default=15,
        description="Minimum interval between last_active updates for a user",
        ge=0
    )

    # =========================================================================
    # Perplexity Sonar Settings
    # =========================================================================

    sonar_api_key: Optional[str] = Field(
        default=None,
        description="Perplexity Sonar API key (mock responses are used when unset)"
    )
    perplexity_api_url: str = Field(
        default="https://api.perplexity.ai",
        description="Perplexity API base URL"
    )
    sonar_model: str = Field(
        default="sonar-reasoning-pro",
        description="Sonar model name"
    )
    sonar_max_tokens: int = Field(
        default=2048,
        description="Max tokens for query and follow-up answers",
        gt=0
    )
    sonar_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for query and follow-up answers",
        ge=0.0,
        le=2.0
    )
    sonar_learning_path_max_tokens: int = Field(
        default=4096,
        description="Max tokens for learning path generation",
        gt=0
    )
    sonar_learning_path_temperature: float = Field(
        default=0.5,
        description="Sampling temperature for learning path generation",
        ge=0.0,
        le=2.0
    )
    sonar_timeout_seconds: float = Field(
        default=60.0,
        description="Total timeout for one Sonar API request (seconds)",
        gt=0
    )
    sonar_retry_attempts: int = Field(
        default=3,
        description="Attempts for transient Sonar API failures",
        ge=1,
        le=10
    )
    sonar_mock_delay_seconds: float = Field(
        default=0.0,
        description="Artificial latency added to mock responses (seconds)",
        ge=0.0
    )

    # =========================================================================
    # Prompt Engineering Settings
    # =========================================================================

    use_advanced_prompts: bool = Field(
        default=True,
        description="Use domain-aware advanced prompt templates"
    )
    use_context_retention: bool = Field(
        default=True,
        description="Use follow-up type detection for follow-up system prompts"
    )
    max_previous_messages: int = Field(
        default=10,
        description="Maximum previous messages forwarded with a follow-up question",
        ge=0,
        le=100
    )

    # =========================================================================
    # Response Cache Settings
    # =========================================================================

    response_cache_enabled: bool = Field(
        default=True,
        description="Cache generated answers for identical queries"
    )
    response_cache_ttl_seconds: int = Field(
        default=3600,
        description="Cached answer time-to-live (seconds)",
        gt=0
    )
    response_cache_max_size: int = Field(
        default=500,
        description="Maximum number of cached answers",
        gt=0
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials (cookies, authorization headers) in CORS"
    )
    cors_allow_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods"
    )
    cors_allow_headers: List[str] = Field(
        default=["*"],
        description="Allowed HTTP headers"
    )

    # =========================================================================
    # Rate Limiting Settings
    # =========================================================================

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    rate_limit_auth: str = Field(
        default="20/minute",
        description="Rate limit for login, register and password reset endpoints"
    )

    # =========================================================================
    # Security Settings
    # =========================================================================

    security_require_https: bool = Field(
        default=False,
        description="Send HSTS headers (enable behind TLS in production)"
    )
    security_headers_enabled: bool = Field(
        default=True,
        description="Enable security headers (X-Frame-Options, etc.)"
    )
    security_hsts_max_age: int = Field(
        default=31536000,
        description="HSTS max age (seconds)"
    )

    # =========================================================================
    # Monitoring and Logging
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Pagination Settings
    # =========================================================================

    pagination_default_limit: int = Field(
        default=10,
        description="Default page size",
        gt=0,
        le=100
    )
    pagination_max_limit: int = Field(
        default=100,
        description="Maximum page size",
        gt=0,
        le=1000
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "test", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Validate storage backend."""
        allowed = ["mongo", "memory"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"storage_backend must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: List[str]) -> List[str]:
        """Validate CORS origins are not empty."""
        if not v:
            return ["*"]
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Validate JWT algorithm is supported."""
        allowed = ["HS256", "HS384", "HS512"]
        if v not in allowed:
            raise ValueError(f"jwt_algorithm must be one of {allowed}, got: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("perplexity_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running under the test environment."""
        return self.environment == "test"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def sonar_mock_mode(self) -> bool:
        """True when no usable Sonar API key is configured."""
        return not self.sonar_api_key or self.sonar_api_key == MOCK_SONAR_API_KEY

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="LEARNSPHERE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and shared
    across the application. Settings are loaded from:
    1. Environment variables with LEARNSPHERE_ prefix
    2. .env file in the current directory
    3. Default values

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from learnsphere.src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.mongo_database)
        learnsphere
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
