"""Application settings loaded from environment variables."""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Profiles stand for the two deployed variants of the service.
# "combined" hides orders under 50 from listings and serves customers,
# "lite" lists every order and has no customer endpoints.
PROFILES = {
    "combined": {"order_list_min_amount": 50.0, "enable_customer_endpoints": True},
    "lite": {"order_list_min_amount": None, "enable_customer_endpoints": False},
}

DEFAULT_EXTERNAL_AUTHORIZE_URL = "https://capstoneproject.proxy.beeceptor.com/authorize"


class Settings(BaseSettings):
    """Runtime configuration of the payment service."""

    # Database Configuration
    database_url: str = Field(default="sqlite:///./payments.db", description="SQLAlchemy connection URL")

    # Profile and the policies it presets
    service_profile: str = Field(default="combined", description="combined or lite")
    order_list_min_amount: Optional[float] = Field(
        default=None, description="Orders below this amount are left out of listings"
    )
    enable_customer_endpoints: bool = Field(default=True, description="Serve the /customers routes")

    # API Configuration
    api_prefix: str = Field(default="/api", description="Prefix of every API route")
    port: int = Field(default=3000, description="Listening port")
    simulate_delay: bool = Field(default=False, description="Delay every API request")
    simulate_delay_seconds: float = Field(default=2.0, description="Length of the simulated delay")

    # Mock gateway proxy
    external_authorize_url: str = Field(default=DEFAULT_EXTERNAL_AUTHORIZE_URL)
    external_authorize_timeout: float = Field(default=10.0, description="Seconds")

    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def apply_profile(cls, data):
        """Fill the profile's presets for the fields the environment left unset."""
        if not isinstance(data, dict):
            return data
        profile = str(data.get("service_profile") or "combined").strip().lower()
        if profile not in PROFILES:
            raise ValueError(f"Unknown service profile {profile!r}, expected one of {sorted(PROFILES)}")
        data = dict(data, service_profile=profile)
        for field, value in PROFILES[profile].items():
            data.setdefault(field, value)
        return data

    @field_validator("order_list_min_amount", mode="before")
    @classmethod
    def empty_means_no_floor(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @classmethod
    def for_profile(cls, profile: str, **overrides) -> "Settings":
        return cls(service_profile=profile, **overrides)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
