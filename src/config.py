"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # External routing provider (OSRM-compatible)
    osrm_base_url: str = "https://router.project-osrm.org"
    osrm_profile: str = "driving"
    osrm_timeout_seconds: float = 5.0  # per HTTP call
    route_timeout_seconds: float = 15.0  # whole external attempt incl. snaps + retry

    # Resolution
    allow_approximation_default: bool = False

    # API
    cors_allowed_origins: str = "http://localhost:5173,http://localhost:3000"
    rate_limit: str = "100/minute"

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


settings = Settings()
