from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Database
    database_url: str = Field(default="sqlite:///./skywatch.db")

    # Seeding windows
    seed_history_days: int = Field(default=7)
    seed_forecast_days: int = Field(default=5)
    forecast_step_hours: int = Field(default=6)
    default_profile: str = Field(default="Pune")
    # Fixed seed for reproducible seeding; None draws from system entropy
    random_seed: int | None = Field(default=None)
    seed_on_startup: bool = Field(default=False)

    # Seed trigger (outbound invocation of POST /api/v1/admin/seed)
    seed_base_url: str = Field(default="http://localhost:8000")
    seed_timeout: float = Field(default=60.0)
    # "local" seeds in-process; "remote" POSTs to seed_base_url
    seed_mode: Literal["local", "remote"] = Field(default="local")

    # Scheduler
    scheduler_enabled: bool = Field(default=True)
    # Minutes between live observation ticks. Set to 0 to disable.
    observation_tick_interval: int = Field(default=60)

    # Query page sizes used by the dashboard views
    history_limit: int = Field(default=48)
    forecast_limit: int = Field(default=40)
    alerts_limit: int = Field(default=10)
    analytics_limit: int = Field(default=24)

    log_level: str = Field(default="INFO")

    # CORS
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
