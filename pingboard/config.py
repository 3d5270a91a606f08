from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Scheduler
    check_interval_seconds: int = 30
    check_workers: int = 4  # probe thread pool size

    # Prober
    probe_timeout_seconds: float = 10.0

    # Retention
    history_window_hours: int = 10
    max_recent_downtime: int = 5

    # Close an ongoing incident on the first passing check instead of
    # waiting for the next failure.
    close_downtime_on_recovery: bool = False

    # Endpoints registered at startup (absolute or relative to CWD)
    endpoints_file: str = "endpoints.yaml"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging
    log_level: str = "INFO"


settings = Settings()
