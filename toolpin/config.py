"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and TOOLPIN_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolpinConfig(BaseSettings):
    """toolpin configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export TOOLPIN_SOURCES_PATH=nix/sources.json
        export TOOLPIN_LOG_LEVEL=DEBUG
        export TOOLPIN_OFFLINE=true

    Or via .env file::

        TOOLPIN_BASE_PIN=package-universe
        TOOLPIN_OVERLAY_PINS='["rust-channels"]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TOOLPIN_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Pins
    sources_path: Path = Path("pins/sources.json")
    base_pin: str = "package-universe"
    overlay_pins: list[str] = Field(default_factory=lambda: ["rust-channels"])

    # Offline mirror
    store_path: Path = Path(".toolpin/sources")
    offline: bool = False  # serve pins from store_path instead of their locations

    max_concurrent_resolutions: int = Field(default=8, ge=1)

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level instance used by the CLI; library code takes config explicitly.
config = ToolpinConfig()
