"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Causal Robustness Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Smoothing & outlier rejection
    ewma_alpha: float = Field(default=0.3, gt=0.0, le=1.0)
    outlier_z_threshold: float = Field(default=3.0, gt=0.0)
    outlier_window: int = Field(default=20, ge=1)
    outlier_min_window: int = Field(default=5, ge=1)

    # Edge discovery
    min_edge_strength: float = Field(default=0.1, ge=0.0, le=1.0)
    n_permutations: int = Field(default=100, ge=1)
    independence_proxy: Literal["correlation", "partial_correlation"] = "correlation"
    max_workers: int | None = Field(default=None, ge=1)  # None lets the executor decide

    # Significance gates
    significant_min_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    filter_min_strength: float = Field(default=0.05, ge=0.0, le=1.0)
    filter_min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    filter_max_p_value: float = Field(default=0.05, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _validate_outlier_window(self) -> "Settings":
        """The minimum window cannot exceed the trailing window."""
        if self.outlier_min_window > self.outlier_window:
            raise ValueError(
                "OUTLIER_MIN_WINDOW must not exceed OUTLIER_WINDOW "
                f"({self.outlier_min_window} > {self.outlier_window})"
            )
        if self.environment == "production" and self.max_workers is None:
            logger.warning(
                "MAX_WORKERS not set in production; pair discovery uses the executor default"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
