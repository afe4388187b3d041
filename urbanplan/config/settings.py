"""
Settings Management with Pydantic

Provides type-safe configuration management with:
- Environment variable support
- Validation
- One configuration block per engine
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OptimizerConfig(BaseSettings):
    """Coordinate-search configuration."""
    model_config = SettingsConfigDict(
        env_prefix="OPTIMIZER_",
        extra="ignore"
    )

    max_rounds: int = Field(default=50, ge=20)
    initial_step: float = Field(default=10.0, gt=0)
    min_step: float = Field(default=1.0, gt=0)

    # Denominator floor for improvement percentages (0-100 scale)
    improvement_floor: float = Field(default=1.0, gt=0)


class ComparisonConfig(BaseSettings):
    """Comparison engine configuration."""
    model_config = SettingsConfigDict(
        env_prefix="COMPARISON_",
        extra="ignore"
    )

    epsilon: float = Field(default=1e-6, gt=0)
    significance_threshold: float = 15.0  # percent
    recommendation_threshold: float = 10.0  # percent change of a parameter


class SimulationConfig(BaseSettings):
    """Simulation controller configuration."""
    model_config = SettingsConfigDict(
        env_prefix="SIMULATION_",
        extra="ignore"
    )

    progress_stages: int = Field(default=4, ge=1)
    max_workers: int = Field(default=1, ge=1)


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Urban Scenario Core"
    debug: bool = False
    log_level: str = "INFO"

    # Sub-configurations
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            optimizer=OptimizerConfig(),
            comparison=ComparisonConfig(),
            simulation=SimulationConfig()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
