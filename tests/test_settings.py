"""
Unit tests for settings loading.
"""

from urbanplan.config import (
    ComparisonConfig,
    OptimizerConfig,
    Settings,
    SimulationConfig,
    get_settings
)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("OPTIMIZER_MAX_ROUNDS", "COMPARISON_SIGNIFICANCE_THRESHOLD",
                     "SIMULATION_PROGRESS_STAGES"):
            monkeypatch.delenv(name, raising=False)

        assert OptimizerConfig().max_rounds == 50
        assert OptimizerConfig().initial_step == 10.0
        assert ComparisonConfig().significance_threshold == 15.0
        assert ComparisonConfig().epsilon == 1e-6
        assert SimulationConfig().progress_stages == 4

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OPTIMIZER_MAX_ROUNDS", "30")
        monkeypatch.setenv("COMPARISON_SIGNIFICANCE_THRESHOLD", "20")

        settings = Settings.from_env()

        assert settings.optimizer.max_rounds == 30
        assert settings.comparison.significance_threshold == 20.0

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
