"""Unit tests for configuration, engine configs and logging."""

import pytest
from pydantic import ValidationError


class TestSettings:
    """Test application settings."""

    def test_settings_loads(self):
        """Test settings can be loaded."""
        from causal_robustness.config.settings import Settings

        settings = Settings()
        assert settings is not None
        assert settings.environment in ["development", "staging", "production"]

    def test_settings_defaults(self):
        """Test default discovery knobs."""
        from causal_robustness.config.settings import Settings

        settings = Settings()

        assert settings.app_name == "Causal Robustness Engine"
        assert settings.outlier_z_threshold == 3.0
        assert settings.outlier_window == 20
        assert settings.outlier_min_window == 5
        assert settings.min_edge_strength == 0.1
        assert settings.n_permutations == 100
        assert settings.independence_proxy == "correlation"

    def test_settings_from_environment(self, monkeypatch):
        """Environment variables override defaults."""
        from causal_robustness.config.settings import Settings

        monkeypatch.setenv("EWMA_ALPHA", "0.5")
        monkeypatch.setenv("N_PERMUTATIONS", "250")

        settings = Settings()

        assert settings.ewma_alpha == 0.5
        assert settings.n_permutations == 250

    def test_min_window_cannot_exceed_window(self):
        """Cross-field validation of the outlier window."""
        from causal_robustness.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(outlier_window=4, outlier_min_window=5)

    def test_alpha_out_of_range_rejected(self):
        """Smoothing factor must lie in (0, 1]."""
        from causal_robustness.config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(ewma_alpha=0.0)

    def test_get_settings_is_cached(self):
        """get_settings returns one shared instance."""
        from causal_robustness.config import get_settings

        assert get_settings() is get_settings()


class TestEngineConfigs:
    """Test regularization and bootstrap configs."""

    def test_regularization_defaults(self):
        from causal_robustness.robustness import RegularizationConfig

        config = RegularizationConfig()

        assert config.l1_lambda == 0.01
        assert config.l2_lambda == 0.001
        assert config.max_iterations == 1000
        assert config.convergence_threshold == 1e-6
        assert config.learning_rate == 0.01

    def test_bootstrap_defaults(self):
        from causal_robustness.robustness import BootstrapConfig

        config = BootstrapConfig()

        assert config.sample_size == 100
        assert config.num_samples == 1000
        assert config.confidence_level == 0.95
        assert config.random_seed == 42

    def test_configs_are_immutable(self):
        from causal_robustness.robustness import BootstrapConfig

        config = BootstrapConfig()
        with pytest.raises(ValidationError):
            config.sample_size = 5

    def test_update_merges_changes(self):
        from causal_robustness.robustness import EngineState

        state = EngineState()
        updated = state.update_bootstrap_config(num_samples=200)

        assert updated.num_samples == 200
        assert updated.sample_size == 100
        assert state.bootstrap_config is updated

    @pytest.mark.parametrize(
        "changes",
        [
            {"confidence_level": 1.5},
            {"confidence_level": 0.0},
            {"sample_size": 0},
            {"num_samples": -10},
            {"unknown_field": 3},
        ],
    )
    def test_invalid_bootstrap_update_rejected(self, changes):
        """Invalid values are rejected at update time and leave config intact."""
        from causal_robustness.robustness import ConfigurationError, EngineState

        state = EngineState()
        before = state.bootstrap_config

        with pytest.raises(ConfigurationError):
            state.update_bootstrap_config(**changes)
        assert state.bootstrap_config == before

    def test_invalid_regularization_update_rejected(self):
        from causal_robustness.robustness import ConfigurationError, EngineState

        state = EngineState()
        with pytest.raises(ConfigurationError):
            state.update_regularization_config(l1_lambda=-1.0)


class TestLogging:
    """Test logging configuration."""

    def test_logger_creation(self):
        """Test structured logger creation."""
        from causal_robustness.logging_config.structured import get_logger

        logger = get_logger("test_module")
        assert logger is not None

    def test_logger_has_methods(self):
        """Test logger has standard methods."""
        from causal_robustness.logging_config.structured import get_logger

        logger = get_logger("test_module")

        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "warning")
        assert hasattr(logger, "debug")

    def test_setup_logging_does_not_raise(self):
        """Logging can be configured and used."""
        from causal_robustness.logging_config.structured import get_logger, setup_logging

        setup_logging()
        logger = get_logger("test_structured")
        logger.info("test_event", extra_field="value")
