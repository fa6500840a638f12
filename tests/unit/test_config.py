"""
Unit tests for Configuration Manager (pumpcurve/config.py)

Tests:
- YAML parsing
- Environment variable substitution
- Configuration validation
- Runtime wiring of logging and metrics
"""

import pytest
import yaml
from solders.pubkey import Pubkey

from pumpcurve.config import (
    ConfigurationManager,
    EngineConfig,
    LogConfig,
    PricingConfig,
    apply_runtime_config,
)
from pumpcurve.metrics import get_metrics
from pumpcurve.slippage import TradeUrgency


def write_config(tmp_path, data) -> str:
    config_file = tmp_path / "config.yml"
    with open(config_file, 'w') as f:
        yaml.dump(data, f)
    return str(config_file)


class TestConfigurationManager:
    """Test configuration loading and validation"""

    def test_load_valid_config(self, test_config_file):
        config_manager = ConfigurationManager(test_config_file)
        engine_config = config_manager.load_config()

        assert isinstance(engine_config, EngineConfig)
        assert engine_config.log_config.level == "DEBUG"
        assert engine_config.log_config.format == "json"
        assert engine_config.metrics_config.enabled is True
        assert engine_config.pricing_config.default_urgency == TradeUrgency.HIGH
        assert engine_config.pricing_config.custom_slippage_bps is None

        curve = engine_config.curve_config
        assert curve.initial_virtual_token_reserves == 1_073_000_000_000_000
        assert curve.fee_basis_points == 100
        assert curve.fee_recipient == Pubkey.from_string("CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM")

    def test_empty_file_uses_defaults(self, tmp_path):
        empty = tmp_path / "empty.yml"
        empty.write_text("")

        engine_config = ConfigurationManager(str(empty)).load_config()

        assert engine_config.log_config == LogConfig()
        assert engine_config.pricing_config == PricingConfig()
        assert engine_config.curve_config.initial_real_token_reserves == 793_100_000_000_000
        assert engine_config.curve_config.authority == Pubkey.default()

    def test_missing_config_file(self, tmp_path):
        config_manager = ConfigurationManager(str(tmp_path / "nonexistent.yml"))

        with pytest.raises(FileNotFoundError):
            config_manager.load_config()

    def test_invalid_yaml_syntax(self, tmp_path):
        bad_config = tmp_path / "bad.yml"
        bad_config.write_text("invalid: yaml: syntax:")

        with pytest.raises(yaml.YAMLError):
            ConfigurationManager(str(bad_config)).load_config()

    def test_non_mapping_root(self, tmp_path):
        bad_config = tmp_path / "list.yml"
        bad_config.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            ConfigurationManager(str(bad_config)).load_config()

    def test_env_var_substitution(self, test_config_dict, tmp_path, monkeypatch):
        monkeypatch.setenv("CURVE_FEE_BPS", "250")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        test_config_dict["curve"]["fee_basis_points"] = "${CURVE_FEE_BPS}"
        test_config_dict["logging"]["level"] = "${LOG_LEVEL}"

        engine_config = ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

        assert engine_config.curve_config.fee_basis_points == 250
        assert engine_config.log_config.level == "WARNING"

    def test_missing_env_var(self, test_config_dict, tmp_path, monkeypatch):
        monkeypatch.delenv("UNSET_FEE_RECIPIENT", raising=False)
        test_config_dict["curve"]["fee_recipient"] = "${UNSET_FEE_RECIPIENT}"

        with pytest.raises(ValueError, match="UNSET_FEE_RECIPIENT"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_custom_slippage(self, test_config_dict, tmp_path):
        test_config_dict["pricing"]["custom_slippage_bps"] = 300

        engine_config = ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()
        slippage_config = engine_config.pricing_config.to_slippage_config()

        assert slippage_config.custom_slippage_bps == 300
        assert slippage_config.default_urgency == TradeUrgency.HIGH

    def test_negative_custom_slippage(self, test_config_dict, tmp_path):
        test_config_dict["pricing"]["custom_slippage_bps"] = -1

        with pytest.raises(ValueError, match="non-negative"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_unknown_urgency(self, test_config_dict, tmp_path):
        test_config_dict["pricing"]["default_urgency"] = "panic"

        with pytest.raises(ValueError, match="Unknown urgency"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_unknown_log_format(self, test_config_dict, tmp_path):
        test_config_dict["logging"]["format"] = "xml"

        with pytest.raises(ValueError, match="log format"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_invalid_curve_parameters(self, test_config_dict, tmp_path):
        test_config_dict["curve"]["initial_real_token_reserves"] = 2_000_000_000_000_000

        with pytest.raises(ValueError, match="Invalid curve configuration"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_non_numeric_reserve(self, test_config_dict, tmp_path):
        test_config_dict["curve"]["token_total_supply"] = "lots"

        with pytest.raises(ValueError, match="token_total_supply"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_invalid_pubkey(self, test_config_dict, tmp_path):
        test_config_dict["curve"]["authority"] = "not-a-key"

        with pytest.raises(ValueError, match="authority"):
            ConfigurationManager(write_config(tmp_path, test_config_dict)).load_config()

    def test_get_dot_notation(self, test_config_file):
        config_manager = ConfigurationManager(test_config_file)
        config_manager.load_config()

        assert config_manager.get("curve.fee_basis_points") == 100
        assert config_manager.get("pricing.default_urgency") == "high"
        assert config_manager.get("curve.missing", 7) == 7
        assert config_manager.get("logging.level.deeper", "x") == "x"

    def test_get_before_load(self, test_config_file):
        with pytest.raises(RuntimeError):
            ConfigurationManager(test_config_file).get("curve")


class TestRuntimeConfig:
    """Test wiring a loaded config into logging and metrics"""

    def test_apply_runtime_config_installs_metrics(self):
        engine_config = EngineConfig()
        engine_config.metrics_config.enabled = False

        collector = apply_runtime_config(engine_config)

        assert get_metrics() is collector
        collector.increment_counter("ignored")
        assert collector.get_counter("ignored") == 0

    def test_apply_runtime_config_creates_log_directory(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        engine_config = EngineConfig(log_config=LogConfig(level="INFO", output_file=str(log_file)))

        apply_runtime_config(engine_config)

        assert log_file.parent.exists()
