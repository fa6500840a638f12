"""
Configuration Manager for the curve pricing engine
Loads configuration from YAML files with environment variable support
"""

import os
import re
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from solders.pubkey import Pubkey

from pumpcurve.curve_config import (
    CurveConfig,
    DEFAULT_INITIAL_REAL_TOKEN_RESERVES,
    DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES,
    DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES,
    DEFAULT_TOKEN_TOTAL_SUPPLY,
)
from pumpcurve.bonding_curve import DEFAULT_FEE_BASIS_POINTS
from pumpcurve.errors import CurveError
from pumpcurve.logger import setup_logging_from_config
from pumpcurve.metrics import MetricsCollector, init_metrics
from pumpcurve.slippage import SlippageConfig, TradeUrgency


ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


@dataclass
class LogConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "json"
    output_file: Optional[str] = None


@dataclass
class MetricsConfig:
    """Metrics configuration"""
    enabled: bool = True


@dataclass
class PricingConfig:
    """Quote and slippage defaults"""
    default_urgency: TradeUrgency = TradeUrgency.NORMAL
    custom_slippage_bps: Optional[int] = None  # Overrides the urgency tier

    def to_slippage_config(self) -> SlippageConfig:
        return SlippageConfig(
            default_urgency=self.default_urgency,
            custom_slippage_bps=self.custom_slippage_bps
        )


@dataclass
class EngineConfig:
    """Complete engine configuration"""
    log_config: LogConfig = field(default_factory=LogConfig)
    metrics_config: MetricsConfig = field(default_factory=MetricsConfig)
    pricing_config: PricingConfig = field(default_factory=PricingConfig)
    curve_config: CurveConfig = field(default_factory=CurveConfig)


class ConfigurationManager:
    """Manages engine configuration from YAML files and environment variables"""

    def __init__(self, config_path: str):
        """
        Initialize configuration manager

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        self._config_data: Optional[Dict[str, Any]] = None
        self._engine_config: Optional[EngineConfig] = None

    def load_config(self) -> EngineConfig:
        """
        Load and validate configuration from file

        Returns:
            EngineConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        if not isinstance(raw_config, dict):
            raise ValueError("Configuration root must be a mapping")

        self._config_data = self._substitute_env_vars(raw_config)
        self._engine_config = self._parse_config(self._config_data)

        return self._engine_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Args:
            key: Dot-notation key (e.g., "pricing.default_slippage_bps")
            default: Default value if key not found
        """
        if self._config_data is None:
            raise RuntimeError("Configuration not loaded. Call load_config() first.")

        value = self._config_data

        for k in key.split('.'):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def _substitute_env_vars(self, config: Any) -> Any:
        """
        Recursively substitute ${VAR_NAME} with environment values

        Supports both full-value and embedded substitution.
        """
        if isinstance(config, dict):
            return {k: self._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            def replace_var(match):
                var_name = match.group(1)
                value = os.getenv(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable {var_name} not found"
                    )
                return value

            return ENV_VAR_PATTERN.sub(replace_var, config)
        else:
            return config

    @staticmethod
    def _as_int(section: Dict[str, Any], key: str, default: int) -> int:
        # Substituted env vars arrive as strings
        value = section.get(key, default)
        if isinstance(value, bool):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be an integer, got {value!r}") from None

    @staticmethod
    def _as_pubkey(section: Dict[str, Any], key: str) -> Pubkey:
        value = section.get(key)
        if value is None:
            return Pubkey.default()
        try:
            return Pubkey.from_string(str(value))
        except ValueError as e:
            raise ValueError(f"{key} is not a valid public key: {value!r}") from e

    def _parse_config(self, config: Dict[str, Any]) -> EngineConfig:
        """
        Parse raw configuration into typed objects

        Raises:
            ValueError: If configuration is invalid
        """
        log_data = config.get('logging') or {}
        log_config = LogConfig(
            level=log_data.get('level', 'INFO'),
            format=log_data.get('format', 'json'),
            output_file=log_data.get('output_file')
        )

        if log_config.format not in ("json", "console"):
            raise ValueError(f"Unknown log format: {log_config.format}")

        metrics_data = config.get('metrics') or {}
        metrics_config = MetricsConfig(
            enabled=bool(metrics_data.get('enabled', True))
        )

        pricing_data = config.get('pricing') or {}
        urgency_name = str(pricing_data.get('default_urgency', TradeUrgency.NORMAL.value)).lower()
        try:
            default_urgency = TradeUrgency(urgency_name)
        except ValueError:
            raise ValueError(f"Unknown urgency level: {urgency_name}") from None

        custom_slippage_bps = None
        if pricing_data.get('custom_slippage_bps') is not None:
            custom_slippage_bps = self._as_int(pricing_data, 'custom_slippage_bps', 0)
            if custom_slippage_bps < 0:
                raise ValueError("custom_slippage_bps must be non-negative")

        pricing_config = PricingConfig(
            default_urgency=default_urgency,
            custom_slippage_bps=custom_slippage_bps
        )

        curve_data = config.get('curve') or {}
        try:
            curve_config = CurveConfig(
                initial_virtual_token_reserves=self._as_int(
                    curve_data, 'initial_virtual_token_reserves', DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES
                ),
                initial_virtual_sol_reserves=self._as_int(
                    curve_data, 'initial_virtual_sol_reserves', DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES
                ),
                initial_real_token_reserves=self._as_int(
                    curve_data, 'initial_real_token_reserves', DEFAULT_INITIAL_REAL_TOKEN_RESERVES
                ),
                token_total_supply=self._as_int(curve_data, 'token_total_supply', DEFAULT_TOKEN_TOTAL_SUPPLY),
                fee_basis_points=self._as_int(curve_data, 'fee_basis_points', DEFAULT_FEE_BASIS_POINTS),
                authority=self._as_pubkey(curve_data, 'authority'),
                fee_recipient=self._as_pubkey(curve_data, 'fee_recipient'),
            )
        except CurveError as e:
            raise ValueError(f"Invalid curve configuration: {e}") from e

        return EngineConfig(
            log_config=log_config,
            metrics_config=metrics_config,
            pricing_config=pricing_config,
            curve_config=curve_config
        )


def apply_runtime_config(engine_config: EngineConfig) -> MetricsCollector:
    """
    Wire logging and the global metrics collector from a loaded config

    Returns:
        The freshly initialized global MetricsCollector
    """
    setup_logging_from_config(engine_config.log_config)

    return init_metrics(enabled=engine_config.metrics_config.enabled)
