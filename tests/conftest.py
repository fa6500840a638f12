"""
Pytest configuration and shared fixtures
These fixtures are available to all test files
"""

import logging

import pytest
from typing import Dict, Any

from pumpcurve.bonding_curve import CurveState
from pumpcurve.curve_config import CurveConfig
from pumpcurve.logger import LOGGER_NAMESPACE
from pumpcurve.metrics import MetricsCollector, init_metrics


@pytest.fixture(autouse=True)
def reset_engine_logger():
    """Detach handlers a test installed, their streams close with the test"""
    yield
    engine_logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in engine_logger.handlers[:]:
        engine_logger.removeHandler(handler)
        handler.close()
    engine_logger.propagate = True
    engine_logger.setLevel(logging.NOTSET)

@pytest.fixture
def standard_curve_state() -> CurveState:
    """Mid-life curve: 30 SOL virtual, 800M real tokens left"""
    return CurveState(
        virtual_token_reserves=1_000_000_000,
        virtual_sol_reserves=30_000_000_000,
        real_token_reserves=800_000_000,
        real_sol_reserves=0,
        token_total_supply=1_000_000_000,
        complete=False
    )


@pytest.fixture
def complete_curve_state(standard_curve_state) -> CurveState:
    """Same reserves, but migrated"""
    return standard_curve_state.with_complete()


@pytest.fixture
def curve_config() -> CurveConfig:
    """Pump.fun mainnet global parameters"""
    return CurveConfig()


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    """
    Fresh global metrics collector for each test

    Pricing modules read the global collector at call time, so counters
    seen here are the ones they bump.
    """
    collector = init_metrics(enabled=True)
    yield collector
    collector.reset()


@pytest.fixture
def test_config_dict() -> Dict[str, Any]:
    """
    Sample configuration dictionary for testing

    Returns valid config that can be modified per test
    """
    return {
        "logging": {
            "level": "DEBUG",
            "format": "json",
            "output_file": None
        },
        "metrics": {
            "enabled": True
        },
        "pricing": {
            "default_urgency": "high",
            "custom_slippage_bps": None
        },
        "curve": {
            "initial_virtual_token_reserves": 1_073_000_000_000_000,
            "initial_virtual_sol_reserves": 30_000_000_000,
            "initial_real_token_reserves": 793_100_000_000_000,
            "token_total_supply": 1_000_000_000_000_000,
            "fee_basis_points": 100,
            "authority": "11111111111111111111111111111111",
            "fee_recipient": "CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM"
        }
    }


@pytest.fixture
def test_config_file(test_config_dict, tmp_path):
    """
    Create a temporary config file for testing

    Returns path to temporary YAML config file
    """
    import yaml

    config_file = tmp_path / "test_config.yml"
    with open(config_file, 'w') as f:
        yaml.dump(test_config_dict, f)

    return str(config_file)
