"""
Unit tests for global curve parameters (pumpcurve/curve_config.py)
"""

import dataclasses

import pytest
from solders.pubkey import Pubkey

from pumpcurve.curve_config import (
    CurveConfig,
    DEFAULT_INITIAL_REAL_TOKEN_RESERVES,
    DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES,
    DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES,
    DEFAULT_TOKEN_TOTAL_SUPPLY,
)
from pumpcurve.errors import InvalidAmountError
from pumpcurve.events import SetParamsEvent


FEE_RECIPIENT = Pubkey.from_string("CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM")


def test_defaults_match_pump_fun(curve_config):
    assert curve_config.initial_virtual_token_reserves == 1_073_000_000_000_000
    assert curve_config.initial_virtual_sol_reserves == 30_000_000_000
    assert curve_config.initial_real_token_reserves == 793_100_000_000_000
    assert curve_config.token_total_supply == 1_000_000_000_000_000
    assert curve_config.fee_basis_points == 100
    assert curve_config.authority == Pubkey.default()


def test_get_initial_buy_price_one_sol(curve_config):
    # 30e9 * 1.073e15 // 31e9 = 1_038_387_096_774_193, +1
    assert curve_config.get_initial_buy_price(1_000_000_000) == 34_612_903_225_806


def test_get_initial_buy_price_matches_fresh_curve(curve_config):
    fresh = curve_config.initial_curve_state()

    for sol in (1, 10_000_000, 1_000_000_000, 85_000_000_000):
        assert curve_config.get_initial_buy_price(sol) == fresh.get_buy_tokens_for_sol(sol)


def test_get_initial_buy_price_clamped_to_real_reserve(curve_config):
    assert curve_config.get_initial_buy_price(10**15) == DEFAULT_INITIAL_REAL_TOKEN_RESERVES


def test_get_initial_buy_price_zero(curve_config):
    assert curve_config.get_initial_buy_price(0) == 0


def test_get_initial_buy_price_negative(curve_config):
    with pytest.raises(InvalidAmountError):
        curve_config.get_initial_buy_price(-1)


def test_initial_curve_state(curve_config):
    state = curve_config.initial_curve_state()

    assert state.virtual_token_reserves == DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES
    assert state.virtual_sol_reserves == DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES
    assert state.real_token_reserves == DEFAULT_INITIAL_REAL_TOKEN_RESERVES
    assert state.real_sol_reserves == 0
    assert state.token_total_supply == DEFAULT_TOKEN_TOTAL_SUPPLY
    assert state.complete is False


def test_virtual_cushion_required():
    with pytest.raises(InvalidAmountError, match="must exceed"):
        CurveConfig(initial_virtual_token_reserves=100, initial_real_token_reserves=100)


def test_fee_above_100_percent_rejected():
    with pytest.raises(InvalidAmountError):
        CurveConfig(fee_basis_points=10_001)


def test_negative_reserves_rejected():
    with pytest.raises(InvalidAmountError):
        CurveConfig(initial_virtual_sol_reserves=-1)


def test_config_is_immutable(curve_config):
    with pytest.raises(dataclasses.FrozenInstanceError):
        curve_config.fee_basis_points = 0


def test_with_params(curve_config):
    event = SetParamsEvent(
        fee_recipient=FEE_RECIPIENT,
        initial_virtual_token_reserves=2_000,
        initial_virtual_sol_reserves=50,
        initial_real_token_reserves=1_500,
        token_total_supply=1_800,
        fee_basis_points=95,
    )

    updated = curve_config.with_params(event)

    assert updated.initial_virtual_token_reserves == 2_000
    assert updated.fee_basis_points == 95
    assert updated.fee_recipient == FEE_RECIPIENT
    assert updated.authority == curve_config.authority
    # Source config unchanged
    assert curve_config.fee_basis_points == 100


def test_with_params_validates(curve_config):
    event = SetParamsEvent(
        fee_recipient=FEE_RECIPIENT,
        initial_virtual_token_reserves=1_000,
        initial_virtual_sol_reserves=50,
        initial_real_token_reserves=1_000,
        token_total_supply=1_000,
        fee_basis_points=100,
    )

    with pytest.raises(InvalidAmountError):
        curve_config.with_params(event)
