"""
Pricing and simulation core for pump.fun style bonding curves
"""

from pumpcurve.amm import AMM, TradeResult
from pumpcurve.bonding_curve import (
    DEFAULT_FEE_BASIS_POINTS,
    BondingCurveCalculator,
    BuyQuote,
    CurveState,
    SellQuote,
)
from pumpcurve.curve_config import CurveConfig
from pumpcurve.errors import (
    ArithmeticOverflowError,
    CurveCompleteError,
    CurveError,
    DivisionByZeroError,
    InsufficientLiquidityError,
    InvalidAmountError,
)
from pumpcurve.slippage import (
    DEFAULT_SLIPPAGE_BPS,
    SlippageManager,
    TradeUrgency,
    calculate_with_slippage_buy,
    calculate_with_slippage_sell,
)

__version__ = "0.1.0"

__all__ = [
    "AMM",
    "TradeResult",
    "DEFAULT_FEE_BASIS_POINTS",
    "BondingCurveCalculator",
    "BuyQuote",
    "CurveState",
    "SellQuote",
    "CurveConfig",
    "ArithmeticOverflowError",
    "CurveCompleteError",
    "CurveError",
    "DivisionByZeroError",
    "InsufficientLiquidityError",
    "InvalidAmountError",
    "DEFAULT_SLIPPAGE_BPS",
    "SlippageManager",
    "TradeUrgency",
    "calculate_with_slippage_buy",
    "calculate_with_slippage_sell",
]
