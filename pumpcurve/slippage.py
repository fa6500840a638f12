"""
Slippage bounds for curve trades
Turns a quoted amount into the worst-case bound submitted with the trade
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum

from pumpcurve.errors import InvalidAmountError
from pumpcurve.fixed_point import BPS_DENOMINATOR, checked_add, mul_div, require_u64
from pumpcurve.logger import get_logger
from pumpcurve.metrics import get_metrics


logger = get_logger(__name__)


DEFAULT_SLIPPAGE_BPS = 500  # 5%


def calculate_with_slippage_buy(amount: int, basis_points: int) -> int:
    """
    Maximum SOL cost for a buy quoted at amount

    amount + amount * basis_points / 10000, rounded down.
    """
    require_u64(amount, "amount")
    require_u64(basis_points, "basis_points")

    return checked_add(amount, mul_div(amount, basis_points, BPS_DENOMINATOR))


def calculate_with_slippage_sell(amount: int, slippage_basis_points: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """
    Minimum SOL output for a sell quoted at amount

    At least one lamport is always shaved off, and the bound never drops
    below one lamport: a zero minimum would accept any fill.

    Raises:
        InvalidAmountError: If amount is zero or negative
    """
    require_u64(amount, "amount")
    require_u64(slippage_basis_points, "slippage_basis_points")

    if amount == 0:
        raise InvalidAmountError("Sell quote must be positive")

    reduction = max(1, mul_div(amount, slippage_basis_points, BPS_DENOMINATOR))

    return max(1, amount - reduction)


class TradeUrgency(Enum):
    """Trade urgency level affecting slippage tolerance"""
    LOW = "low"  # 1% slippage - patient entries
    NORMAL = "normal"  # 5% slippage - standard trades
    HIGH = "high"  # 10% slippage - urgent entries
    CRITICAL = "critical"  # 20% slippage - emergency exits


# Slippage tolerance in basis points (1 bps = 0.01%)
SLIPPAGE_TOLERANCE_BPS = {
    TradeUrgency.LOW: 100,
    TradeUrgency.NORMAL: DEFAULT_SLIPPAGE_BPS,
    TradeUrgency.HIGH: 1000,
    TradeUrgency.CRITICAL: 2000,
}


@dataclass
class SlippageConfig:
    """Slippage configuration"""
    default_urgency: TradeUrgency = TradeUrgency.NORMAL
    custom_slippage_bps: Optional[int] = None  # Override default slippage


@dataclass
class SlippageCheck:
    """Result of checking a fill against its bound"""
    is_valid: bool
    expected_amount: int
    actual_amount: int
    bound: int
    slippage_pct: float
    tolerance_pct: float
    message: str


class SlippageManager:
    """
    Picks a slippage tolerance and applies it to curve quotes

    Tolerance priority:
        1. custom_slippage_bps argument
        2. config.custom_slippage_bps
        3. urgency argument
        4. config.default_urgency

    Usage:
        manager = SlippageManager()
        max_cost = manager.max_sol_cost(quoted_cost, TradeUrgency.HIGH)
        min_out = manager.min_sol_output(quoted_output)

        check = manager.validate_fill(quoted_output, received, is_buy=False)
        assert check.is_valid
    """

    def __init__(self, config: Optional[SlippageConfig] = None):
        self.config = config or SlippageConfig()

        logger.info(
            "slippage_manager_initialized",
            default_urgency=self.config.default_urgency.value,
            custom_slippage_bps=self.config.custom_slippage_bps
        )

    def resolve_slippage_bps(
        self,
        urgency: Optional[TradeUrgency] = None,
        custom_slippage_bps: Optional[int] = None
    ) -> int:
        """Tolerance in basis points after applying the priority order"""
        if custom_slippage_bps is not None:
            return custom_slippage_bps
        if self.config.custom_slippage_bps is not None:
            return self.config.custom_slippage_bps
        if urgency is not None:
            return SLIPPAGE_TOLERANCE_BPS[urgency]
        return SLIPPAGE_TOLERANCE_BPS[self.config.default_urgency]

    def max_sol_cost(
        self,
        quoted_sol_cost: int,
        urgency: Optional[TradeUrgency] = None,
        custom_slippage_bps: Optional[int] = None
    ) -> int:
        """
        Upper bound on SOL spent for a buy

        Example:
            manager.max_sol_cost(1_000_000, TradeUrgency.NORMAL)  # 1_050_000
        """
        slippage_bps = self.resolve_slippage_bps(urgency, custom_slippage_bps)
        bound = calculate_with_slippage_buy(quoted_sol_cost, slippage_bps)

        logger.debug(
            "max_sol_cost_calculated",
            quoted=quoted_sol_cost,
            bound=bound,
            slippage_bps=slippage_bps
        )
        get_metrics().increment_counter(
            "slippage_calculations",
            labels={"side": "buy", "urgency": urgency.value if urgency else "default"}
        )

        return bound

    def min_sol_output(
        self,
        quoted_sol_output: int,
        urgency: Optional[TradeUrgency] = None,
        custom_slippage_bps: Optional[int] = None
    ) -> int:
        """
        Lower bound on SOL received for a sell, never below 1 lamport

        Example:
            manager.min_sol_output(1_000_000, TradeUrgency.NORMAL)  # 950_000
        """
        slippage_bps = self.resolve_slippage_bps(urgency, custom_slippage_bps)
        bound = calculate_with_slippage_sell(quoted_sol_output, slippage_bps)

        logger.debug(
            "min_sol_output_calculated",
            quoted=quoted_sol_output,
            bound=bound,
            slippage_bps=slippage_bps
        )
        get_metrics().increment_counter(
            "slippage_calculations",
            labels={"side": "sell", "urgency": urgency.value if urgency else "default"}
        )

        return bound

    def validate_fill(
        self,
        expected_amount: int,
        actual_amount: int,
        is_buy: bool,
        urgency: Optional[TradeUrgency] = None,
        custom_slippage_bps: Optional[int] = None
    ) -> SlippageCheck:
        """
        Check a realized SOL amount against the bound derived from its quote

        For a buy, actual_amount is SOL spent and must not exceed the max
        cost. For a sell, it is SOL received and must reach the min output.
        """
        if expected_amount <= 0:
            return SlippageCheck(
                is_valid=False,
                expected_amount=expected_amount,
                actual_amount=actual_amount,
                bound=0,
                slippage_pct=0.0,
                tolerance_pct=0.0,
                message="Expected amount must be positive"
            )

        slippage_bps = self.resolve_slippage_bps(urgency, custom_slippage_bps)
        tolerance_pct = slippage_bps / BPS_DENOMINATOR * 100

        if is_buy:
            bound = calculate_with_slippage_buy(expected_amount, slippage_bps)
            is_valid = actual_amount <= bound
            adverse = max(0, actual_amount - expected_amount)
        else:
            bound = calculate_with_slippage_sell(expected_amount, slippage_bps)
            is_valid = actual_amount >= bound
            adverse = max(0, expected_amount - actual_amount)

        slippage_pct = adverse / expected_amount * 100

        if is_valid:
            message = f"Slippage {slippage_pct:.2f}% within tolerance {tolerance_pct:.2f}%"
        else:
            message = f"Slippage {slippage_pct:.2f}% exceeds tolerance {tolerance_pct:.2f}%"

        logger.debug(
            "slippage_validated",
            expected=expected_amount,
            actual=actual_amount,
            bound=bound,
            is_buy=is_buy,
            is_valid=is_valid
        )
        get_metrics().increment_counter(
            "slippage_validations",
            labels={"valid": str(is_valid), "side": "buy" if is_buy else "sell"}
        )

        return SlippageCheck(
            is_valid=is_valid,
            expected_amount=expected_amount,
            actual_amount=actual_amount,
            bound=bound,
            slippage_pct=slippage_pct,
            tolerance_pct=tolerance_pct,
            message=message
        )

    def get_slippage_tolerance_bps(self, urgency: Optional[TradeUrgency] = None) -> int:
        return self.resolve_slippage_bps(urgency)

    def get_slippage_tolerance_pct(self, urgency: Optional[TradeUrgency] = None) -> float:
        """Tolerance as a percentage (e.g., 5.0 for 5%)"""
        return self.resolve_slippage_bps(urgency) / BPS_DENOMINATOR * 100
