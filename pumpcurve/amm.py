"""
AMM simulator for chained what-if trades

Holds a private copy of the curve reserves and applies buys and sells to
it in sequence, so a caller can project a trade chain without touching
the authoritative CurveState. Not thread-safe: each simulation owns its
own instance.
"""

from dataclasses import dataclass, replace
from typing import Optional

from pumpcurve.bonding_curve import CurveState
from pumpcurve.curve_config import CurveConfig
from pumpcurve.errors import InsufficientLiquidityError
from pumpcurve.fixed_point import checked_add, checked_sub, mul_div, require_u64
from pumpcurve.logger import get_logger
from pumpcurve.metrics import get_metrics


logger = get_logger(__name__)


@dataclass(frozen=True)
class TradeResult:
    """Amounts actually moved by a simulated trade"""
    token_amount: int
    sol_amount: int


@dataclass
class AMM:
    """
    Local projection of a bonding curve

    virtual and real reserves move in lockstep for every simulated trade.
    Sell pricing is scaled by initial_virtual_token_reserves, the
    curve's original shape, rather than the live virtual reserve.

    Usage:
        amm = AMM.from_curve_config(config)
        first = amm.apply_buy(10_000_000_000)
        second = amm.apply_buy(10_000_000_000)   # priced after the first
        exit_ = amm.apply_sell(first.token_amount)
    """
    virtual_sol_reserves: int
    virtual_token_reserves: int
    real_sol_reserves: int
    real_token_reserves: int
    initial_virtual_token_reserves: int

    def __post_init__(self):
        require_u64(self.virtual_sol_reserves, "virtual_sol_reserves")
        require_u64(self.virtual_token_reserves, "virtual_token_reserves")
        require_u64(self.real_sol_reserves, "real_sol_reserves")
        require_u64(self.real_token_reserves, "real_token_reserves")
        require_u64(self.initial_virtual_token_reserves, "initial_virtual_token_reserves")

    @classmethod
    def from_curve_config(cls, config: CurveConfig) -> "AMM":
        """Simulator for a market that has not been created yet"""
        return cls(
            virtual_sol_reserves=config.initial_virtual_sol_reserves,
            virtual_token_reserves=config.initial_virtual_token_reserves,
            real_sol_reserves=0,
            real_token_reserves=config.initial_real_token_reserves,
            initial_virtual_token_reserves=config.initial_virtual_token_reserves,
        )

    @classmethod
    def from_curve_state(
        cls,
        curve_state: CurveState,
        initial_virtual_token_reserves: int
    ) -> "AMM":
        """Simulator seeded from a live curve snapshot"""
        return cls(
            virtual_sol_reserves=curve_state.virtual_sol_reserves,
            virtual_token_reserves=curve_state.virtual_token_reserves,
            real_sol_reserves=curve_state.real_sol_reserves,
            real_token_reserves=curve_state.real_token_reserves,
            initial_virtual_token_reserves=initial_virtual_token_reserves,
        )

    def get_buy_price(self, tokens: int) -> int:
        """SOL needed to take tokens out at the current simulated reserves"""
        require_u64(tokens, "tokens")

        if tokens == 0:
            return 0

        if tokens >= self.virtual_token_reserves:
            raise InsufficientLiquidityError(
                f"tokens {tokens} >= virtual_token_reserves {self.virtual_token_reserves}"
            )

        new_virtual_sol_reserves = checked_add(
            mul_div(
                self.virtual_sol_reserves,
                self.virtual_token_reserves,
                self.virtual_token_reserves - tokens
            ),
            1
        )

        if new_virtual_sol_reserves <= self.virtual_sol_reserves:
            return 0
        return new_virtual_sol_reserves - self.virtual_sol_reserves

    def get_sell_price(self, tokens: int, virtual_token_reserves: Optional[int] = None) -> int:
        """
        SOL paid out for tokens, clamped to the real SOL reserve

        proportion = tokens * initial_virtual_tokens / virtual_tokens
        sol = virtual_sol * proportion / initial_virtual_tokens

        Args:
            tokens: Tokens being sold
            virtual_token_reserves: Reserve to price against; defaults to
                the current one. apply_sell passes the post-deposit value.
        """
        require_u64(tokens, "tokens")

        if tokens == 0:
            return 0

        if virtual_token_reserves is None:
            virtual_token_reserves = self.virtual_token_reserves

        scaling_factor = self.initial_virtual_token_reserves
        token_sell_proportion = mul_div(tokens, scaling_factor, virtual_token_reserves)
        sol_received = mul_div(self.virtual_sol_reserves, token_sell_proportion, scaling_factor)

        return min(sol_received, self.real_sol_reserves)

    def apply_buy(self, token_amount: int) -> TradeResult:
        """
        Simulate buying token_amount tokens

        The amount is clamped to the real token reserve. Zero is a no-op.
        """
        require_u64(token_amount, "token_amount")

        if token_amount == 0:
            return TradeResult(token_amount=0, sol_amount=0)

        final_token_amount = min(token_amount, self.real_token_reserves)
        sol_amount = self.get_buy_price(final_token_amount)

        # Compute everything before assigning so a failure leaves state untouched
        virtual_token_reserves = checked_sub(self.virtual_token_reserves, final_token_amount)
        real_token_reserves = checked_sub(self.real_token_reserves, final_token_amount)
        virtual_sol_reserves = checked_add(self.virtual_sol_reserves, sol_amount)
        real_sol_reserves = checked_add(self.real_sol_reserves, sol_amount)

        self.virtual_token_reserves = virtual_token_reserves
        self.real_token_reserves = real_token_reserves
        self.virtual_sol_reserves = virtual_sol_reserves
        self.real_sol_reserves = real_sol_reserves

        logger.debug(
            "amm_buy_applied",
            token_amount=final_token_amount,
            sol_amount=sol_amount,
            real_token_reserves=self.real_token_reserves
        )
        get_metrics().increment_counter("amm_simulated_trades", labels={"side": "buy"})

        return TradeResult(token_amount=final_token_amount, sol_amount=sol_amount)

    def apply_sell(self, token_amount: int) -> TradeResult:
        """
        Simulate selling token_amount tokens back to the curve

        Tokens are deposited first, then priced against the enlarged
        reserve. Zero is a no-op.
        """
        require_u64(token_amount, "token_amount")

        if token_amount == 0:
            return TradeResult(token_amount=0, sol_amount=0)

        virtual_token_reserves = checked_add(self.virtual_token_reserves, token_amount)
        real_token_reserves = checked_add(self.real_token_reserves, token_amount)
        sol_amount = self.get_sell_price(token_amount, virtual_token_reserves)
        virtual_sol_reserves = checked_sub(self.virtual_sol_reserves, sol_amount)
        real_sol_reserves = checked_sub(self.real_sol_reserves, sol_amount)

        self.virtual_token_reserves = virtual_token_reserves
        self.real_token_reserves = real_token_reserves
        self.virtual_sol_reserves = virtual_sol_reserves
        self.real_sol_reserves = real_sol_reserves

        logger.debug(
            "amm_sell_applied",
            token_amount=token_amount,
            sol_amount=sol_amount,
            real_sol_reserves=self.real_sol_reserves
        )
        get_metrics().increment_counter("amm_simulated_trades", labels={"side": "sell"})

        return TradeResult(token_amount=token_amount, sol_amount=sol_amount)

    def clone(self) -> "AMM":
        """Independent copy for branching simulations"""
        return replace(self)

    def to_curve_state(self, token_total_supply: int) -> CurveState:
        """Project the simulated reserves back into a CurveState snapshot"""
        return CurveState(
            virtual_token_reserves=self.virtual_token_reserves,
            virtual_sol_reserves=self.virtual_sol_reserves,
            real_token_reserves=self.real_token_reserves,
            real_sol_reserves=self.real_sol_reserves,
            token_total_supply=token_total_supply,
            complete=False,
        )
