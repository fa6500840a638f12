"""
Bonding Curve pricing for Pump.fun markets
Prices buys, sells, market cap and buy-out from a curve snapshot using exact on-chain integer math
"""

from dataclasses import dataclass, fields, replace

from pumpcurve.errors import CurveCompleteError, InsufficientLiquidityError
from pumpcurve.fixed_point import (
    BPS_DENOMINATOR,
    apply_fee_basis_points,
    checked_add,
    checked_sub,
    mul_div,
    require_basis_points,
    require_u64,
)
from pumpcurve.logger import get_logger
from pumpcurve.metrics import get_metrics


logger = get_logger(__name__)


DEFAULT_FEE_BASIS_POINTS = 100  # 1% protocol fee


@dataclass(frozen=True)
class CurveState:
    """Bonding curve snapshot read from the market account

    All values in base units:
    - Token values: base token units (6 decimals for pump.fun)
    - SOL values: lamports (9 decimals)

    A snapshot is never refreshed in place; read a new one before every
    priced operation.
    """
    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool = False  # Migrated off the curve, no further trading

    def __post_init__(self):
        for f in fields(self):
            if f.name != "complete":
                require_u64(getattr(self, f.name), f.name)

    def _require_active(self) -> None:
        if self.complete:
            raise CurveCompleteError()

    def get_buy_price(self, tokens_out: int) -> int:
        """
        SOL needed to receive tokens_out from the curve

        new_virtual_sol = virtual_sol * virtual_tokens / (virtual_tokens - tokens) + 1

        The +1 rounds the new SOL reserve up so integer truncation never
        under-charges. Delivered tokens are clamped to real_token_reserves.

        Raises:
            CurveCompleteError: If the curve has migrated
            InvalidAmountError: If tokens_out is negative
            InsufficientLiquidityError: If tokens_out >= virtual_token_reserves
        """
        self._require_active()
        require_u64(tokens_out, "tokens_out")

        if tokens_out == 0:
            return 0

        if tokens_out >= self.virtual_token_reserves:
            raise InsufficientLiquidityError(
                f"tokens_out {tokens_out} >= virtual_token_reserves {self.virtual_token_reserves}"
            )

        tokens = min(tokens_out, self.real_token_reserves)
        if tokens == 0:
            return 0

        new_virtual_token_reserves = self.virtual_token_reserves - tokens
        new_virtual_sol_reserves = checked_add(
            mul_div(self.virtual_sol_reserves, self.virtual_token_reserves, new_virtual_token_reserves),
            1
        )

        if new_virtual_sol_reserves <= self.virtual_sol_reserves:
            return 0
        return new_virtual_sol_reserves - self.virtual_sol_reserves

    def get_sell_price(self, tokens_in: int, fee_basis_points: int) -> int:
        """
        SOL received for selling tokens_in, after the protocol fee

        gross = tokens_in * virtual_sol / (virtual_tokens + tokens_in)

        Unlike get_buy_price there is no ceiling adjustment.
        """
        self._require_active()
        require_u64(tokens_in, "tokens_in")
        require_basis_points(fee_basis_points)

        if tokens_in == 0:
            return 0

        gross = mul_div(
            tokens_in,
            self.virtual_sol_reserves,
            checked_add(self.virtual_token_reserves, tokens_in)
        )
        fee = apply_fee_basis_points(gross, fee_basis_points)

        return gross - fee

    def get_buy_tokens_for_sol(self, sol_amount: int) -> int:
        """
        Tokens received for spending sol_amount lamports (fee not deducted)

        Clamped to real_token_reserves.
        """
        self._require_active()
        require_u64(sol_amount, "sol_amount")

        if sol_amount == 0:
            return 0

        new_virtual_token_reserves = checked_add(
            mul_div(
                self.virtual_sol_reserves,
                self.virtual_token_reserves,
                checked_add(self.virtual_sol_reserves, sol_amount)
            ),
            1
        )
        tokens = max(0, self.virtual_token_reserves - new_virtual_token_reserves)

        return min(tokens, self.real_token_reserves)

    def get_market_cap_sol(self) -> int:
        """Market cap in lamports, 0 for an uninitialized curve"""
        self._require_active()

        if self.virtual_token_reserves == 0:
            return 0

        return mul_div(self.token_total_supply, self.virtual_sol_reserves, self.virtual_token_reserves)

    def get_buy_out_price(self, token_amount: int, fee_basis_points: int) -> int:
        """
        SOL cost, fee included, to buy out at least token_amount tokens

        A zero request costs nothing. Otherwise the amount bought out is
        the larger of token_amount and the remaining real_token_reserves.

        Raises:
            DivisionByZeroError: If the amount equals virtual_token_reserves
            InsufficientLiquidityError: If the amount exceeds virtual_token_reserves
        """
        self._require_active()
        require_u64(token_amount, "token_amount")
        require_basis_points(fee_basis_points)

        if token_amount == 0:
            return 0

        sol_tokens = max(token_amount, self.real_token_reserves)

        if sol_tokens > self.virtual_token_reserves:
            raise InsufficientLiquidityError(
                f"buy-out amount {sol_tokens} exceeds virtual_token_reserves {self.virtual_token_reserves}"
            )

        total_sell_value = checked_add(
            mul_div(self.virtual_sol_reserves, sol_tokens, self.virtual_token_reserves - sol_tokens),
            1
        )
        fee = apply_fee_basis_points(total_sell_value, fee_basis_points)

        return checked_add(total_sell_value, fee)

    def get_final_market_cap_sol(self, fee_basis_points: int) -> int:
        """Projected market cap in lamports once the real reserve is fully bought out"""
        self._require_active()
        require_basis_points(fee_basis_points)

        total_virtual_tokens = checked_sub(self.virtual_token_reserves, self.real_token_reserves)
        if total_virtual_tokens == 0:
            return 0

        total_sell_value = self.get_buy_out_price(self.real_token_reserves, fee_basis_points)
        total_virtual_value = checked_add(self.virtual_sol_reserves, total_sell_value)

        return mul_div(self.token_total_supply, total_virtual_value, total_virtual_tokens)

    def with_complete(self) -> "CurveState":
        """Snapshot after the migration transition"""
        return replace(self, complete=True)


@dataclass
class BuyQuote:
    """Quote for buying tokens

    All values in base units:
    - tokens_out: base token units
    - sol_in: lamports, fee included
    - price_per_token_sol: lamports per base token unit
    """
    tokens_out: int
    sol_in: int
    price_per_token_sol: float
    price_impact_pct: float
    fee_lamports: int


@dataclass
class SellQuote:
    """Quote for selling tokens

    All values in base units:
    - sol_out: lamports, after fee
    - tokens_in: base token units
    """
    sol_out: int
    tokens_in: int
    price_per_token_sol: float
    price_impact_pct: float
    fee_lamports: int


class BondingCurveCalculator:
    """
    Builds trade quotes from a CurveState snapshot

    Wraps the exact CurveState pricing with fee breakdown, effective
    price and price impact for display and risk checks.

    Usage:
        calculator = BondingCurveCalculator(fee_basis_points=100)
        quote = calculator.calculate_buy_price(curve_state, 1_000_000_000)  # 1 SOL
        print(f"Tokens out: {quote.tokens_out}")
        print(f"Price impact: {quote.price_impact_pct:.2f}%")
    """

    def __init__(self, fee_basis_points: int = DEFAULT_FEE_BASIS_POINTS):
        self.fee_basis_points = require_basis_points(fee_basis_points)

        logger.info(
            "bonding_curve_calculator_initialized",
            fee_bps=self.fee_basis_points
        )

    def calculate_buy_price(
        self,
        curve_state: CurveState,
        amount_sol_lamports: int
    ) -> BuyQuote:
        """
        Calculate tokens received for spending SOL

        The fee is taken from the SOL input before the swap.

        Args:
            curve_state: Current bonding curve snapshot
            amount_sol_lamports: SOL to spend, fee included (lamports)

        Returns:
            BuyQuote with tokens out and price info
        """
        require_u64(amount_sol_lamports, "amount_sol_lamports")
        fee_lamports = apply_fee_basis_points(amount_sol_lamports, self.fee_basis_points)
        amount_after_fee = amount_sol_lamports - fee_lamports

        tokens_out = curve_state.get_buy_tokens_for_sol(amount_after_fee)

        price_per_token = amount_sol_lamports / tokens_out if tokens_out > 0 else 0.0
        price_impact_pct = self._calculate_price_impact(
            curve_state.virtual_sol_reserves,
            amount_after_fee
        )

        logger.debug(
            "buy_quote_calculated",
            sol_in=amount_sol_lamports,
            tokens_out=tokens_out,
            price_per_token=price_per_token,
            price_impact_pct=price_impact_pct,
            fee_lamports=fee_lamports
        )

        metrics = get_metrics()
        metrics.increment_counter("bonding_curve_buy_quotes")
        metrics.set_gauge("quote_price_impact_pct", price_impact_pct, labels={"side": "buy"})

        return BuyQuote(
            tokens_out=tokens_out,
            sol_in=amount_sol_lamports,
            price_per_token_sol=price_per_token,
            price_impact_pct=price_impact_pct,
            fee_lamports=fee_lamports
        )

    def calculate_buy_cost(
        self,
        curve_state: CurveState,
        tokens_out: int
    ) -> BuyQuote:
        """
        Calculate SOL needed to receive an exact token amount

        The fee is charged on top of the curve cost.
        """
        sol_cost = curve_state.get_buy_price(tokens_out)
        deliverable = min(tokens_out, curve_state.real_token_reserves)
        fee_lamports = apply_fee_basis_points(sol_cost, self.fee_basis_points)
        sol_in = checked_add(sol_cost, fee_lamports)

        price_per_token = sol_in / deliverable if deliverable > 0 else 0.0
        price_impact_pct = self._calculate_price_impact(
            curve_state.virtual_sol_reserves,
            sol_cost
        )

        logger.debug(
            "buy_cost_calculated",
            tokens_out=deliverable,
            sol_in=sol_in,
            fee_lamports=fee_lamports
        )

        metrics = get_metrics()
        metrics.increment_counter("bonding_curve_buy_quotes")
        metrics.set_gauge("quote_price_impact_pct", price_impact_pct, labels={"side": "buy"})

        return BuyQuote(
            tokens_out=deliverable,
            sol_in=sol_in,
            price_per_token_sol=price_per_token,
            price_impact_pct=price_impact_pct,
            fee_lamports=fee_lamports
        )

    def calculate_sell_price(
        self,
        curve_state: CurveState,
        amount_tokens: int
    ) -> SellQuote:
        """
        Calculate SOL received for selling tokens

        Args:
            curve_state: Current bonding curve snapshot
            amount_tokens: Tokens to sell (base units)

        Returns:
            SellQuote with SOL out and price info
        """
        sol_out = curve_state.get_sell_price(amount_tokens, self.fee_basis_points)
        sol_without_fee = curve_state.get_sell_price(amount_tokens, 0)
        fee_lamports = sol_without_fee - sol_out

        price_per_token = sol_out / amount_tokens if amount_tokens > 0 else 0.0
        price_impact_pct = self._calculate_price_impact(
            curve_state.virtual_token_reserves,
            amount_tokens
        )

        logger.debug(
            "sell_quote_calculated",
            tokens_in=amount_tokens,
            sol_out=sol_out,
            price_per_token=price_per_token,
            price_impact_pct=price_impact_pct,
            fee_lamports=fee_lamports
        )

        metrics = get_metrics()
        metrics.increment_counter("bonding_curve_sell_quotes")
        metrics.set_gauge("quote_price_impact_pct", price_impact_pct, labels={"side": "sell"})

        return SellQuote(
            sol_out=sol_out,
            tokens_in=amount_tokens,
            price_per_token_sol=price_per_token,
            price_impact_pct=price_impact_pct,
            fee_lamports=fee_lamports
        )

    def get_current_price(self, curve_state: CurveState) -> float:
        """
        Spot price in lamports per base token unit

        Note:
            Instantaneous price at current reserves; trades move it.
        """
        if curve_state.virtual_token_reserves <= 0:
            return 0.0

        return curve_state.virtual_sol_reserves / curve_state.virtual_token_reserves

    def calculate_price_impact(
        self,
        curve_state: CurveState,
        amount: int,
        is_buy: bool = True
    ) -> float:
        """
        Price impact percentage for a trade

        Args:
            curve_state: Current bonding curve snapshot
            amount: Lamports for a buy, base token units for a sell
            is_buy: Whether this is a buy (True) or sell (False)

        Returns:
            Price impact as percentage (e.g., 2.5 for 2.5%)
        """
        if is_buy:
            reserves = curve_state.virtual_sol_reserves
        else:
            reserves = curve_state.virtual_token_reserves

        return self._calculate_price_impact(reserves, amount)

    def _calculate_price_impact(self, reserves: int, amount: int) -> float:
        """impact = amount / (reserves + amount)"""
        if reserves <= 0:
            return 0.0

        return (amount / (reserves + amount)) * 100

    def validate_curve_state(self, curve_state: CurveState) -> bool:
        """
        Check a snapshot is tradable

        Returns:
            True if valid for trading, False otherwise
        """
        if curve_state.complete:
            logger.warning("invalid_curve_state", reason="bonding_curve_complete")
            return False

        if curve_state.virtual_sol_reserves <= 0:
            logger.warning("invalid_curve_state", reason="virtual_sol_reserves <= 0")
            return False

        if curve_state.virtual_token_reserves <= 0:
            logger.warning("invalid_curve_state", reason="virtual_token_reserves <= 0")
            return False

        if curve_state.real_token_reserves > curve_state.virtual_token_reserves:
            logger.warning("invalid_curve_state", reason="real_token_reserves > virtual_token_reserves")
            return False

        if curve_state.token_total_supply <= 0:
            logger.warning("invalid_curve_state", reason="token_total_supply <= 0")
            return False

        return True

    def get_stats(self) -> dict:
        return {
            "fee_bps": self.fee_basis_points,
            "fee_percentage": self.fee_basis_points / BPS_DENOMINATOR * 100
        }


# Example usage
if __name__ == "__main__":
    from pumpcurve.logger import setup_logging

    setup_logging(level="DEBUG", format="console")

    calculator = BondingCurveCalculator()

    curve_state = CurveState(
        virtual_token_reserves=1_000_000_000_000,  # 1M tokens
        virtual_sol_reserves=30_000_000_000,  # 30 SOL
        real_token_reserves=800_000_000_000,
        real_sol_reserves=0,
        token_total_supply=1_000_000_000_000,
        complete=False
    )

    buy_quote = calculator.calculate_buy_price(curve_state, 1_000_000_000)  # 1 SOL
    print(f"\nBuy 1 SOL:")
    print(f"  Tokens out: {buy_quote.tokens_out:,}")
    print(f"  Price impact: {buy_quote.price_impact_pct:.2f}%")
    print(f"  Fee: {buy_quote.fee_lamports:,} lamports")

    sell_quote = calculator.calculate_sell_price(curve_state, buy_quote.tokens_out)
    print(f"\nSell {buy_quote.tokens_out:,} tokens:")
    print(f"  SOL out: {sell_quote.sol_out:,} lamports ({sell_quote.sol_out / 1e9:.4f} SOL)")

    print(f"\nMarket cap: {curve_state.get_market_cap_sol() / 1e9:.2f} SOL")
    print(f"Final market cap: {curve_state.get_final_market_cap_sol(calculator.fee_basis_points) / 1e9:.2f} SOL")
