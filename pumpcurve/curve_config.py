"""
Global curve parameters

One CurveConfig describes every market created by the program: the
initial virtual and real reserves, total supply and protocol fee. It is
read once per session and never mutated.
"""

from dataclasses import dataclass, field, replace

from solders.pubkey import Pubkey

from pumpcurve.bonding_curve import DEFAULT_FEE_BASIS_POINTS, CurveState
from pumpcurve.errors import InvalidAmountError
from pumpcurve.events import SetParamsEvent
from pumpcurve.fixed_point import checked_add, mul_div, require_basis_points, require_u64


# Pump.fun mainnet parameters (6-decimal tokens, lamports)
DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES = 1_073_000_000_000_000  # 1.073B tokens
DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES = 30_000_000_000  # 30 SOL
DEFAULT_INITIAL_REAL_TOKEN_RESERVES = 793_100_000_000_000  # 793.1M tokens
DEFAULT_TOKEN_TOTAL_SUPPLY = 1_000_000_000_000_000  # 1B tokens


@dataclass(frozen=True)
class CurveConfig:
    """Global account parameters shared by all curves"""
    initial_virtual_token_reserves: int = DEFAULT_INITIAL_VIRTUAL_TOKEN_RESERVES
    initial_virtual_sol_reserves: int = DEFAULT_INITIAL_VIRTUAL_SOL_RESERVES
    initial_real_token_reserves: int = DEFAULT_INITIAL_REAL_TOKEN_RESERVES
    token_total_supply: int = DEFAULT_TOKEN_TOTAL_SUPPLY
    fee_basis_points: int = DEFAULT_FEE_BASIS_POINTS
    authority: Pubkey = field(default_factory=Pubkey.default)
    fee_recipient: Pubkey = field(default_factory=Pubkey.default)
    initialized: bool = True

    def __post_init__(self):
        require_u64(self.initial_virtual_token_reserves, "initial_virtual_token_reserves")
        require_u64(self.initial_virtual_sol_reserves, "initial_virtual_sol_reserves")
        require_u64(self.initial_real_token_reserves, "initial_real_token_reserves")
        require_u64(self.token_total_supply, "token_total_supply")
        require_basis_points(self.fee_basis_points)

        # The curve always keeps a virtual cushion above the real reserve
        if self.initial_virtual_token_reserves <= self.initial_real_token_reserves:
            raise InvalidAmountError(
                "initial_virtual_token_reserves must exceed initial_real_token_reserves "
                f"({self.initial_virtual_token_reserves} <= {self.initial_real_token_reserves})"
            )

    def get_initial_buy_price(self, sol_amount: int) -> int:
        """
        Tokens received for sol_amount lamports on a brand-new curve

        Same ceiling form as a live buy, evaluated against the initial
        virtual reserves and clamped to the initial real reserve.
        """
        require_u64(sol_amount, "sol_amount")

        if sol_amount == 0:
            return 0

        new_virtual_token_reserves = checked_add(
            mul_div(
                self.initial_virtual_sol_reserves,
                self.initial_virtual_token_reserves,
                checked_add(self.initial_virtual_sol_reserves, sol_amount)
            ),
            1
        )
        tokens = max(0, self.initial_virtual_token_reserves - new_virtual_token_reserves)

        return min(tokens, self.initial_real_token_reserves)

    def initial_curve_state(self) -> CurveState:
        """Curve snapshot of a market before its first trade"""
        return CurveState(
            virtual_token_reserves=self.initial_virtual_token_reserves,
            virtual_sol_reserves=self.initial_virtual_sol_reserves,
            real_token_reserves=self.initial_real_token_reserves,
            real_sol_reserves=0,
            token_total_supply=self.token_total_supply,
            complete=False,
        )

    def with_params(self, event: SetParamsEvent) -> "CurveConfig":
        """New config with a set-params update applied"""
        return replace(
            self,
            fee_recipient=event.fee_recipient,
            initial_virtual_token_reserves=event.initial_virtual_token_reserves,
            initial_virtual_sol_reserves=event.initial_virtual_sol_reserves,
            initial_real_token_reserves=event.initial_real_token_reserves,
            token_total_supply=event.token_total_supply,
            fee_basis_points=event.fee_basis_points,
        )
