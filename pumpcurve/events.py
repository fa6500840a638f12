"""
Program event records

Converts already-decoded event payloads (camelCase dicts as produced by
the program IDL decoder) into typed records. Byte-level decoding happens
upstream.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from solders.pubkey import Pubkey

from pumpcurve.bonding_curve import CurveState
from pumpcurve.errors import InvalidAmountError
from pumpcurve.fixed_point import require_u64


PubkeyLike = Union[Pubkey, str, bytes]


@dataclass(frozen=True)
class CreateEvent:
    """New token launched on its own bonding curve"""
    name: str
    symbol: str
    uri: str
    mint: Pubkey
    bonding_curve: Pubkey
    user: Pubkey


@dataclass(frozen=True)
class TradeEvent:
    """A buy or sell, with the curve reserves after the trade"""
    mint: Pubkey
    sol_amount: int
    token_amount: int
    is_buy: bool
    user: Pubkey
    timestamp: int
    virtual_sol_reserves: int
    virtual_token_reserves: int
    real_sol_reserves: int
    real_token_reserves: int


@dataclass(frozen=True)
class CompleteEvent:
    """Curve reached the end of its real reserve and migrated"""
    user: Pubkey
    mint: Pubkey
    bonding_curve: Pubkey
    timestamp: int


@dataclass(frozen=True)
class SetParamsEvent:
    """Authority updated the global curve parameters"""
    fee_recipient: Pubkey
    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    token_total_supply: int
    fee_basis_points: int


def to_pubkey(value: PubkeyLike) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, bytes):
        return Pubkey.from_bytes(value)
    return Pubkey.from_string(str(value))


def _field(event: Dict[str, Any], key: str) -> Any:
    try:
        return event[key]
    except KeyError:
        raise InvalidAmountError(f"event is missing field '{key}'") from None


def _int(event: Dict[str, Any], key: str) -> int:
    # Decoders hand back BN-like objects or numeric strings for integer fields
    raw = _field(event, key)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidAmountError(f"{key} is not an integer: {raw!r}") from None


def _u64(event: Dict[str, Any], key: str) -> int:
    return require_u64(_int(event, key), key)


def to_create_event(event: Dict[str, Any]) -> CreateEvent:
    return CreateEvent(
        name=str(_field(event, "name")),
        symbol=str(_field(event, "symbol")),
        uri=str(_field(event, "uri")),
        mint=to_pubkey(_field(event, "mint")),
        bonding_curve=to_pubkey(_field(event, "bondingCurve")),
        user=to_pubkey(_field(event, "user")),
    )


def to_trade_event(event: Dict[str, Any]) -> TradeEvent:
    return TradeEvent(
        mint=to_pubkey(_field(event, "mint")),
        sol_amount=_u64(event, "solAmount"),
        token_amount=_u64(event, "tokenAmount"),
        is_buy=bool(_field(event, "isBuy")),
        user=to_pubkey(_field(event, "user")),
        timestamp=_int(event, "timestamp"),
        virtual_sol_reserves=_u64(event, "virtualSolReserves"),
        virtual_token_reserves=_u64(event, "virtualTokenReserves"),
        real_sol_reserves=_u64(event, "realSolReserves"),
        real_token_reserves=_u64(event, "realTokenReserves"),
    )


def to_complete_event(event: Dict[str, Any]) -> CompleteEvent:
    return CompleteEvent(
        user=to_pubkey(_field(event, "user")),
        mint=to_pubkey(_field(event, "mint")),
        bonding_curve=to_pubkey(_field(event, "bondingCurve")),
        timestamp=_int(event, "timestamp"),
    )


def to_set_params_event(event: Dict[str, Any]) -> SetParamsEvent:
    return SetParamsEvent(
        fee_recipient=to_pubkey(_field(event, "feeRecipient")),
        initial_virtual_token_reserves=_u64(event, "initialVirtualTokenReserves"),
        initial_virtual_sol_reserves=_u64(event, "initialVirtualSolReserves"),
        initial_real_token_reserves=_u64(event, "initialRealTokenReserves"),
        token_total_supply=_u64(event, "tokenTotalSupply"),
        fee_basis_points=_u64(event, "feeBasisPoints"),
    )


def curve_state_from_trade_event(event: TradeEvent, token_total_supply: int) -> CurveState:
    """
    Curve snapshot implied by the reserves carried on a trade event

    Trade events do not carry the total supply, so the caller passes it
    (it never changes after creation).
    """
    return CurveState(
        virtual_token_reserves=event.virtual_token_reserves,
        virtual_sol_reserves=event.virtual_sol_reserves,
        real_token_reserves=event.real_token_reserves,
        real_sol_reserves=event.real_sol_reserves,
        token_total_supply=token_total_supply,
        complete=False,
    )
