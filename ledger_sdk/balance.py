"""
balance.py - Balance snapshots and the maximum transferable amount

Pure functions only. The wallet feeds these with values decoded from storage;
tests feed them literal fixtures.

Existence rules:
    An account must keep at least the existential deposit (ed) of a token to
    stay alive. A transfer may take the account below ed only when the caller
    allows death AND nothing else pins the account. Outstanding consumer
    references pin it regardless of the caller's flag.

Fees are paid in the native token, so only the native path deducts the fee.
A non-native transfer keeps its full target balance available even though the
fee is drawn from the native balance.
"""

from __future__ import annotations
from dataclasses import dataclass

from .fixed_point import FixedPointNumber
from .token import Token

ZERO = FixedPointNumber.ZERO


@dataclass(frozen=True, slots=True)
class BalanceData:
    """
    Balance of one token for one account.

    available = max(free - locked, 0)
    """
    token: Token
    free: FixedPointNumber
    locked: FixedPointNumber
    reserved: FixedPointNumber
    available: FixedPointNumber

    @classmethod
    def create(
        cls,
        token: Token,
        free: FixedPointNumber,
        locked: FixedPointNumber,
        reserved: FixedPointNumber,
    ) -> "BalanceData":
        return cls(
            token=token,
            free=free,
            locked=locked,
            reserved=reserved,
            available=free.sub(locked).max(ZERO),
        )


@dataclass(frozen=True, slots=True)
class MaxAvailableBalanceParams:
    """
    Inputs of get_max_available_balance().

    Attributes:
        is_native_token: Transfer is in the native token
        is_allow_death: Caller accepts the account being reaped
        providers: Provider reference count of the account
        consumers: Consumer reference count of the account
        native_free_balance: Free native balance
        native_locked_balance: Locked native balance
        target_free_balance: Free balance of the transferred token (non-native)
        target_locked_balance: Locked balance of the transferred token (non-native)
        ed: Existential deposit of the transferred token
        fee: Estimated fee, in native token units
    """
    is_native_token: bool
    is_allow_death: bool
    providers: int
    consumers: int
    native_free_balance: FixedPointNumber
    native_locked_balance: FixedPointNumber
    target_free_balance: FixedPointNumber
    target_locked_balance: FixedPointNumber
    ed: FixedPointNumber
    fee: FixedPointNumber


def must_keep_alive(params: MaxAvailableBalanceParams) -> bool:
    """
    True when the transfer has to leave at least ed behind.

    Native accounts are pinned by any consumer reference. Token accounts are
    pinned by consumer references only when no provider reference exists.
    """
    if not params.is_allow_death:
        return True
    if params.is_native_token:
        return params.consumers > 0
    return params.consumers > 0 and params.providers == 0


def _native_max_available(params: MaxAvailableBalanceParams) -> FixedPointNumber:
    available = (
        params.native_free_balance
        .sub(params.native_locked_balance)
        .sub(params.fee)
        .max(ZERO)
    )
    if must_keep_alive(params):
        available = available.sub(params.ed).max(ZERO)
    return available


def _non_native_max_available(params: MaxAvailableBalanceParams) -> FixedPointNumber:
    available = params.target_free_balance.sub(params.target_locked_balance).max(ZERO)
    if must_keep_alive(params) and params.ed.is_positive():
        remaining = params.target_free_balance.sub(available)
        if remaining < params.ed:
            available = available.sub(params.ed).max(ZERO)
    return available


def get_max_available_balance(params: MaxAvailableBalanceParams) -> FixedPointNumber:
    """
    Largest amount the account can transfer without breaking existence rules.

    Never negative.

    Example:
        params = MaxAvailableBalanceParams(
            is_native_token=True, is_allow_death=False, providers=1, consumers=0,
            native_free_balance=FixedPointNumber(100), native_locked_balance=FixedPointNumber(10),
            target_free_balance=FixedPointNumber.ZERO, target_locked_balance=FixedPointNumber.ZERO,
            ed=FixedPointNumber(1), fee=FixedPointNumber(2),
        )
        get_max_available_balance(params)   # 100 - 10 - 2 - 1 = 87
    """
    if params.is_native_token:
        return _native_max_available(params)
    return _non_native_max_available(params)
