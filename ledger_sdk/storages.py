"""
storages.py - Typed storage reads

Raw values the ledger client emits for each StorageKey, and the Storages
adapter the wallet reads through. Storages shares one upstream storage
subscription per (key, arguments), so the balance view and the suggest-input
view of the same account read system.account once.

Raw integer fields are chain integers, still scaled by the token's decimals.
FixedPointNumber.from_inner() turns them into amounts.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .core import ChainApi, StorageKey
from .currency import force_to_currency_id
from .streams import SharedStream, StreamCache
from .token import Token


# ============================================================================
# RAW STORAGE VALUES
# ============================================================================

@dataclass(frozen=True, slots=True)
class AccountInfo:
    """system.account: native balance plus account reference counts."""
    free: int = 0
    reserved: int = 0
    misc_frozen: int = 0
    fee_frozen: int = 0
    providers: int = 0
    consumers: int = 0
    nonce: int = 0

    @property
    def frozen(self) -> int:
        """Native locked balance: the larger of the two frozen amounts."""
        return max(self.misc_frozen, self.fee_frozen)


@dataclass(frozen=True, slots=True)
class TokenAccountData:
    """tokens.accounts: balance of a non-native token."""
    free: int = 0
    reserved: int = 0
    frozen: int = 0


@dataclass(frozen=True, slots=True)
class TradingPairStatus:
    """One dex.tradingPairStatuses entry; `pair` holds two currency values."""
    pair: Tuple[Any, Any]
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class AssetMetadata:
    """assetRegistry.assetMetadatas entry for a registered asset."""
    currency: Any
    name: str
    symbol: str
    decimals: int
    minimal_balance: int = 0


@dataclass(frozen=True, slots=True)
class LiquidityPoolReserves:
    """dex.liquidityPool: raw reserves of both legs, in trading-pair order."""
    reserve0: int = 0
    reserve1: int = 0


# ============================================================================
# STORAGES
# ============================================================================

class Storages:
    """
    Shared storage streams over a ChainApi.

    Every method returns a SharedStream; repeated calls with the same
    arguments return the same stream.
    """

    def __init__(self, api: ChainApi, native_currency: Optional[str] = None):
        self.api = api
        self.native_currency = native_currency
        self._cache: StreamCache = StreamCache()

    def _read(self, cache_key: Tuple[Any, ...], key: StorageKey, *args: Any) -> SharedStream:
        return self._cache.get(cache_key, lambda: self.api.read(key, *args))

    def trading_pairs(self) -> SharedStream:
        return self._read((StorageKey.TRADING_PAIRS,), StorageKey.TRADING_PAIRS)

    def asset_metadatas(self) -> SharedStream:
        return self._read((StorageKey.ASSET_METADATAS,), StorageKey.ASSET_METADATAS)

    def native_balance(self, address: str) -> SharedStream:
        return self._read((StorageKey.NATIVE_ACCOUNT, address), StorageKey.NATIVE_ACCOUNT, address)

    def non_native_balance(self, token: Token, address: str) -> SharedStream:
        return self._read(
            (StorageKey.TOKEN_ACCOUNT, address, token.name),
            StorageKey.TOKEN_ACCOUNT, address, force_to_currency_id(self.api, token),
        )

    def issuance(self, token: Token) -> SharedStream:
        if token.name == self.native_currency:
            return self._read((StorageKey.NATIVE_ISSUANCE,), StorageKey.NATIVE_ISSUANCE)
        return self._read(
            (StorageKey.TOKEN_ISSUANCE, token.name),
            StorageKey.TOKEN_ISSUANCE, force_to_currency_id(self.api, token),
        )

    def liquidity_pool(self, token: Token) -> SharedStream:
        """Reserves of the pool behind a dex-share token."""
        return self._read(
            (StorageKey.LIQUIDITY_POOL, token.name),
            StorageKey.LIQUIDITY_POOL, token.to_trading_pair(self.api),
        )

    def oracle_price(self, name: str) -> SharedStream:
        return self._read(
            (StorageKey.ORACLE_PRICE, name),
            StorageKey.ORACLE_PRICE, force_to_currency_id(self.api, name),
        )
