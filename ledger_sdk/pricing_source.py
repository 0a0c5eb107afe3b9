"""
pricing_source.py - Price providers and dex-share price aggregation

Provides the pricing side of the wallet:

Classes:
- PriceProvider: Protocol every price feed implements
- MarketPriceProvider: Off-chain market prices pushed in by the caller
- OraclePriceProvider: On-chain oracle prices read from ledger storage
- PoolDetail: Reserves and share issuance of one liquidity pool

Dex-share tokens have no feed of their own. Their price is derived from the
two leg prices and the pool:

    price = (price0 * amount0 + price1 * amount1) / share_issuance

and is recomputed whenever any of the three inputs changes.

All prices are returned as FixedPointNumber in the feed's quote currency.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Protocol, Tuple, Union, runtime_checkable

from .core import ChainApi, ORACLE_PRICE_DECIMALS
from .fixed_point import FixedPointNumber
from .storages import Storages
from .streams import ReplaySubject, Stream, combine_latest
from .token import Token

PriceInput = Union[FixedPointNumber, Decimal, int, str]


@runtime_checkable
class PriceProvider(Protocol):
    """
    Protocol for price feeds.

    subscribe() yields the current price and every later update; query()
    resolves with the next available price.
    """

    def subscribe(self, currency: str) -> Stream[FixedPointNumber]:
        """Continuous price of one currency, by canonical name."""
        ...

    async def query(self, currency: str) -> FixedPointNumber:
        """One-shot price of one currency, by canonical name."""
        ...


# ============================================================================
# MARKET FEED
# ============================================================================

class MarketPriceProvider:
    """
    Price feed driven by pushed market prices.

    Prices stay until replaced. A subscriber to a currency that has no price
    yet waits for the first update_price() call for it.
    """

    def __init__(self, prices: Optional[Dict[str, PriceInput]] = None):
        """
        Initialize with an optional starting price map.

        Args:
            prices: Dictionary mapping currency names to prices
        """
        self._feeds: Dict[str, ReplaySubject[FixedPointNumber]] = {}
        if prices:
            self.update_prices(prices)

    def _feed(self, currency: str) -> ReplaySubject[FixedPointNumber]:
        feed = self._feeds.get(currency)
        if feed is None:
            feed = self._feeds[currency] = ReplaySubject()
        return feed

    @property
    def prices(self) -> Dict[str, FixedPointNumber]:
        """Latest known price of every currency that has one."""
        return {
            name: feed.value
            for name, feed in self._feeds.items()
            if feed.has_value
        }

    def update_price(self, currency: str, price: PriceInput) -> None:
        """Publish a new price for one currency."""
        if not isinstance(price, FixedPointNumber):
            price = FixedPointNumber(price)
        self._feed(currency).next(price)

    def update_prices(self, prices: Dict[str, PriceInput]) -> None:
        """Publish several prices at once."""
        for currency, price in prices.items():
            self.update_price(currency, price)

    def subscribe(self, currency: str) -> Stream[FixedPointNumber]:
        return self._feed(currency)

    async def query(self, currency: str) -> FixedPointNumber:
        return await self.subscribe(currency).first()

    def __repr__(self):
        return f"MarketPriceProvider({len(self.prices)} prices)"


# ============================================================================
# ORACLE FEED
# ============================================================================

class OraclePriceProvider:
    """
    Price feed read from the ledger's oracle storage.

    Oracle values are raw FixedU128 integers; a currency the oracle has not
    fed yet reads as None and prices at zero.
    """

    def __init__(self, api: ChainApi, storages: Optional[Storages] = None):
        self.api = api
        self.storages = storages if storages is not None else Storages(api)

    def subscribe(self, currency: str) -> Stream[FixedPointNumber]:
        return self.storages.oracle_price(currency).map(_oracle_value)

    async def query(self, currency: str) -> FixedPointNumber:
        return await self.subscribe(currency).first()


def _oracle_value(raw: Optional[int]) -> FixedPointNumber:
    if raw is None:
        return FixedPointNumber.ZERO
    return FixedPointNumber.from_inner(raw, ORACLE_PRICE_DECIMALS)


# ============================================================================
# DEX SHARE PRICE
# ============================================================================

@dataclass(frozen=True, slots=True)
class PoolDetail:
    """
    Snapshot of one liquidity pool.

    Attributes:
        token: The dex-share token of the pool
        amounts: Reserves of leg0 and leg1, each in its own token's decimals
        share_issuance: Total issued dex-share supply
    """
    token: Token
    amounts: Tuple[FixedPointNumber, FixedPointNumber]
    share_issuance: FixedPointNumber


def compute_dex_share_price(
    price0: FixedPointNumber,
    price1: FixedPointNumber,
    pool: PoolDetail,
) -> FixedPointNumber:
    """
    Price of one dex-share unit from leg prices and pool reserves.

    Example:
        pool = PoolDetail(token, (FixedPointNumber(100), FixedPointNumber(50)), FixedPointNumber(40))
        compute_dex_share_price(FixedPointNumber(2), FixedPointNumber(3), pool)   # 8.75
    """
    if pool.share_issuance.is_zero():
        return FixedPointNumber.ZERO
    amount0, amount1 = pool.amounts
    value = price0.mul(amount0).add(price1.mul(amount1))
    return value.div(pool.share_issuance)


def subscribe_dex_share_token_price(
    price0: Stream[FixedPointNumber],
    price1: Stream[FixedPointNumber],
    pool: Stream[PoolDetail],
) -> Stream[FixedPointNumber]:
    """Dex-share price, recomputed from the latest of all three inputs on every change."""
    combined = combine_latest({"price0": price0, "price1": price1, "pool": pool})
    return combined.map(
        lambda latest: compute_dex_share_price(latest["price0"], latest["price1"], latest["pool"])
    )
