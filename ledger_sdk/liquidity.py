"""
liquidity.py - Liquidity pool detail

Combines a pool's reserve storage with its dex-share issuance into a
PoolDetail, the third input of the dex-share price.
"""

from __future__ import annotations
from typing import Any, Dict, TYPE_CHECKING

from .core import ChainApi
from .currency import MaybeCurrency, force_to_currency_name, unzip_dex_share_name
from .fixed_point import FixedPointNumber
from .pricing_source import PoolDetail
from .storages import LiquidityPoolReserves
from .streams import SharedStream, Stream, StreamCache, combine_latest

if TYPE_CHECKING:
    from .wallet import Wallet


class Liquidity:
    """Pool detail views over a wallet's token record, shared per pool name."""

    def __init__(self, api: ChainApi, wallet: "Wallet"):
        self.api = api
        self.wallet = wallet
        self._cache: StreamCache = StreamCache()

    def subscribe_pool_detail(self, target: MaybeCurrency) -> SharedStream[PoolDetail]:
        """
        Continuous detail of the pool behind a dex-share currency.

        Raises:
            ConvertToCurrencyNameFailed: If `target` is not a currency
            NotDexShareName: If `target` is not a dex-share currency
        """
        name = force_to_currency_name(target)
        leg0, leg1 = unzip_dex_share_name(name)
        return self._cache.get(name, lambda: self._pool_detail(name, leg0, leg1))

    def _pool_detail(self, name: str, leg0: str, leg1: str) -> Stream[PoolDetail]:
        tokens = combine_latest({
            "share": self.wallet.subscribe_token(name),
            "token0": self.wallet.subscribe_token(leg0),
            "token1": self.wallet.subscribe_token(leg1),
        })

        def detail(tokens: Dict[str, Any]) -> Stream[PoolDetail]:
            share, token0, token1 = tokens["share"], tokens["token0"], tokens["token1"]

            def to_detail(latest: Dict[str, Any]) -> PoolDetail:
                reserves: LiquidityPoolReserves = latest["reserves"]
                return PoolDetail(
                    token=share,
                    amounts=(
                        FixedPointNumber.from_inner(reserves.reserve0, token0.decimals),
                        FixedPointNumber.from_inner(reserves.reserve1, token1.decimals),
                    ),
                    share_issuance=latest["issuance"],
                )

            return combine_latest({
                "reserves": self.wallet.storages.liquidity_pool(share),
                "issuance": self.wallet.subscribe_issuance(name),
            }).map(to_detail)

        return tokens.switch_map(detail)
