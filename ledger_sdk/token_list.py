"""
token_list.py - Building the token record from chain metadata

The wallet rebuilds its whole TokenRecord from three inputs every time the
trading pairs or asset metadata change:

    1. Native chain tokens (decimals from the chain registry)
    2. Registry assets (decimals, symbol, name and minimal balance as ed)
    3. One dex-share token per enabled trading pair whose legs are both known

The returned record is in canonical currency order.
"""

from __future__ import annotations
import logging
from typing import Iterable, Mapping, Optional

from .core import LedgerSdkError
from .currency import force_to_currency_name
from .fixed_point import FixedPointNumber
from .storages import AssetMetadata, TradingPairStatus
from .token import Token, TokenRecord

logger = logging.getLogger(__name__)


def _metadata_token(metadata: AssetMetadata, chain: Optional[str]) -> Token:
    return Token.from_currency_id(
        metadata.currency,
        decimals=metadata.decimals,
        ed=FixedPointNumber.from_inner(metadata.minimal_balance, metadata.decimals),
        chain=chain,
        symbol=metadata.symbol,
        display=metadata.name,
    )


def create_token_list(
    basic_tokens: Mapping[str, Token],
    trading_pairs: Iterable[TradingPairStatus],
    asset_metadatas: Iterable[AssetMetadata] = (),
    chain: Optional[str] = None,
) -> TokenRecord:
    """
    Build a fresh TokenRecord.

    Native chain tokens win over registry metadata for the same name. Trading
    pairs that are disabled, or that reference a currency missing from the
    record, produce no dex-share token.
    """
    known = dict(basic_tokens)

    for metadata in asset_metadatas:
        token = _metadata_token(metadata, chain)
        known.setdefault(token.name, token)

    shares = []
    for status in trading_pairs:
        if not status.enabled:
            continue
        try:
            name0, name1 = (force_to_currency_name(currency) for currency in status.pair)
        except (LedgerSdkError, ValueError) as exc:
            logger.warning("skipping malformed trading pair %r: %s", status.pair, exc)
            continue
        if name0 not in known or name1 not in known:
            logger.warning("skipping trading pair %s/%s: unknown currency", name0, name1)
            continue
        shares.append(Token.from_tokens(known[name0], known[name1]))

    return {token.name: token for token in Token.sort(*known.values(), *shares)}
