"""
token.py - Token entity and token algebra

A Token wraps a canonical currency name with the metadata needed to turn raw
chain integers into amounts: decimals, existential deposit (ed), chain and
display labels.

Tokens are immutable. Composition (from_tokens) and clone() always build a
new Token. Equality and hashing use the name only; pass a comparator to
is_equal() for anything else.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .core import (
    ChainApi, TokenType,
    DEFAULT_DECIMALS, CURRENCY_ID_TYPE, TRADING_PAIR_TYPE, TOKEN_SYMBOL_TYPE, DEX_SHARE_TYPE,
    ConvertToCurrencyIdFailed,
)
from .currency import (
    CurrencyObject, MaybeCurrency,
    create_dex_share_name, currency_sort_key, force_to_currency_name,
    get_currency_object, get_currency_type_by_name, unzip_dex_share_name,
)
from .fixed_point import FixedPointNumber


@dataclass(frozen=True, slots=True, eq=False)
class Token:
    """
    Immutable token description.

    Attributes:
        name: Canonical currency name (e.g. "SETM", "lp://SETM/SERP")
        decimals: Fractional digits of the raw chain integer
        ed: Existential deposit, the minimum balance that keeps an account alive
        chain: Chain label the token belongs to, if known
        type: BASIC, DEX_SHARE or ERC20
        symbol: Ticker symbol (defaults to name)
        display: Label for display (defaults to name)
    """
    name: str
    decimals: int = DEFAULT_DECIMALS
    ed: FixedPointNumber = field(default=FixedPointNumber.ZERO)
    chain: Optional[str] = None
    type: TokenType = TokenType.BASIC
    symbol: str = ""
    display: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Token name cannot be empty")
        if self.decimals is None:
            object.__setattr__(self, "decimals", DEFAULT_DECIMALS)
        if self.decimals < 0:
            raise ValueError(f"Token decimals must be >= 0, got {self.decimals}")
        if not isinstance(self.ed, FixedPointNumber):
            object.__setattr__(self, "ed", FixedPointNumber(self.ed))
        if not self.symbol:
            object.__setattr__(self, "symbol", self.name)
        if not self.display:
            object.__setattr__(self, "display", self.name)

    # ------------------------------------------------------------------------
    # Kind
    # ------------------------------------------------------------------------

    @property
    def is_token_symbol(self) -> bool:
        return self.type is TokenType.BASIC

    @property
    def is_dex_share(self) -> bool:
        return self.type is TokenType.DEX_SHARE

    @property
    def is_erc20(self) -> bool:
        return self.type is TokenType.ERC20

    # ------------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------------

    @classmethod
    def create(cls, name: str, **configs: Any) -> "Token":
        return cls(name, **configs)

    @classmethod
    def from_currency_name(cls, name: str, **configs: Any) -> "Token":
        """Create a token from a currency name; the type is inferred from the name."""
        configs["type"] = get_currency_type_by_name(name)
        return cls(name, **configs)

    @classmethod
    def from_currency_id(cls, currency: MaybeCurrency, **configs: Any) -> "Token":
        """Create a token from any value force_to_currency_name() accepts."""
        return cls.from_currency_name(force_to_currency_name(currency), **configs)

    @classmethod
    def from_tokens(cls, token0: "Token", token1: "Token") -> "Token":
        """
        Compose the dex-share token of a pool over two tokens.

        The legs are put in canonical order first, so from_tokens(a, b) and
        from_tokens(b, a) name the same pool. The share token takes decimals
        and ed from the lower-ordered leg.
        """
        first, second = cls._sort_pair(token0, token1)
        return cls(
            create_dex_share_name(first.name, second.name),
            decimals=first.decimals,
            ed=first.ed,
            chain=first.chain,
            type=TokenType.DEX_SHARE,
        )

    @classmethod
    def from_currencies(
        cls,
        currency0: MaybeCurrency,
        currency1: MaybeCurrency,
        decimals: Union[int, Tuple[int, int], None] = None,
    ) -> "Token":
        """Compose a dex-share token from two currencies, with one or per-leg decimals."""
        if isinstance(decimals, (list, tuple)):
            decimals0, decimals1 = decimals
        else:
            decimals0 = decimals1 = decimals
        token0 = cls.from_currency_id(currency0, decimals=decimals0)
        token1 = cls.from_currency_id(currency1, decimals=decimals1)
        return cls.from_tokens(token0, token1)

    # ------------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------------

    @staticmethod
    def _sort_pair(token0: "Token", token1: "Token") -> Tuple["Token", "Token"]:
        if currency_sort_key(token1.name) < currency_sort_key(token0.name):
            return token1, token0
        return token0, token1

    @staticmethod
    def sort_token_names(*names: str) -> List[str]:
        return sorted(names, key=currency_sort_key)

    @staticmethod
    def sort(*tokens: "Token") -> List["Token"]:
        """Sort tokens canonically; of tokens sharing a name, the last one given is kept."""
        by_name: Dict[str, Token] = {}
        for token in tokens:
            by_name[token.name] = token
        return [by_name[name] for name in sorted(by_name, key=currency_sort_key)]

    @staticmethod
    def sort_currencies(*currencies: MaybeCurrency) -> List[MaybeCurrency]:
        """Sort any currency values canonically by resolved name; the last of equal names wins."""
        by_name: Dict[str, MaybeCurrency] = {}
        for currency in currencies:
            by_name[force_to_currency_name(currency)] = currency
        return [by_name[name] for name in sorted(by_name, key=currency_sort_key)]

    # ------------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------------

    def to_chain_data(self) -> CurrencyObject:
        return get_currency_object(self.name)

    def to_currency_id(self, api: ChainApi) -> Any:
        try:
            return api.create_type(CURRENCY_ID_TYPE, self.to_chain_data())
        except Exception as exc:
            raise ConvertToCurrencyIdFailed(self) from exc

    def to_trading_pair(self, api: ChainApi) -> Any:
        """Wire trading pair of a dex-share token's two legs."""
        if not self.is_dex_share:
            raise ValueError(f"{self.name} is not a dex share")
        legs = [get_currency_object(leg) for leg in unzip_dex_share_name(self.name)]
        try:
            return api.create_type(TRADING_PAIR_TYPE, legs)
        except Exception as exc:
            raise ConvertToCurrencyIdFailed(self) from exc

    def to_dex_share(self, api: ChainApi) -> Any:
        if not self.is_dex_share:
            raise ValueError(f"{self.name} is not a dex share")
        try:
            return api.create_type(DEX_SHARE_TYPE, self.to_chain_data())
        except Exception as exc:
            raise ConvertToCurrencyIdFailed(self) from exc

    def to_token_symbol(self, api: ChainApi) -> Any:
        if not self.is_token_symbol:
            raise ValueError(f"{self.name} is not a token symbol")
        try:
            return api.create_type(TOKEN_SYMBOL_TYPE, self.name)
        except Exception as exc:
            raise ConvertToCurrencyIdFailed(self) from exc

    # ------------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------------

    def clone(self, **overrides: Any) -> "Token":
        return replace(self, **overrides)

    def is_equal(self, target: "Token", compare: Optional[Callable[["Token", "Token"], bool]] = None) -> bool:
        if compare is not None:
            return compare(self, target)
        return self.name == target.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name


# Mapping from canonical name to Token; replaced wholesale, never mutated.
TokenRecord = Dict[str, Token]
