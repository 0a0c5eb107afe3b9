"""
currency.py - Currency identity codec

Every currency is addressed by a canonical name string so it can be passed
around, compared and used as a dictionary key:

    { Token: SETM }                                  -> SETM
    { DexShare: [{ Token: SETM }, { Token: SERP }] } -> lp://SETM/SERP
    { Erc20: 0x0000...0401 }                         -> erc20://0x0000...0401

Names nest. Each dex-share leg is percent-encoded, so a leg that is itself a
dex-share name keeps its own '/' out of the outer split:

    lp://lp%3A%2F%2FSETM%2FSERP/DNAR
        -> { DexShare: [{ DexShare: [{ Token: SETM }, { Token: SERP }] }, { Token: DNAR }] }

The tagged form is modelled by Basic / DexShare / Erc20 below. parse_currency_name()
and CurrencyIdentity.name are the two halves of the codec; everything else
in this module is built on them.
"""

from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Any, Dict, Mapping, Sequence, Tuple, Union, TYPE_CHECKING
from urllib.parse import quote, unquote

from .core import (
    ChainApi, CurrencyIdLike, TokenType,
    CURRENCY_ID_TYPE,
    NotDexShareName, ConvertToCurrencyIdFailed, ConvertToCurrencyNameFailed,
)

if TYPE_CHECKING:
    from .token import Token


DEX_SHARE_PREFIX = "lp://"
ERC20_PREFIX = "erc20://"
SCHEME_SEPARATOR = "//"

# Characters encodeURIComponent leaves alone; everything else is escaped.
_URI_COMPONENT_SAFE = "-_.!~*'()"

_DEX_SHARE_PATTERN = re.compile(r"^lp://([^/]*)/([^/]*)$")

# Known basic symbols in on-chain TokenSymbol order. Pair legs are sorted by
# this order so a pool gets one name; unknown symbols sort after these.
TOKEN_SORT_ORDER: Tuple[str, ...] = ("SETM", "SERP", "DNAR", "HELP", "SETR", "SETUSD")

# Structured (chain data) form, e.g. {"DexShare": [{"Token": "SETM"}, {"Token": "SERP"}]}
CurrencyObject = Dict[str, Any]


# ============================================================================
# TAGGED IDENTITY
# ============================================================================

@dataclass(frozen=True, slots=True)
class Basic:
    """A plain token symbol."""
    symbol: str

    @property
    def name(self) -> str:
        return self.symbol

    @property
    def type(self) -> TokenType:
        return TokenType.BASIC

    def to_chain_data(self) -> CurrencyObject:
        return {"Token": self.symbol}


@dataclass(frozen=True, slots=True)
class DexShare:
    """A pool share over two legs, kept in the order the caller built them."""
    leg0: "CurrencyIdentity"
    leg1: "CurrencyIdentity"

    @property
    def name(self) -> str:
        return create_dex_share_name(self.leg0.name, self.leg1.name)

    @property
    def type(self) -> TokenType:
        return TokenType.DEX_SHARE

    def to_chain_data(self) -> CurrencyObject:
        return {"DexShare": [self.leg0.to_chain_data(), self.leg1.to_chain_data()]}


@dataclass(frozen=True, slots=True)
class Erc20:
    """Reserved: a token addressed by contract address."""
    address: str

    @property
    def name(self) -> str:
        return f"{ERC20_PREFIX}{self.address}"

    @property
    def type(self) -> TokenType:
        return TokenType.ERC20

    def to_chain_data(self) -> CurrencyObject:
        return {"Erc20": self.address}


CurrencyIdentity = Union[Basic, DexShare, Erc20]

# Anything force_to_currency_name() understands.
MaybeCurrency = Union[str, Sequence[Any], "Token", Basic, DexShare, Erc20, Mapping[str, Any], CurrencyIdLike]


# ============================================================================
# NAME PREDICATES
# ============================================================================

def is_basic_name(name: str) -> bool:
    return SCHEME_SEPARATOR not in name


def is_dex_share_name(name: str) -> bool:
    return name.startswith(DEX_SHARE_PREFIX)


def is_erc20_name(name: str) -> bool:
    return name.startswith(ERC20_PREFIX)


def get_currency_type_by_name(name: str) -> TokenType:
    """Classify a name by its scheme prefix; anything without a known scheme is BASIC."""
    if is_dex_share_name(name):
        return TokenType.DEX_SHARE
    if is_erc20_name(name):
        return TokenType.ERC20
    return TokenType.BASIC


# ============================================================================
# DEX SHARE NAMES
# ============================================================================

def create_dex_share_name(name0: str, name1: str) -> str:
    """Join two leg names into lp://<leg0>/<leg1>, percent-encoding each leg."""
    return f"{DEX_SHARE_PREFIX}{quote(name0, safe=_URI_COMPONENT_SAFE)}/{quote(name1, safe=_URI_COMPONENT_SAFE)}"


def unzip_dex_share_name(name: str) -> Tuple[str, str]:
    """
    Split a dex-share name into its two leg names, e.g. lp://SETM/SERP -> (SETM, SERP).

    Only the top level is decoded; a leg may itself be a dex-share name.

    Raises:
        NotDexShareName: If `name` is not exactly lp://A/B
    """
    if not isinstance(name, str) or not is_dex_share_name(name):
        raise NotDexShareName(name)

    match = _DEX_SHARE_PATTERN.match(name)
    if match is None:
        raise NotDexShareName(name)

    try:
        return unquote(match.group(1), errors="strict"), unquote(match.group(2), errors="strict")
    except UnicodeDecodeError as exc:
        raise NotDexShareName(name) from exc


# ============================================================================
# NAME <-> IDENTITY
# ============================================================================

def parse_currency_name(name: str) -> CurrencyIdentity:
    """Decode a name into its tagged identity, recursing through dex-share legs."""
    if is_dex_share_name(name):
        name0, name1 = unzip_dex_share_name(name)
        return DexShare(parse_currency_name(name0), parse_currency_name(name1))
    if is_erc20_name(name):
        return Erc20(name[len(ERC20_PREFIX):])
    return Basic(name)


def get_currency_object(name: str) -> CurrencyObject:
    """Structured chain-data form of a name, the value create_type() expects."""
    return parse_currency_name(name).to_chain_data()


def _name_from_mapping(target: Mapping[str, Any]) -> str:
    if len(target) != 1:
        raise ValueError(f"expected a single-key currency object, got {dict(target)!r}")
    (tag, value), = target.items()
    if tag == "Token":
        return str(value)
    if tag == "DexShare":
        leg0, leg1 = value
        return create_dex_share_name(_force_name(leg0), _force_name(leg1))
    if tag == "Erc20":
        return Erc20(str(value)).name
    raise ValueError(f"unknown currency tag {tag!r}")


def _force_name(target: Any) -> str:
    # Local import: token.py depends on this module.
    from .token import Token

    if isinstance(target, str):
        return target
    if isinstance(target, Token):
        return target.name
    if isinstance(target, (Basic, DexShare, Erc20)):
        return target.name
    if isinstance(target, Mapping):
        return _name_from_mapping(target)
    if isinstance(target, (list, tuple)):
        leg0, leg1 = target
        return create_dex_share_name(_force_name(leg0), _force_name(leg1))
    if isinstance(target, CurrencyIdLike):
        if target.is_token:
            return str(target.as_token)
        if target.is_dex_share:
            leg0, leg1 = target.as_dex_share
            return create_dex_share_name(_force_name(leg0), _force_name(leg1))
        if target.is_erc20:
            return Erc20(str(target.as_erc20)).name
    raise TypeError(f"unsupported currency value {type(target).__name__}")


def force_to_currency_name(target: MaybeCurrency) -> str:
    """
    Normalise any supported currency value into its canonical name.

    Accepts a name, a [currency, currency] pair, a Token, a tagged identity,
    the structured chain-data dict, or the ledger's native tagged value.

    Raises:
        ConvertToCurrencyNameFailed: With `origin` set to `target` itself
    """
    try:
        return _force_name(target)
    except (TypeError, ValueError, AttributeError, NotDexShareName) as exc:
        raise ConvertToCurrencyNameFailed(target) from exc


def force_to_currency_id(api: ChainApi, target: MaybeCurrency) -> Any:
    """
    Build the ledger's currency wire value for `target`.

    Raises:
        ConvertToCurrencyIdFailed: With `origin` set to `target` itself
    """
    try:
        name = force_to_currency_name(target)
        return api.create_type(CURRENCY_ID_TYPE, get_currency_object(name))
    except Exception as exc:
        raise ConvertToCurrencyIdFailed(target) from exc


def force_to_token_symbol_currency_id(api: ChainApi, target: MaybeCurrency) -> Any:
    return force_to_currency_id(api, str(target))


def force_to_dex_share_currency_id(api: ChainApi, target: MaybeCurrency) -> Any:
    if isinstance(target, (list, tuple)):
        name0, name1 = target
        return force_to_currency_id(api, create_dex_share_name(str(name0), str(name1)))
    return force_to_currency_id(api, target)


# ============================================================================
# CANONICAL ORDERING
# ============================================================================

_KIND_RANK = {TokenType.BASIC: 0, TokenType.DEX_SHARE: 1, TokenType.ERC20: 2}


def currency_sort_key(name: str) -> Tuple[Any, ...]:
    """
    Total-order key over currency names.

    Kind first (basic < dex share < erc20, the on-chain enum order), then basic
    symbols by TOKEN_SORT_ORDER with unknown symbols after, then the name
    itself. Dex-share names compare leg by leg.
    """
    kind = get_currency_type_by_name(name)
    if kind is TokenType.DEX_SHARE:
        name0, name1 = unzip_dex_share_name(name)
        return (_KIND_RANK[kind], currency_sort_key(name0), currency_sort_key(name1))
    if kind is TokenType.ERC20:
        return (_KIND_RANK[kind], name)
    try:
        position = TOKEN_SORT_ORDER.index(name)
    except ValueError:
        position = len(TOKEN_SORT_ORDER)
    return (_KIND_RANK[kind], position, name)

