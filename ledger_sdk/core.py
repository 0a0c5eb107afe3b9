"""
Core types, protocols and exceptions for the ledger SDK.

This module provides the foundational pieces shared by every other module:
1. Enums: TokenType, PriceProviderType, ChainType, StorageKey
2. Protocols: ChainApi for the external ledger client, CurrencyIdLike for
   the ledger's native tagged currency values
3. Exceptions: LedgerSdkError and the codec/registry error taxonomy
4. Constants: wire type tags and default decimals

Nothing in this module talks to a chain. The ChainApi protocol describes the
collaborator that does.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Optional, Protocol, Sequence, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .streams import Stream


# ============================================================================
# CONSTANTS
# ============================================================================

# Decimals assumed for a token whose metadata does not say otherwise.
DEFAULT_DECIMALS = 18

# Wire type tags handed to ChainApi.create_type().
CURRENCY_ID_TYPE = "CurrencyId"
TRADING_PAIR_TYPE = "TradingPair"
TOKEN_SYMBOL_TYPE = "TokenSymbol"
DEX_SHARE_TYPE = "DexShare"

# Oracle prices are stored as FixedU128 values with 18 fractional digits.
ORACLE_PRICE_DECIMALS = 18


# ============================================================================
# ENUMS
# ============================================================================

class TokenType(Enum):
    """
    Kind of a currency identity.

    BASIC: a plain on-chain token symbol (e.g. "SETM").
    DEX_SHARE: a liquidity-pool share over two other currencies.
    ERC20: a contract-address token; reserved, detected by the erc20:// scheme.
    """
    BASIC = "basic"
    DEX_SHARE = "dex_share"
    ERC20 = "erc20"


class PriceProviderType(Enum):
    """Where a price comes from."""
    MARKET = "market"   # off-chain market feed
    ORACLE = "oracle"   # on-chain oracle feed


class ChainType(Enum):
    SETHEUM = "SETHEUM"


class StorageKey(Enum):
    """
    Storage entries the SDK reads through ChainApi.read().

    The value is the "section.entry" path on the ledger. Arguments for each key:
        TRADING_PAIRS          -> ()
        ASSET_METADATAS        -> ()
        NATIVE_ACCOUNT         -> (address,)
        TOKEN_ACCOUNT          -> (address, currency wire value)
        NATIVE_ISSUANCE        -> ()
        TOKEN_ISSUANCE         -> (currency wire value,)
        LIQUIDITY_POOL         -> (trading pair wire value,)
        ORACLE_PRICE           -> (currency wire value,)
    """
    TRADING_PAIRS = "dex.tradingPairStatuses"
    ASSET_METADATAS = "assetRegistry.assetMetadatas"
    NATIVE_ACCOUNT = "system.account"
    TOKEN_ACCOUNT = "tokens.accounts"
    NATIVE_ISSUANCE = "balances.totalIssuance"
    TOKEN_ISSUANCE = "tokens.totalIssuance"
    LIQUIDITY_POOL = "dex.liquidityPool"
    ORACLE_PRICE = "setheumOracle.values"


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class CurrencyIdLike(Protocol):
    """
    Shape of the ledger client's native tagged currency value.

    Only the accessors the codec needs are listed. `as_dex_share` returns a
    pair of CurrencyIdLike values.
    """

    @property
    def is_token(self) -> bool: ...

    @property
    def as_token(self) -> Any: ...

    @property
    def is_dex_share(self) -> bool: ...

    @property
    def as_dex_share(self) -> Sequence[Any]: ...

    @property
    def is_erc20(self) -> bool: ...

    @property
    def as_erc20(self) -> Any: ...


@runtime_checkable
class ChainApi(Protocol):
    """
    The external ledger client consumed by the SDK.

    Implementations expose registry constants, continuous storage reads and the
    wire constructor. Every stream returned by read() must emit an initial
    value promptly and then one value per relevant chain state change, in
    chain order.
    """

    @property
    def runtime_chain(self) -> str:
        """Human-readable chain label (e.g. "Setheum Mainnet")."""
        ...

    @property
    def chain_tokens(self) -> Sequence[str]:
        """Native chain token symbols; the first one is the native currency."""
        ...

    @property
    def chain_decimals(self) -> Sequence[int]:
        """Decimals of chain_tokens, index-aligned."""
        ...

    def read(self, key: StorageKey, *args: Any) -> "Stream[Any]":
        """Continuous stream of raw storage values for `key` and `args`."""
        ...

    def create_type(self, type_tag: str, value: Any) -> Any:
        """Build a wire value; raises if `value` does not fit `type_tag`."""
        ...

    def get_constant(self, section: str, name: str) -> Optional[Any]:
        """Runtime constant, or None when the runtime does not define it."""
        ...


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerSdkError(Exception):
    """Base exception for all SDK errors."""
    pass


class NotDexShareName(LedgerSdkError):
    """Raised when a name does not have the exact lp://A/B shape."""

    def __init__(self, origin: str):
        super().__init__(f"{origin} is not dex share name")
        self.origin = origin


class ConvertToCurrencyNameFailed(LedgerSdkError):
    """Raised when a value cannot be normalised into a currency name."""

    def __init__(self, origin: Any):
        super().__init__(f"convert to currency name failed {origin!s}")
        self.origin = origin


class ConvertToCurrencyIdFailed(LedgerSdkError):
    """Raised when a value cannot be turned into the ledger's currency wire value."""

    def __init__(self, origin: Any):
        super().__init__(f"convert to currency id failed {origin!s}")
        self.origin = origin


class CurrencyNotFound(LedgerSdkError):
    """Raised when a well-formed currency name is unknown to the current token record."""

    def __init__(self, name: str):
        super().__init__(f"can't find {name} currency in current network")
        self.name = name


class SDKNotReady(LedgerSdkError):
    """Raised when a snapshot query runs before the registry is ready."""

    def __init__(self, name: str):
        super().__init__(f"SDK {name} is not ready")
        self.name = name
