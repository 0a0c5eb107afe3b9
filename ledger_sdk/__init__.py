"""
ledger_sdk - Client-side data layer for a multi-asset ledger

Currency identities, token metadata, exact fixed-point amounts and a push-based
wallet that keeps token lists, balances, issuance and prices up to date.

Usage:
    from ledger_sdk import Wallet, Token, FixedPointNumber

    wallet = Wallet(api)
    await wallet.is_ready()

    setm = await wallet.get_token("SETM")
    serp = await wallet.get_token({"Token": "SERP"})
    pool = Token.from_tokens(setm, serp)              # lp://SETM/SERP

    balance = await wallet.get_balance(setm, address)
    print(balance.available.to_string())

    # Continuous view, shared with every other observer of the same key
    subscription = wallet.subscribe_price(pool).subscribe(print)
    subscription.unsubscribe()
"""

# Core types
from .core import (
    ChainApi,
    CurrencyIdLike,
    TokenType,
    PriceProviderType,
    ChainType,
    StorageKey,
    DEFAULT_DECIMALS,
    CURRENCY_ID_TYPE,
    TRADING_PAIR_TYPE,
    TOKEN_SYMBOL_TYPE,
    DEX_SHARE_TYPE,
    LedgerSdkError,
    NotDexShareName,
    ConvertToCurrencyNameFailed,
    ConvertToCurrencyIdFailed,
    CurrencyNotFound,
    SDKNotReady,
)

# Fixed point
from .fixed_point import FixedPointNumber

# Currency codec
from .currency import (
    Basic,
    DexShare,
    Erc20,
    CurrencyIdentity,
    MaybeCurrency,
    DEX_SHARE_PREFIX,
    ERC20_PREFIX,
    TOKEN_SORT_ORDER,
    is_basic_name,
    is_dex_share_name,
    is_erc20_name,
    get_currency_type_by_name,
    create_dex_share_name,
    unzip_dex_share_name,
    parse_currency_name,
    get_currency_object,
    force_to_currency_name,
    force_to_currency_id,
    force_to_token_symbol_currency_id,
    force_to_dex_share_currency_id,
    currency_sort_key,
)

# Tokens
from .token import Token, TokenRecord
from .token_list import create_token_list

# Balances
from .balance import (
    BalanceData,
    MaxAvailableBalanceParams,
    get_max_available_balance,
    must_keep_alive,
)

# Streams
from .streams import (
    Stream,
    Subscription,
    Subject,
    BehaviorSubject,
    ReplaySubject,
    SharedStream,
    StreamCache,
    combine_latest,
    of,
)

# Storage
from .storages import (
    Storages,
    AccountInfo,
    TokenAccountData,
    TradingPairStatus,
    AssetMetadata,
    LiquidityPoolReserves,
)

# Pricing
from .pricing_source import (
    PriceProvider,
    MarketPriceProvider,
    OraclePriceProvider,
    PoolDetail,
    compute_dex_share_price,
    subscribe_dex_share_token_price,
)
from .liquidity import Liquidity

# Configuration
from .config import (
    WalletSettings,
    TokenConfig,
    TokenListConfig,
    DEFAULT_TOKEN_LIST,
    CHAIN_DEFAULT_DECIMALS,
    DEFAULT_TOKEN_PRICE_FETCH_SOURCE,
    PRESET_TOKEN_CONSTANTS,
    get_chain_type,
)

# Wallet
from .wallet import Wallet, WalletConsts, PresetTokens

__all__ = [
    # Core
    'ChainApi', 'CurrencyIdLike', 'TokenType', 'PriceProviderType', 'ChainType', 'StorageKey',
    'DEFAULT_DECIMALS', 'CURRENCY_ID_TYPE', 'TRADING_PAIR_TYPE', 'TOKEN_SYMBOL_TYPE', 'DEX_SHARE_TYPE',
    'LedgerSdkError', 'NotDexShareName', 'ConvertToCurrencyNameFailed', 'ConvertToCurrencyIdFailed',
    'CurrencyNotFound', 'SDKNotReady',
    # Fixed point
    'FixedPointNumber',
    # Currency codec
    'Basic', 'DexShare', 'Erc20', 'CurrencyIdentity', 'MaybeCurrency',
    'DEX_SHARE_PREFIX', 'ERC20_PREFIX', 'TOKEN_SORT_ORDER',
    'is_basic_name', 'is_dex_share_name', 'is_erc20_name', 'get_currency_type_by_name',
    'create_dex_share_name', 'unzip_dex_share_name', 'parse_currency_name', 'get_currency_object',
    'force_to_currency_name', 'force_to_currency_id',
    'force_to_token_symbol_currency_id', 'force_to_dex_share_currency_id',
    'currency_sort_key',
    # Tokens
    'Token', 'TokenRecord', 'create_token_list',
    # Balances
    'BalanceData', 'MaxAvailableBalanceParams', 'get_max_available_balance', 'must_keep_alive',
    # Streams
    'Stream', 'Subscription', 'Subject', 'BehaviorSubject', 'ReplaySubject',
    'SharedStream', 'StreamCache', 'combine_latest', 'of',
    # Storage
    'Storages', 'AccountInfo', 'TokenAccountData', 'TradingPairStatus', 'AssetMetadata',
    'LiquidityPoolReserves',
    # Pricing
    'PriceProvider', 'MarketPriceProvider', 'OraclePriceProvider', 'PoolDetail',
    'compute_dex_share_price', 'subscribe_dex_share_token_price', 'Liquidity',
    # Configuration
    'WalletSettings', 'TokenConfig', 'TokenListConfig', 'DEFAULT_TOKEN_LIST',
    'CHAIN_DEFAULT_DECIMALS', 'DEFAULT_TOKEN_PRICE_FETCH_SOURCE', 'PRESET_TOKEN_CONSTANTS',
    'get_chain_type',
    # Wallet
    'Wallet', 'WalletConsts', 'PresetTokens',
]
