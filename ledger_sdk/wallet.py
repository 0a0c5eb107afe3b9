"""
wallet.py - Reactive token registry

The Wallet is the SDK's entry point. It owns the live token record and
derives continuously updated views from ledger storage:

    tokens, token        - the token record, optionally filtered by type
    balance              - free / locked / reserved / available of one account
    issuance             - total issuance of one token
    suggest_input        - largest amount an account can transfer
    price                - market or oracle price, dex shares aggregated

Every view has a continuous form (subscribe_*, a shared Stream) and a
one-shot form (get_*, awaiting the next value of the same stream).

Ready gates:
    1. Constants (runtime chain, native currency) are read in the constructor.
    2. The token record is built from trading pairs and asset metadata. Views
       wait for it; get_preset_tokens() raises SDKNotReady until it exists.

The token record is only ever replaced as a whole, by one update path.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Hashable, Optional, Union

from .balance import BalanceData, MaxAvailableBalanceParams, get_max_available_balance
from .config import (
    CHAIN_DEFAULT_DECIMALS, DEFAULT_TOKEN_LIST, DEFAULT_TOKEN_PRICE_FETCH_SOURCE, PRESET_TOKEN_CONSTANTS,
    TokenListConfig, TokenPriceFetchSource, WalletSettings, get_chain_type,
)
from .core import (
    ChainApi, PriceProviderType, TokenType,
    CurrencyNotFound, SDKNotReady,
)
from .currency import MaybeCurrency, force_to_currency_name, is_dex_share_name, unzip_dex_share_name
from .fixed_point import FixedPointNumber
from .liquidity import Liquidity
from .pricing_source import (
    MarketPriceProvider, OraclePriceProvider, PriceProvider,
    subscribe_dex_share_token_price,
)
from .storages import AccountInfo, Storages, TokenAccountData
from .streams import BehaviorSubject, Stream, StreamCache, Subscription, combine_latest, of
from .token import Token, TokenRecord
from .token_list import create_token_list

logger = logging.getLogger(__name__)

# A provider mapped to None is disabled; prices it would serve read as zero.
PriceProviders = Dict[PriceProviderType, Optional[PriceProvider]]


@dataclass(frozen=True, slots=True)
class WalletConsts:
    runtime_chain: str
    native_currency: str


@dataclass(frozen=True, slots=True)
class PresetTokens:
    """
    Tokens with a fixed role on the chain.

    Roles other than the native token are filled only when the runtime
    defines the matching constant.
    """
    native_token: Optional[Token]
    serp_token: Optional[Token] = None
    dinar_token: Optional[Token] = None
    help_token: Optional[Token] = None
    setter_token: Optional[Token] = None
    stable_token: Optional[Token] = None


class Wallet:
    """
    Token list, balance, issuance, transferable amount and price queries.

    Views are memoised by operation and canonical arguments: two observers of
    the balance of SETM for one address share one storage subscription,
    whether they asked with "SETM", {"Token": "SETM"} or a Token.

    Thread Safety:
        Not thread-safe. Pushes must arrive on one thread, one at a time.

    Example:
        wallet = Wallet(api)
        await wallet.is_ready()
        balance = await wallet.get_balance("SETM", address)
        subscription = wallet.subscribe_price("lp://SETM/SERP").subscribe(print)
    """

    def __init__(
        self,
        api: ChainApi,
        token_price_fetch_source: Optional[TokenPriceFetchSource] = None,
        price_providers: Optional[PriceProviders] = None,
        settings: Optional[WalletSettings] = None,
        token_list: Optional[TokenListConfig] = None,
    ):
        """
        Create the wallet and start building the token record.

        Args:
            api: Ledger client
            token_price_fetch_source: Preferred provider per (chain type, currency)
            price_providers: Providers replacing the default market/oracle ones
            settings: Wallet defaults (read from the environment when omitted)
            token_list: Preset token metadata for native chain tokens
        """
        self.api = api
        self.settings = settings if settings is not None else WalletSettings()
        self.token_list = token_list if token_list is not None else DEFAULT_TOKEN_LIST
        self.token_price_fetch_source = (
            token_price_fetch_source
            if token_price_fetch_source is not None
            else DEFAULT_TOKEN_PRICE_FETCH_SOURCE
        )

        self._tokens: BehaviorSubject[TokenRecord] = BehaviorSubject({})
        self._is_ready: BehaviorSubject[bool] = BehaviorSubject(False)
        self._views: StreamCache = StreamCache()

        # 1. constants
        self.consts = self._init_consts()
        self.storages = Storages(api, self.consts.native_currency)
        self.price_providers: PriceProviders = {
            PriceProviderType.MARKET: MarketPriceProvider(),
            PriceProviderType.ORACLE: OraclePriceProvider(api, self.storages),
        }
        if price_providers:
            self.price_providers.update(price_providers)
        self.liquidity = Liquidity(api, self)

        # 2. token record
        self._token_subscription = self._init_tokens()

    # ========================================================================
    # INITIALISATION
    # ========================================================================

    def _init_consts(self) -> WalletConsts:
        return WalletConsts(
            runtime_chain=str(self.api.runtime_chain),
            native_currency=str(self.api.chain_tokens[0]),
        )

    def _basic_tokens(self) -> TokenRecord:
        """
        Native chain tokens with preset metadata.

        Decimals come from the chain registry, then the preset token list, then
        the chain's default, then settings.default_decimals.
        """
        runtime_chain = self.consts.runtime_chain
        chain_decimals = list(self.api.chain_decimals)
        fallback = CHAIN_DEFAULT_DECIMALS.get(get_chain_type(runtime_chain), self.settings.default_decimals)
        tokens: TokenRecord = {}
        for i, symbol in enumerate(self.api.chain_tokens):
            symbol = str(symbol)
            config = self.token_list.get_token(symbol, runtime_chain)
            presets: Dict[str, Any] = {}
            decimals = fallback
            if config is not None:
                presets = {"ed": config.ed, "symbol": config.symbol, "display": config.display}
                if config.decimals is not None:
                    decimals = config.decimals
            if i < len(chain_decimals):
                decimals = chain_decimals[i]
            tokens[symbol] = Token(
                symbol,
                decimals=decimals,
                chain=runtime_chain,
                type=TokenType.BASIC,
                **presets,
            )
        return tokens

    def _init_tokens(self) -> Subscription:
        basic_tokens = self._basic_tokens()
        metadata = combine_latest({
            "trading_pairs": self.storages.trading_pairs(),
            "asset_metadatas": self.storages.asset_metadatas(),
        })

        def on_next(latest: Dict[str, Any]) -> None:
            record = create_token_list(
                basic_tokens,
                latest["trading_pairs"],
                latest["asset_metadatas"],
                self.consts.runtime_chain,
            )
            logger.debug("token record rebuilt with %d tokens", len(record))
            self._tokens.next(record)
            if not self._is_ready.value:
                self._is_ready.next(True)

        def on_error(exc: BaseException) -> None:
            logger.error("token record storage failed: %s", exc)
            try:
                self._tokens.error(exc)
            finally:
                self._is_ready.error(exc)

        return metadata.subscribe(on_next, on_error)

    def close(self) -> None:
        """Stop following trading pair and asset metadata storage."""
        self._token_subscription.unsubscribe()

    def _view(self, key: Hashable, factory: Callable[[], Stream[Any]]) -> Stream[Any]:
        return self._views.get(key, factory)

    # ========================================================================
    # READINESS
    # ========================================================================

    async def is_ready(self) -> bool:
        """Wait until the token record has been built once."""
        return await self._is_ready.filter(bool).first()

    @property
    def is_ready_stream(self) -> Stream[bool]:
        return self._is_ready

    # ========================================================================
    # TOKENS
    # ========================================================================

    def subscribe_tokens(self, type: Optional[TokenType] = None) -> Stream[TokenRecord]:
        """Token record, optionally restricted to one token type."""
        def select(record: TokenRecord) -> TokenRecord:
            if type is None:
                return record
            return {name: token for name, token in record.items() if token.type is type}

        return self._view(
            ("tokens", type),
            lambda: self._is_ready.filter(bool).switch_map(lambda _: self._tokens.map(select)),
        )

    async def get_tokens(self, type: Optional[TokenType] = None) -> TokenRecord:
        return await self.subscribe_tokens(type).first()

    def subscribe_token(self, target: MaybeCurrency) -> Stream[Token]:
        """
        One token of the record.

        Raises:
            ConvertToCurrencyNameFailed: Immediately, if `target` is not a currency
        Errors the stream with:
            CurrencyNotFound: If the record has no token with that name
        """
        name = force_to_currency_name(target)

        def lookup(record: TokenRecord) -> Token:
            token = record.get(name)
            if token is None:
                raise CurrencyNotFound(name)
            return token

        return self._view(("token", name), lambda: self.subscribe_tokens().map(lookup))

    async def get_token(self, target: MaybeCurrency) -> Token:
        return await self.subscribe_token(target).first()

    def get_preset_tokens(self) -> PresetTokens:
        """
        Snapshot of the role tokens.

        Raises:
            SDKNotReady: If the token record has not been built yet
        """
        if not self._is_ready.value:
            raise SDKNotReady("wallet")

        tokens = self._tokens.value
        roles: Dict[str, Optional[Token]] = {}
        for role, (section, constant) in PRESET_TOKEN_CONSTANTS.items():
            value = self.api.get_constant(section, constant)
            if value is not None:
                roles[role] = tokens.get(force_to_currency_name(value))

        return PresetTokens(native_token=tokens.get(self.consts.native_currency), **roles)

    # ========================================================================
    # BALANCES
    # ========================================================================

    def _is_native(self, token: Token) -> bool:
        return token.name == self.consts.native_currency

    def subscribe_balance(self, target: MaybeCurrency, address: str) -> Stream[BalanceData]:
        """Balance of `address` in one token."""
        name = force_to_currency_name(target)

        def native(info: AccountInfo, token: Token) -> BalanceData:
            return BalanceData.create(
                token,
                free=FixedPointNumber.from_inner(info.free, token.decimals),
                locked=FixedPointNumber.from_inner(info.frozen, token.decimals),
                reserved=FixedPointNumber.from_inner(info.reserved, token.decimals),
            )

        def non_native(data: TokenAccountData, token: Token) -> BalanceData:
            return BalanceData.create(
                token,
                free=FixedPointNumber.from_inner(data.free, token.decimals),
                locked=FixedPointNumber.from_inner(data.frozen, token.decimals),
                reserved=FixedPointNumber.from_inner(data.reserved, token.decimals),
            )

        def balance(token: Token) -> Stream[BalanceData]:
            if self._is_native(token):
                return self.storages.native_balance(address).map(lambda info: native(info, token))
            return self.storages.non_native_balance(token, address).map(lambda data: non_native(data, token))

        return self._view(("balance", name, address), lambda: self.subscribe_token(name).switch_map(balance))

    async def get_balance(self, target: MaybeCurrency, address: str) -> BalanceData:
        return await self.subscribe_balance(target, address).first()

    def subscribe_issuance(self, target: MaybeCurrency) -> Stream[FixedPointNumber]:
        name = force_to_currency_name(target)

        def issuance(token: Token) -> Stream[FixedPointNumber]:
            return self.storages.issuance(token).map(
                lambda raw: FixedPointNumber.from_inner(raw, token.decimals)
            )

        return self._view(("issuance", name), lambda: self.subscribe_token(name).switch_map(issuance))

    async def get_issuance(self, target: MaybeCurrency) -> FixedPointNumber:
        return await self.subscribe_issuance(target).first()

    def subscribe_suggest_input(
        self,
        target: MaybeCurrency,
        address: str,
        is_allow_death: bool,
        partial_fee: Union[int, str],
        fee_factor: Union[float, str, None] = None,
    ) -> Stream[FixedPointNumber]:
        """
        Largest amount of `target` that `address` can transfer.

        Args:
            target: Token to transfer
            address: Sending account
            is_allow_death: Whether the transfer may reap the account
            partial_fee: Estimated fee as a raw native-token integer
            fee_factor: Safety multiplier on the fee (default: settings.fee_factor)
        """
        name = force_to_currency_name(target)
        factor = FixedPointNumber(self.settings.fee_factor if fee_factor is None else fee_factor)
        partial_fee = int(partial_fee)

        def params(token: Token, native_token: Token, info: AccountInfo,
                   target_data: Optional[TokenAccountData]) -> MaxAvailableBalanceParams:
            is_native = target_data is None
            return MaxAvailableBalanceParams(
                is_native_token=is_native,
                is_allow_death=is_allow_death,
                providers=info.providers,
                consumers=info.consumers,
                native_free_balance=FixedPointNumber.from_inner(info.free, native_token.decimals),
                native_locked_balance=FixedPointNumber.from_inner(info.frozen, native_token.decimals),
                target_free_balance=(
                    FixedPointNumber.ZERO if is_native
                    else FixedPointNumber.from_inner(target_data.free, token.decimals)
                ),
                target_locked_balance=(
                    FixedPointNumber.ZERO if is_native
                    else FixedPointNumber.from_inner(target_data.frozen, token.decimals)
                ),
                ed=token.ed,
                fee=FixedPointNumber.from_inner(partial_fee, native_token.decimals).mul(factor),
            )

        def suggest(tokens: Dict[str, Token]) -> Stream[FixedPointNumber]:
            token, native_token = tokens["token"], tokens["native_token"]
            account = self.storages.native_balance(address)
            if self._is_native(token):
                return account.map(
                    lambda info: get_max_available_balance(params(token, native_token, info, None))
                )
            return combine_latest({
                "info": account,
                "target": self.storages.non_native_balance(token, address),
            }).map(
                lambda latest: get_max_available_balance(
                    params(token, native_token, latest["info"], latest["target"])
                )
            )

        def build() -> Stream[FixedPointNumber]:
            return combine_latest({
                "token": self.subscribe_token(name),
                "native_token": self.subscribe_token(self.consts.native_currency),
            }).switch_map(suggest)

        key = ("suggest_input", name, address, bool(is_allow_death), partial_fee, factor)
        return self._view(key, build)

    async def get_suggest_input(
        self,
        target: MaybeCurrency,
        address: str,
        is_allow_death: bool,
        partial_fee: Union[int, str],
        fee_factor: Union[float, str, None] = None,
    ) -> FixedPointNumber:
        stream = self.subscribe_suggest_input(target, address, is_allow_death, partial_fee, fee_factor)
        return await stream.first()

    # ========================================================================
    # PRICES
    # ========================================================================

    def _resolve_price_type(self, name: str, type: Optional[PriceProviderType]) -> PriceProviderType:
        if type is not None:
            return type
        chain_type = get_chain_type(self.consts.runtime_chain)
        preferred = self.token_price_fetch_source.get(chain_type, {}).get(name)
        return preferred or self.settings.default_price_provider

    def subscribe_price(self, target: MaybeCurrency, type: Optional[PriceProviderType] = None) -> Stream[FixedPointNumber]:
        """
        Price of one token.

        Dex-share prices are aggregated from the leg prices and the pool. With
        no provider configured for the resolved type the price is zero.
        """
        name = force_to_currency_name(target)
        provider_type = self._resolve_price_type(name, type)
        provider = self.price_providers.get(provider_type)

        def build() -> Stream[FixedPointNumber]:
            if provider is None:
                logger.debug("no %s price provider for %s, pricing at zero", provider_type.value, name)
                return of(FixedPointNumber.ZERO)
            if is_dex_share_name(name):
                leg0, leg1 = unzip_dex_share_name(name)
                return subscribe_dex_share_token_price(
                    self.subscribe_price(leg0),
                    self.subscribe_price(leg1),
                    self.liquidity.subscribe_pool_detail(name),
                )
            return self.subscribe_token(name).switch_map(lambda token: provider.subscribe(token.name))

        return self._view(("price", name, provider_type), build)

    async def get_price(self, target: MaybeCurrency, type: Optional[PriceProviderType] = None) -> FixedPointNumber:
        return await self.subscribe_price(target, type).first()
