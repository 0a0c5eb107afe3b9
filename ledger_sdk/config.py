"""
config.py - SDK configuration

Static tables consumed by the wallet and a settings model that can be
overridden from the environment:

    WalletSettings                    - LEDGER_SDK_* environment overrides
    TokenListConfig                   - preset token metadata per chain
    CHAIN_DEFAULT_DECIMALS            - decimals assumed per chain type
    DEFAULT_TOKEN_PRICE_FETCH_SOURCE  - preferred price provider per (chain, currency)
    PRESET_TOKEN_CONSTANTS            - runtime constants naming each preset token role

Environment overrides:
    export LEDGER_SDK_FEE_FACTOR=1.5
    export LEDGER_SDK_DEFAULT_PRICE_PROVIDER=oracle
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core import ChainType, PriceProviderType, DEFAULT_DECIMALS


# ============================================================================
# SETTINGS
# ============================================================================

class WalletSettings(BaseSettings):
    """
    Wallet defaults.

    Environment overrides:
        LEDGER_SDK_DEFAULT_DECIMALS: Decimals for tokens without metadata (default: 18)
        LEDGER_SDK_FEE_FACTOR: Multiplier applied to the estimated fee (default: 1.2)
        LEDGER_SDK_DEFAULT_PRICE_PROVIDER: market or oracle (default: market)
    """

    default_decimals: int = Field(default=DEFAULT_DECIMALS, ge=0)
    fee_factor: Decimal = Field(default=Decimal("1.2"), ge=0)
    default_price_provider: PriceProviderType = PriceProviderType.MARKET

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_SDK_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_price_provider", mode="before")
    @classmethod
    def _lower_provider(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value


# ============================================================================
# TOKEN LIST
# ============================================================================

class TokenConfig(BaseModel):
    """Preset metadata for one token on one chain."""

    model_config = ConfigDict(frozen=True)

    name: str
    symbol: str
    display: str
    decimals: Optional[int] = None
    ed: Decimal = Decimal("0")
    chain: ChainType = ChainType.SETHEUM


class TokenListConfig(BaseModel):
    """Known tokens, looked up by name and runtime chain label."""

    tokens: List[TokenConfig] = Field(default_factory=list)

    def get_token(self, name: str, chain: str) -> Optional[TokenConfig]:
        chain_type = get_chain_type(chain)
        if chain_type is None:
            return None
        for token in self.tokens:
            if token.name == name and token.chain is chain_type:
                return token
        return None


DEFAULT_TOKEN_LIST = TokenListConfig(
    tokens=[
        TokenConfig(name="SETM", symbol="SETM", display="Setheum", decimals=18, ed=Decimal("0.1")),
        TokenConfig(name="SERP", symbol="SERP", display="Serp", decimals=18, ed=Decimal("0.1")),
        TokenConfig(name="DNAR", symbol="DNAR", display="Dinar", decimals=18, ed=Decimal("0.1")),
        TokenConfig(name="HELP", symbol="HELP", display="HighEnd LaunchPad", decimals=18, ed=Decimal("0.1")),
        TokenConfig(name="SETR", symbol="SETR", display="Setter", decimals=18, ed=Decimal("0.1")),
        TokenConfig(name="SETUSD", symbol="SETUSD", display="SetDollar", decimals=18, ed=Decimal("0.1")),
    ]
)


# ============================================================================
# CHAIN TABLES
# ============================================================================

CHAIN_DEFAULT_DECIMALS: Dict[ChainType, int] = {
    ChainType.SETHEUM: 18,
}

# chain type -> currency name -> preferred provider
TokenPriceFetchSource = Dict[ChainType, Dict[str, PriceProviderType]]

DEFAULT_TOKEN_PRICE_FETCH_SOURCE: TokenPriceFetchSource = {
    ChainType.SETHEUM: {
        "SETM": PriceProviderType.MARKET,
        "SERP": PriceProviderType.MARKET,
        "DNAR": PriceProviderType.MARKET,
        "HELP": PriceProviderType.MARKET,
        "SETR": PriceProviderType.ORACLE,
        "SETUSD": PriceProviderType.ORACLE,
    },
}

# preset role -> (constant section, constant name)
PRESET_TOKEN_CONSTANTS: Dict[str, Tuple[str, str]] = {
    "serp_token": ("serpTreasury", "getSerpCurrencyId"),
    "dinar_token": ("serpTreasury", "getDinarCurrencyId"),
    "help_token": ("serpTreasury", "getHelpCurrencyId"),
    "setter_token": ("serpTreasury", "setterCurrencyId"),
    "stable_token": ("serpTreasury", "getSetUSDId"),
}


def get_chain_type(runtime_chain: str) -> Optional[ChainType]:
    """Map a runtime chain label such as "Setheum Mainnet" to its ChainType."""
    if "setheum" in runtime_chain.lower():
        return ChainType.SETHEUM
    return None
