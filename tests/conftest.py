"""
conftest.py - Shared pytest fixtures for ledger SDK tests

Provides common fixtures used across unit and conformance tests:
- Tokens (SETM 18 decimals, SERP 12 decimals)
- A fake ledger client with the SETM/SERP pool enabled
- A ready wallet over that client
"""

import pytest
from decimal import Decimal

from ledger_sdk import (
    Token, Wallet, WalletSettings, FixedPointNumber,
    StorageKey, TradingPairStatus,
)

from tests.fake_api import FakeApi


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def enable_pair(api: FakeApi, *pairs) -> None:
    """Publish the given (name0, name1) pairs as enabled trading pairs."""
    api.push(
        StorageKey.TRADING_PAIRS,
        value=[
            TradingPairStatus(pair=({"Token": name0}, {"Token": name1}), enabled=True)
            for name0, name1 in pairs
        ],
    )


def fp(value) -> FixedPointNumber:
    """Shorthand for FixedPointNumber from a literal."""
    return FixedPointNumber(value)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def setm() -> Token:
    return Token.from_currency_name("SETM", decimals=18, ed=Decimal("0.1"))


@pytest.fixture
def serp() -> Token:
    return Token.from_currency_name("SERP", decimals=12, ed=Decimal("0.01"))


@pytest.fixture
def settings() -> WalletSettings:
    return WalletSettings(default_decimals=18, fee_factor=Decimal("1.2"))


@pytest.fixture
def api() -> FakeApi:
    """Fake ledger with SETM native, SERP and DNAR, and the SETM/SERP pool enabled."""
    fake = FakeApi()
    enable_pair(fake, ("SETM", "SERP"))
    return fake


@pytest.fixture
def wallet(api, settings) -> Wallet:
    return Wallet(api, settings=settings)
