"""
test_token_list.py - Unit tests for building the token record

Tests:
- Registry assets become tokens with decimals and ed from metadata
- Native chain tokens win over registry metadata
- Trading pairs: enabled only, both legs known, canonical share names
- Canonical record order
"""

import logging

from ledger_sdk import (
    Token, TokenType, FixedPointNumber,
    AssetMetadata, TradingPairStatus, create_token_list, create_dex_share_name,
)


FP = FixedPointNumber


def basic(*names):
    return {name: Token.from_currency_name(name, decimals=18, ed="0.1") for name in names}


def pair(name0, name1, enabled=True):
    return TradingPairStatus(pair=({"Token": name0}, {"Token": name1}), enabled=enabled)


class TestRegistryAssets:
    """Tests for tokens built from asset metadata."""

    def test_metadata_token(self):
        metadata = AssetMetadata(
            currency={"Erc20": "0xdead"}, name="Bridged USDC", symbol="USDC", decimals=6, minimal_balance=1000,
        )
        record = create_token_list({}, [], [metadata], chain="Setheum Mainnet")
        token = record["erc20://0xdead"]
        assert token.type is TokenType.ERC20
        assert token.decimals == 6
        assert token.ed == FP("0.001")
        assert token.symbol == "USDC"
        assert token.display == "Bridged USDC"
        assert token.chain == "Setheum Mainnet"

    def test_chain_token_wins(self):
        metadata = AssetMetadata(currency={"Token": "SETM"}, name="Other", symbol="X", decimals=6)
        record = create_token_list(basic("SETM"), [], [metadata])
        assert record["SETM"].decimals == 18


class TestTradingPairs:
    """Tests for dex-share tokens derived from trading pairs."""

    def test_enabled_pair(self):
        record = create_token_list(basic("SETM", "SERP"), [pair("SERP", "SETM")])
        share = record["lp://SETM/SERP"]
        assert share.is_dex_share
        assert share.decimals == 18

    def test_disabled_pair_skipped(self):
        record = create_token_list(basic("SETM", "SERP"), [pair("SETM", "SERP", enabled=False)])
        assert "lp://SETM/SERP" not in record

    def test_unknown_leg_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ledger_sdk.token_list"):
            record = create_token_list(basic("SETM"), [pair("SETM", "HELP")])
        assert list(record) == ["SETM"]
        assert "unknown currency" in caplog.text

    def test_malformed_pair_skipped(self, caplog):
        status = TradingPairStatus(pair=({"Token": "SETM"}, 42))
        with caplog.at_level(logging.WARNING, logger="ledger_sdk.token_list"):
            record = create_token_list(basic("SETM"), [status])
        assert list(record) == ["SETM"]
        assert "malformed" in caplog.text

    def test_share_of_registry_asset(self):
        metadata = AssetMetadata(currency={"Erc20": "0xdead"}, name="USDC", symbol="USDC", decimals=6)
        record = create_token_list(basic("SETM"), [TradingPairStatus(pair=({"Token": "SETM"}, {"Erc20": "0xdead"}))], [metadata])
        assert create_dex_share_name("SETM", "erc20://0xdead") in record


class TestOrdering:
    """Tests for canonical record order."""

    def test_kind_then_symbol_order(self):
        record = create_token_list(
            basic("SETUSD", "DNAR", "SETM", "SERP"),
            [pair("SETUSD", "SETM"), pair("SERP", "SETM")],
        )
        assert list(record) == [
            "SETM", "SERP", "DNAR", "SETUSD",
            "lp://SETM/SERP", "lp://SETM/SETUSD",
        ]

    def test_fresh_record_each_call(self):
        tokens = basic("SETM")
        first = create_token_list(tokens, [])
        second = create_token_list(tokens, [])
        assert first == second
        assert first is not second
