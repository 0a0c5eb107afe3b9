"""
test_currency.py - Unit tests for the currency identity codec

Tests:
- Name predicates and classification
- Dex-share name encoding / decoding, including nesting
- Structured (chain data) form
- force_to_currency_name over every accepted input shape
- force_to_currency_id and its error origin
- Canonical ordering key
"""

import pytest
from dataclasses import dataclass
from typing import Any, Tuple

from ledger_sdk import (
    Basic, DexShare, Erc20, Token, TokenType,
    NotDexShareName, ConvertToCurrencyNameFailed, ConvertToCurrencyIdFailed,
    is_basic_name, is_dex_share_name, is_erc20_name, get_currency_type_by_name,
    create_dex_share_name, unzip_dex_share_name, parse_currency_name, get_currency_object,
    force_to_currency_name, force_to_currency_id, force_to_dex_share_currency_id,
    force_to_token_symbol_currency_id, currency_sort_key,
)
from tests.fake_api import FakeApi


@dataclass
class NativeCurrency:
    """Duck-typed stand-in for the ledger client's tagged currency value."""
    is_token: bool = False
    as_token: Any = None
    is_dex_share: bool = False
    as_dex_share: Tuple[Any, Any] = ()
    is_erc20: bool = False
    as_erc20: Any = None


class TestPredicates:
    """Tests for name classification."""

    def test_basic_name(self):
        assert is_basic_name("SETM")
        assert not is_basic_name("lp://SETM/SERP")

    def test_dex_share_name(self):
        assert is_dex_share_name("lp://SETM/SERP")
        assert not is_dex_share_name("SETM")

    def test_erc20_name(self):
        assert is_erc20_name("erc20://0x0000000000000000000000000000000000000401")

    def test_classify(self):
        assert get_currency_type_by_name("SETM") is TokenType.BASIC
        assert get_currency_type_by_name("lp://SETM/SERP") is TokenType.DEX_SHARE
        assert get_currency_type_by_name("erc20://0xabc") is TokenType.ERC20

    def test_classify_created_dex_share(self):
        """Any encoded pair classifies as a dex share."""
        assert get_currency_type_by_name(create_dex_share_name("a/b", "lp://x/y")) is TokenType.DEX_SHARE


class TestDexShareNames:
    """Tests for lp://A/B encoding and decoding."""

    def test_create_simple(self):
        assert create_dex_share_name("SETM", "SERP") == "lp://SETM/SERP"

    def test_unzip_simple(self):
        assert unzip_dex_share_name("lp://SETM/SERP") == ("SETM", "SERP")

    def test_nested_leg_is_percent_encoded(self):
        inner = create_dex_share_name("SETM", "SERP")
        outer = create_dex_share_name(inner, "DNAR")
        assert outer == "lp://lp%3A%2F%2FSETM%2FSERP/DNAR"
        assert unzip_dex_share_name(outer) == ("lp://SETM/SERP", "DNAR")

    def test_depth_three_round_trip(self):
        level1 = create_dex_share_name("SETM", "SERP")
        level2 = create_dex_share_name("DNAR", level1)
        level3 = create_dex_share_name(level2, level1)
        assert unzip_dex_share_name(level3) == (level2, level1)
        assert unzip_dex_share_name(unzip_dex_share_name(level3)[0]) == ("DNAR", level1)

    def test_reserved_characters_round_trip(self):
        assert unzip_dex_share_name(create_dex_share_name("a b%/c", "é?#")) == ("a b%/c", "é?#")

    @pytest.mark.parametrize("name", [
        "SETM",
        "lp://SETM",
        "lp://SETM/SERP/DNAR",
        "lp:/SETM/SERP",
        "xlp://SETM/SERP",
        "lp://lp://SETM/SERP/DNAR",
        "lp://%FF/SETM",
    ])
    def test_unzip_malformed_raises(self, name):
        with pytest.raises(NotDexShareName) as exc_info:
            unzip_dex_share_name(name)
        assert exc_info.value.origin == name


class TestStructuredForm:
    """Tests for the tagged identity and chain data."""

    def test_parse_basic(self):
        assert parse_currency_name("SETM") == Basic("SETM")

    def test_parse_nested(self):
        name = create_dex_share_name(create_dex_share_name("SETM", "SERP"), "DNAR")
        assert parse_currency_name(name) == DexShare(DexShare(Basic("SETM"), Basic("SERP")), Basic("DNAR"))

    def test_identity_name_round_trip(self):
        identity = DexShare(Basic("DNAR"), DexShare(Basic("SETM"), Erc20("0xabc")))
        assert parse_currency_name(identity.name) == identity

    def test_legs_keep_caller_order(self):
        assert DexShare(Basic("SERP"), Basic("SETM")).name == "lp://SERP/SETM"

    def test_currency_object(self):
        assert get_currency_object("lp://SETM/SERP") == {
            "DexShare": [{"Token": "SETM"}, {"Token": "SERP"}]
        }
        assert get_currency_object("erc20://0xabc") == {"Erc20": "0xabc"}


class TestForceToCurrencyName:
    """Tests for normalising every accepted shape into a name."""

    def test_string_passes_through(self):
        assert force_to_currency_name("SETM") == "SETM"

    def test_pair(self):
        assert force_to_currency_name(["SETM", "SERP"]) == "lp://SETM/SERP"

    def test_nested_pair(self):
        assert force_to_currency_name([["SETM", "SERP"], "DNAR"]) == "lp://lp%3A%2F%2FSETM%2FSERP/DNAR"

    def test_token(self):
        assert force_to_currency_name(Token.from_currency_name("SERP", decimals=12)) == "SERP"

    def test_identity(self):
        assert force_to_currency_name(DexShare(Basic("SETM"), Basic("SERP"))) == "lp://SETM/SERP"

    def test_structured_dict(self):
        value = {"DexShare": [{"Token": "SETM"}, {"DexShare": [{"Token": "SERP"}, {"Token": "DNAR"}]}]}
        assert parse_currency_name(force_to_currency_name(value)).to_chain_data() == value

    def test_native_tagged_value(self):
        setm = NativeCurrency(is_token=True, as_token="SETM")
        serp = NativeCurrency(is_token=True, as_token="SERP")
        share = NativeCurrency(is_dex_share=True, as_dex_share=(setm, serp))
        assert force_to_currency_name(share) == "lp://SETM/SERP"

    def test_native_erc20_value(self):
        value = NativeCurrency(is_erc20=True, as_erc20="0xabc")
        assert force_to_currency_name(value) == "erc20://0xabc"

    @pytest.mark.parametrize("value", [
        42,
        None,
        {"Unknown": "SETM"},
        {"Token": "SETM", "DexShare": []},
        ["SETM"],
        ["SETM", "SERP", "DNAR"],
    ])
    def test_unsupported_raises_with_origin(self, value):
        """The error carries exactly the value passed in."""
        with pytest.raises(ConvertToCurrencyNameFailed) as exc_info:
            force_to_currency_name(value)
        assert exc_info.value.origin is value


class TestForceToCurrencyId:
    """Tests for building wire values."""

    def test_builds_wire_value(self):
        api = FakeApi()
        wire = force_to_currency_id(api, "lp://SETM/SERP")
        assert wire == api.currency("lp://SETM/SERP")
        assert wire.value == {"DexShare": [{"Token": "SETM"}, {"Token": "SERP"}]}

    def test_same_wire_for_equivalent_inputs(self):
        api = FakeApi()
        assert force_to_currency_id(api, ["SETM", "SERP"]) == force_to_currency_id(api, {"DexShare": [{"Token": "SETM"}, {"Token": "SERP"}]})

    def test_constructor_failure_carries_origin(self):
        """An empty symbol is rejected by the wire constructor."""
        api = FakeApi()
        with pytest.raises(ConvertToCurrencyIdFailed) as exc_info:
            force_to_currency_id(api, "")
        assert exc_info.value.origin == ""

    def test_unconvertible_input_carries_origin(self):
        api = FakeApi()
        value = object()
        with pytest.raises(ConvertToCurrencyIdFailed) as exc_info:
            force_to_currency_id(api, value)
        assert exc_info.value.origin is value
        assert isinstance(exc_info.value.__cause__, ConvertToCurrencyNameFailed)

    def test_dex_share_helper_accepts_pair(self):
        api = FakeApi()
        assert force_to_dex_share_currency_id(api, ("SETM", "SERP")) == api.currency("lp://SETM/SERP")

    def test_token_symbol_helper(self):
        api = FakeApi()
        assert force_to_token_symbol_currency_id(api, "SETM") == api.currency("SETM")


class TestOrdering:
    """Tests for the canonical ordering key."""

    def test_known_symbols_in_chain_order(self):
        names = ["SETUSD", "DNAR", "SERP", "SETM", "SETR", "HELP"]
        assert sorted(names, key=currency_sort_key) == ["SETM", "SERP", "DNAR", "HELP", "SETR", "SETUSD"]

    def test_unknown_symbols_after_known(self):
        assert sorted(["AAA", "SETUSD"], key=currency_sort_key) == ["SETUSD", "AAA"]

    def test_kind_rank(self):
        names = ["erc20://0x1", "lp://SETM/SERP", "ZZZ"]
        assert sorted(names, key=currency_sort_key) == ["ZZZ", "lp://SETM/SERP", "erc20://0x1"]

    def test_dex_shares_compare_by_legs(self):
        names = ["lp://SERP/DNAR", "lp://SETM/SETUSD", "lp://SETM/SERP"]
        assert sorted(names, key=currency_sort_key) == ["lp://SETM/SERP", "lp://SETM/SETUSD", "lp://SERP/DNAR"]
