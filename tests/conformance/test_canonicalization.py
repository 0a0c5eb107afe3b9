"""
Canonicalization Conformance Tests

INVARIANT: Every currency has exactly one name, and the name codec is lossless.

    ∀ name n:  force_to_currency_name(get_currency_object(n)) == n
    ∀ name n:  parse_currency_name(n).name == n
    ∀ c1, c2:  c1 ≡ c2 ⟹ force_to_currency_name(c1) == force_to_currency_name(c2)

Names nest: a dex-share leg may itself be a dex-share name, to any depth.
Classification by name prefix is stable across the round trip.
"""

import pytest
from hypothesis import given, settings, assume

from ledger_sdk import (
    Token, Basic, DexShare, Erc20,
    create_dex_share_name, unzip_dex_share_name, parse_currency_name,
    get_currency_object, get_currency_type_by_name, force_to_currency_name,
    NotDexShareName,
)

from tests.conformance.strategies import basic_names, leaf_names, currency_names, nested_dex_share_names, depth


# =============================================================================
# PROPERTIES
# =============================================================================

class TestNameCodecProperties:
    """Property-based tests for the name <-> identity codec."""

    @given(currency_names)
    @settings(max_examples=300)
    def test_object_round_trip(self, name):
        """
        PROPERTY: name -> chain data -> name is the identity.
        """
        assert force_to_currency_name(get_currency_object(name)) == name

    @given(currency_names)
    @settings(max_examples=300)
    def test_identity_round_trip(self, name):
        """
        PROPERTY: parse_currency_name() and .name are inverses.
        """
        identity = parse_currency_name(name)
        assert identity.name == name
        assert parse_currency_name(identity.name) == identity

    @given(currency_names)
    def test_classification_stable(self, name):
        """
        PROPERTY: The kind read from the name matches the decoded identity.
        """
        identity = parse_currency_name(name)
        assert identity.type is get_currency_type_by_name(name)
        assert Token.from_currency_name(name).type is identity.type

    @given(nested_dex_share_names())
    @settings(max_examples=200)
    def test_nested_names_round_trip(self, name):
        """
        PROPERTY: Nesting depth >= 2 survives the codec.
        """
        assume(depth(name) >= 2)
        assert force_to_currency_name(get_currency_object(name)) == name
        leg0, leg1 = unzip_dex_share_name(name)
        assert create_dex_share_name(leg0, leg1) == name

    @given(leaf_names, leaf_names)
    def test_every_input_form_agrees(self, name0, name1):
        """
        PROPERTY: A pair, its structured form, its tagged form and its Token all
        name the same currency.
        """
        name = create_dex_share_name(name0, name1)
        forms = [
            name,
            [name0, name1],
            (get_currency_object(name0), get_currency_object(name1)),
            get_currency_object(name),
            parse_currency_name(name),
            Token.from_currency_name(name),
        ]
        assert {force_to_currency_name(form) for form in forms} == {name}

    @given(basic_names)
    def test_basic_names_pass_through(self, name):
        """
        PROPERTY: A basic name is its own symbol.
        """
        assert parse_currency_name(name) == Basic(name)
        assert get_currency_object(name) == {"Token": name}


class TestNameCodecExamples:
    """Fixed examples of the codec."""

    def test_two_level_name(self):
        inner = create_dex_share_name("SETM", "SERP")
        outer = create_dex_share_name(inner, "DNAR")
        assert outer == "lp://lp%3A%2F%2FSETM%2FSERP/DNAR"
        assert parse_currency_name(outer) == DexShare(DexShare(Basic("SETM"), Basic("SERP")), Basic("DNAR"))

    def test_erc20_leg(self):
        name = create_dex_share_name("SETM", "erc20://0x01")
        assert parse_currency_name(name) == DexShare(Basic("SETM"), Erc20("0x01"))

    @pytest.mark.parametrize("name", [
        "lp://SETM",
        "lp://SETM/SERP/DNAR",
        "lp://lp://SETM/SERP/DNAR",
        "SETM",
        "lp://%FF/SETM",
    ])
    def test_malformed_dex_share_names(self, name):
        with pytest.raises(NotDexShareName):
            unzip_dex_share_name(name)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
