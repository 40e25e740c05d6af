"""Tests for the flat-string nested record parser."""

from claimlink.utils.nested_record import parse_nested_record


def test_parses_provider_address_string():
    raw = "{country=US, street_address=1 Main St, locality=Springfield, state=IL, postal_code=62704}"

    assert parse_nested_record(raw) == {
        "country": "US",
        "street_address": "1 Main St",
        "locality": "Springfield",
        "state": "IL",
        "postal_code": "62704",
    }


def test_ignores_content_outside_the_braces():
    raw = "address: {locality=Springfield, country=US} (verified)"

    assert parse_nested_record(raw) == {"locality": "Springfield", "country": "US"}


def test_key_is_before_first_equals_and_value_after_last():
    assert parse_nested_record("{street_address=a=b}") == {"street_address": "b"}


def test_value_with_comma_is_split_and_fragment_dropped():
    raw = "{street_address=Suite 4, 1 Main St, locality=Springfield}"

    assert parse_nested_record(raw) == {
        "street_address": "Suite 4",
        "locality": "Springfield",
    }


def test_later_duplicate_key_wins():
    assert parse_nested_record("{state=IL, state=WI}") == {"state": "WI"}


def test_empty_value_is_kept():
    assert parse_nested_record("{state=, country=US}") == {"state": "", "country": "US"}


def test_missing_braces_or_empty_input_yield_empty_record():
    assert parse_nested_record(None) == {}
    assert parse_nested_record("") == {}
    assert parse_nested_record("country=US") == {}
    assert parse_nested_record("{country=US") == {}
    assert parse_nested_record("{}") == {}
