"""Tests for naming and type reference helpers."""

import pytest

from subgraph_schema_validator import utils
from subgraph_schema_validator.parser import parse_schema


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Token", "token"),
        ("TokenDayData", "tokenDayData"),
        ("ERC20Token", "erc20Token"),
        ("USDPrice", "usdPrice"),
        ("Token_Day", "tokenDay"),
    ],
)
def test_lower_camel_case(name, expected):
    assert utils.lower_camel_case(name) == expected


@pytest.mark.parametrize(
    "word, expected",
    [
        ("token", "tokens"),
        ("stat", "stats"),
        ("stats", "stats"),
        ("category", "categories"),
        ("address", "addresses"),
        ("person", "people"),
        ("userPosition", "userPositions"),
        ("tokenDayData", "tokenDayData"),
        ("erc20Token", "erc20Tokens"),
        ("status", "statuses"),
        ("day", "days"),
    ],
)
def test_pluralize(word, expected):
    assert utils.pluralize(word) == expected


def test_type_helpers():
    doc = parse_schema("type A @entity { id: ID!, xs: [[Int!]]!, b: B }")
    id_field, xs, b = doc.definitions[0].fields
    assert utils.named_type(xs.type) == "Int"
    assert utils.list_depth(xs.type) == 2
    assert utils.is_list_type(xs.type)
    assert utils.is_non_null(id_field.type)
    assert not utils.is_non_null(b.type)
    assert utils.type_str(xs.type) == "[[Int!]]!"


def test_argument_value():
    doc = parse_schema('type A @x(s: "v", e: en, l: ["a", "b"], o: {k: 1}) { id: ID! }')
    directive = doc.definitions[0].directives[0]
    assert utils.argument_value(directive, "s") == "v"
    assert utils.argument_value(directive, "e") == "en"
    assert utils.argument_value(directive, "l") == ["a", "b"]
    assert utils.argument_value(directive, "o") == {"k": 1}
    assert utils.argument_value(directive, "missing", "default") == "default"
