"""Tests for schema document parsing."""

import pytest
from graphql import ObjectTypeDefinitionNode

from subgraph_schema_validator.errors import ParseError
from subgraph_schema_validator.parser import parse_schema


def test_parses_type_definitions():
    doc = parse_schema("type Token @entity { id: ID! }")
    assert len(doc.definitions) == 1
    assert isinstance(doc.definitions[0], ObjectTypeDefinitionNode)
    assert doc.definitions[0].name.value == "Token"


def test_unbalanced_braces_raise_parse_error_with_location():
    with pytest.raises(ParseError) as exc:
        parse_schema("type Token @entity {\n  id: ID!\n")
    err = exc.value
    assert err.line == 2
    assert err.column == 10
    assert str(err).startswith("Syntax Error: ")
    assert str(err).endswith("(line 2, column 10)")


def test_invalid_character_location():
    with pytest.raises(ParseError) as exc:
        parse_schema("type Token @entity {\n  id: ID!\n  %\n}")
    assert (exc.value.line, exc.value.column) == (3, 3)


def test_invalid_token_raises_parse_error():
    with pytest.raises(ParseError):
        parse_schema("type Token @entity { id: ID! % }")


def test_empty_document_is_a_parse_error():
    with pytest.raises(ParseError):
        parse_schema("")


def test_parse_error_message_is_single_line():
    with pytest.raises(ParseError) as exc:
        parse_schema("type {")
    assert "\n" not in str(exc.value)
