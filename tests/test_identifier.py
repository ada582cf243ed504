"""Tests for deployment identifier extraction."""

import pytest

from subgraph_schema_validator.errors import IdentifierFormatError
from subgraph_schema_validator.identifier import (
    UNKNOWN_ID,
    DeploymentHash,
    declared_id,
    find_directive,
    subgraph_id,
)
from subgraph_schema_validator.parser import parse_schema


class TestSubgraphId:
    """Tests for subgraph_id extraction."""

    def test_reads_directive_argument(self):
        doc = parse_schema('type Token @entity @subgraphId(id: "abc123") { id: ID! }')
        assert subgraph_id(doc) == "abc123"
        assert isinstance(subgraph_id(doc), DeploymentHash)

    def test_no_directive_yields_unknown(self):
        doc = parse_schema("type Token @entity { id: ID! }")
        assert subgraph_id(doc) == UNKNOWN_ID

    def test_no_object_type_yields_unknown(self):
        doc = parse_schema("enum Kind { A B }")
        assert subgraph_id(doc) == UNKNOWN_ID

    def test_missing_argument_yields_unknown(self):
        doc = parse_schema('type Token @entity @subgraphId(other: "x") { id: ID! }')
        assert subgraph_id(doc) == UNKNOWN_ID

    def test_non_string_argument_yields_unknown(self):
        doc = parse_schema("type Token @entity @subgraphId(id: 42) { id: ID! }")
        assert subgraph_id(doc) == UNKNOWN_ID

    def test_only_first_object_type_is_inspected(self):
        doc = parse_schema(
            'type A @entity { id: ID! }\ntype B @entity @subgraphId(id: "second") { id: ID! }'
        )
        assert subgraph_id(doc) == UNKNOWN_ID

    def test_interfaces_before_first_object_are_skipped(self):
        doc = parse_schema(
            'interface Node { id: ID! }\ntype A implements Node @entity @subgraphId(id: "Qm1") { id: ID! }'
        )
        assert subgraph_id(doc) == "Qm1"

    def test_invalid_format_fails_hard(self):
        doc = parse_schema('type Token @entity @subgraphId(id: "not valid!") { id: ID! }')
        with pytest.raises(IdentifierFormatError) as exc:
            subgraph_id(doc)
        assert exc.value.value == "not valid!"
        # the raw value is still readable for reporting
        assert declared_id(doc) == "not valid!"


class TestDeploymentHash:
    """Tests for the deployment hash format rule."""

    @pytest.mark.parametrize("value", ["unknown", "QmWmyoMoctfbAaiEs2G46gpeUmhqFRDW6KWo64y5r581Vz", "a_b_1"])
    def test_accepts_valid_hashes(self, value):
        assert DeploymentHash.new(value) == value

    @pytest.mark.parametrize("value", ["", "has space", "dash-ed", "x" * 47, "ünïcode"])
    def test_rejects_invalid_hashes(self, value):
        with pytest.raises(IdentifierFormatError):
            DeploymentHash.new(value)


def test_find_directive_works_on_fields_and_types():
    doc = parse_schema('type A @entity { id: ID!, bs: [A!]! @derivedFrom(field: "id") }')
    type_def = doc.definitions[0]
    assert find_directive(type_def, "entity") is not None
    assert find_directive(type_def, "derivedFrom") is None
    assert find_directive(type_def.fields[1], "derivedFrom").name.value == "derivedFrom"
