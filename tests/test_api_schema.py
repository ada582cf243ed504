"""Tests for API schema derivation."""

import pytest
from graphql import GraphQLSchema

from conftest import FULLTEXT_SCHEMA, TIMESERIES_SCHEMA, VALID_SCHEMA
from subgraph_schema_validator.api_schema import ApiSchema, derive
from subgraph_schema_validator.errors import ApiSchemaError
from subgraph_schema_validator.identifier import DeploymentHash
from subgraph_schema_validator.input_schema import InputSchema
from subgraph_schema_validator.versions import SPEC_VERSION_1_1_0


def input_schema(raw, cfg):
    return InputSchema.parse(SPEC_VERSION_1_1_0, raw, DeploymentHash.new("unknown"), cfg)


class TestDerive:
    """Successful derivations."""

    def test_generates_singular_and_plural_fields(self, cfg):
        api = derive(input_schema(VALID_SCHEMA, cfg))
        assert isinstance(api, ApiSchema)
        assert isinstance(api.schema, GraphQLSchema)
        for name in ("token", "tokens", "account", "accounts", "transfer", "transfers", "_meta"):
            assert name in api.query_fields
        assert set(api.schema.query_type.fields) == set(api.query_fields)
        assert set(api.schema.subscription_type.fields) == set(api.query_fields)

    def test_generates_filters_and_order_by(self, cfg):
        api = derive(input_schema(VALID_SCHEMA, cfg))
        token_filter = api.schema.get_type("Token_filter")
        assert "name_starts_with" in token_filter.fields
        assert "owner_" in token_filter.fields
        assert "transfers_" in token_filter.fields
        assert "and" in token_filter.fields and "or" in token_filter.fields
        # derived fields have no scalar filters
        assert "transfers" not in token_filter.fields

        order_by = api.schema.get_type("Token_orderBy")
        assert {"id", "name", "owner", "owner__id"} <= set(order_by.values)

    def test_collection_fields_get_arguments(self, cfg):
        api = derive(input_schema(VALID_SCHEMA, cfg))
        transfers = api.schema.get_type("Token").fields["transfers"]
        assert {"skip", "first", "orderBy", "orderDirection", "where"} == set(transfers.args)

    def test_aggregations_take_an_interval(self, cfg):
        api = derive(input_schema(TIMESERIES_SCHEMA, cfg))
        stats = api.schema.query_type.fields["stats"]
        assert "interval" in stats.args
        assert "trades" in api.query_fields

    def test_fulltext_search_field(self, cfg):
        api = derive(input_schema(FULLTEXT_SCHEMA, cfg))
        search = api.schema.query_type.fields["bandSearch"]
        assert "text" in search.args

    @pytest.mark.parametrize(
        "type_name, singular",
        [("TokenDayData", "tokenDayData"), ("Metadata", "metadata")],
    )
    def test_uncountable_names_get_a_collection_field(self, cfg, type_name, singular):
        api = derive(input_schema(f"type {type_name} @entity {{ id: ID! }}", cfg))
        assert singular in api.query_fields
        assert f"{singular}_collection" in api.query_fields
        assert "id" in api.schema.query_type.fields[singular].args
        assert "where" in api.schema.query_type.fields[f"{singular}_collection"].args

    def test_sdl_is_reproducible(self, cfg):
        assert derive(input_schema(VALID_SCHEMA, cfg)).sdl == derive(input_schema(VALID_SCHEMA, cfg)).sdl


class TestDeriveFailures:
    """Derivation rejects schemas whose API would be ambiguous."""

    def test_plural_collision(self, cfg):
        schema = input_schema("type Stat @entity { id: ID! }\ntype Stats @entity { id: ID! }", cfg)
        with pytest.raises(ApiSchemaError) as exc:
            derive(schema)
        assert "`stats`" in str(exc.value)
        assert "`Stat`" in str(exc.value) and "`Stats`" in str(exc.value)

    def test_generated_type_name_collision(self, cfg):
        schema = input_schema("type OrderDirection @entity { id: ID! }", cfg)
        with pytest.raises(ApiSchemaError) as exc:
            derive(schema)
        assert "OrderDirection" in str(exc.value)

    def test_filter_field_collision(self, cfg):
        schema = input_schema("type A @entity { id: ID!, and: String }", cfg)
        with pytest.raises(ApiSchemaError) as exc:
            derive(schema)
        assert "A_filter" in str(exc.value)

    def test_order_by_collision(self, cfg):
        schema = input_schema(
            "type A @entity { id: ID!, b: B!, b__id: String }\ntype B @entity { id: ID! }",
            cfg,
        )
        with pytest.raises(ApiSchemaError):
            derive(schema)

    def test_input_schema_is_untouched_by_failure(self, cfg):
        schema = input_schema("type Stat @entity { id: ID! }\ntype Stats @entity { id: ID! }", cfg)
        before = dict(schema.types)
        with pytest.raises(ApiSchemaError):
            derive(schema)
        assert schema.types == before
