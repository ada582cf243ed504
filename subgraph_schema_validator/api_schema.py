"""Derivation of the consumer-facing API schema."""

from dataclasses import dataclass
from typing import Optional

from graphql import GraphQLError, GraphQLSchema, build_schema, validate_schema

from . import utils
from .errors import ApiSchemaError
from .input_schema import Aggregation, Field, InputSchema, ObjectType

DEFAULT_FIRST = 100
# Plural field suffix for types whose name does not change when pluralized
COLLECTION_SUFFIX = "_collection"

SUPPORT_SDL = """\
scalar BigDecimal
scalar BigInt
scalar Bytes
scalar Int8
scalar Timestamp

enum OrderDirection {
  asc
  desc
}

enum _SubgraphErrorPolicy_ {
  allow
  deny
}

enum Aggregation_interval {
  hour
  day
}

input Block_height {
  hash: Bytes
  number: Int
  number_gte: Int
}

input BlockChangedFilter {
  number_gte: Int!
}

type _Block_ {
  hash: Bytes
  number: Int!
  timestamp: Int
  parentHash: Bytes
}

type _Meta_ {
  block: _Block_!
  deployment: String!
  hasIndexingErrors: Boolean!
}
"""

GENERATED_TYPES = {
    "Query",
    "Subscription",
    "BigDecimal",
    "BigInt",
    "Bytes",
    "Int8",
    "Timestamp",
    "OrderDirection",
    "_SubgraphErrorPolicy_",
    "Aggregation_interval",
    "Block_height",
    "BlockChangedFilter",
    "_Block_",
    "_Meta_",
}

STRING_OPS = [
    "contains", "contains_nocase", "not_contains", "not_contains_nocase",
    "starts_with", "starts_with_nocase", "not_starts_with", "not_starts_with_nocase",
    "ends_with", "ends_with_nocase", "not_ends_with", "not_ends_with_nocase",
]
LIST_OPS = ["contains", "contains_nocase", "not_contains", "not_contains_nocase"]
ORDER_OPS = ["gt", "lt", "gte", "lte"]

BLOCK_ARGS = "block: Block_height, subgraphError: _SubgraphErrorPolicy_! = deny"


@dataclass(frozen=True)
class ApiSchema:
    """The derived schema consumers query."""

    schema: GraphQLSchema
    sdl: str
    query_fields: tuple[str, ...]


class _Members:
    """Ordered name -> declaration map that refuses duplicates."""

    def __init__(self, owner: str):
        self.owner = owner
        self.items: dict[str, str] = {}
        self.origins: dict[str, str] = {}

    def add(self, name: str, decl: str, origin: str) -> None:
        if name in self.items:
            raise ApiSchemaError(
                f"{self.owner} member `{name}` is generated for both {self.origins[name]} and {origin}"
            )
        self.items[name] = decl
        self.origins[name] = origin

    def render(self, keyword: str, header: str) -> str:
        body = "\n".join(f"  {decl}" for decl in self.items.values())
        return f"{keyword} {header} {{\n{body}\n}}"


def derive(input_schema: InputSchema) -> ApiSchema:
    """
    Derive the API schema for a validated input schema.

    Args:
        input_schema: Schema that passed input validation

    Returns:
        ApiSchema with the built graphql-core schema and its SDL

    Raises:
        ApiSchemaError: On name collisions or when graphql-core rejects the
            generated schema
    """
    _check_type_names(input_schema)

    blocks = [SUPPORT_SDL]
    for name, values in input_schema.enums.items():
        blocks.append(f"enum {name} {{\n" + "\n".join(f"  {v}" for v in values) + "\n}")

    for t in input_schema.types.values():
        blocks.append(_object_type(input_schema, t))
        blocks.append(_filter_input(input_schema, t.name, t.fields))
        blocks.append(_order_by_enum(input_schema, t.name, t.fields))

    for agg in input_schema.aggregations.values():
        blocks.append(_aggregation_type(input_schema, agg))
        dims = [f for f in agg.fields if f.aggregate_fn is None]
        blocks.append(_filter_input(input_schema, agg.name, dims))
        blocks.append(_order_by_enum(input_schema, agg.name, dims))

    root = _root_fields(input_schema)
    blocks.append(root.render("type", "Query"))
    blocks.append(root.render("type", "Subscription"))

    sdl = "\n\n".join(blocks) + "\n"
    try:
        schema = build_schema(sdl)
    except (GraphQLError, TypeError) as e:
        raise ApiSchemaError(f"Generated API schema is invalid: {_first_line(e)}") from e
    errors = validate_schema(schema)
    if errors:
        raise ApiSchemaError(f"Generated API schema is invalid: {errors[0].message}")

    return ApiSchema(schema=schema, sdl=sdl, query_fields=tuple(root.items))


def _first_line(e: Exception) -> str:
    text = e.message if isinstance(e, GraphQLError) else str(e)
    return text.strip().splitlines()[0]


def _check_type_names(input_schema: InputSchema) -> None:
    names = [*input_schema.enums, *input_schema.types, *input_schema.aggregations]
    for name in names:
        if name in GENERATED_TYPES:
            raise ApiSchemaError(f"Type `{name}` collides with a type generated for the API schema")


def _object_like(input_schema: InputSchema, name: str) -> Optional[ObjectType]:
    return input_schema.types.get(name)


def _collection_args(target: str) -> str:
    return (
        f"skip: Int = 0, first: Int = {DEFAULT_FIRST}, orderBy: {target}_orderBy, "
        f"orderDirection: OrderDirection, where: {target}_filter"
    )


def _field_decl(input_schema: InputSchema, f: Field) -> str:
    if f.is_list and _object_like(input_schema, f.type_name) is not None:
        return f"{f.name}({_collection_args(f.type_name)}): {f.sdl}"
    return f"{f.name}: {f.sdl}"


def _object_type(input_schema: InputSchema, t: ObjectType) -> str:
    members = _Members(t.name)
    for f in t.fields:
        members.add(f.name, _field_decl(input_schema, f), f"field `{f.name}`")
    header = t.name
    if t.interfaces:
        header += " implements " + " & ".join(t.interfaces)
    return members.render("interface" if t.is_interface else "type", header)


def _aggregation_type(input_schema: InputSchema, agg: Aggregation) -> str:
    members = _Members(agg.name)
    for f in agg.fields:
        members.add(f.name, _field_decl(input_schema, f), f"field `{f.name}`")
    return members.render("type", agg.name)


def _scalar_filter_type(input_schema: InputSchema, type_name: str) -> str:
    """Type used to filter a field: referenced types filter by their id."""
    target = _object_like(input_schema, type_name)
    if target is None:
        return type_name
    id_type = target.id_type
    return "String" if id_type == "ID" else id_type


def _filter_input(input_schema: InputSchema, name: str, fields) -> str:
    """
    Build the `<Type>_filter` input object.

    Scalars get equality, membership and, where ordered, comparison
    operators; strings get text matching; references also get a nested
    `<field>_` filter on the referenced type.
    """
    members = _Members(f"{name}_filter")
    for f in fields:
        origin = f"field `{f.name}`"
        target = _object_like(input_schema, f.type_name)
        nested = f"{f.name}_: {f.type_name}_filter"

        if f.derived_from:
            if target is not None:
                members.add(f"{f.name}_", nested, origin)
            continue

        base = _scalar_filter_type(input_schema, f.type_name)
        if f.is_list:
            list_type = f"[{base}!]"
            members.add(f.name, f"{f.name}: {list_type}", origin)
            members.add(f"{f.name}_not", f"{f.name}_not: {list_type}", origin)
            for op in LIST_OPS:
                members.add(f"{f.name}_{op}", f"{f.name}_{op}: {list_type}", origin)
        else:
            members.add(f.name, f"{f.name}: {base}", origin)
            members.add(f"{f.name}_not", f"{f.name}_not: {base}", origin)
            if base not in input_schema.enums and base != "Boolean":
                for op in ORDER_OPS:
                    members.add(f"{f.name}_{op}", f"{f.name}_{op}: {base}", origin)
            members.add(f"{f.name}_in", f"{f.name}_in: [{base}!]", origin)
            members.add(f"{f.name}_not_in", f"{f.name}_not_in: [{base}!]", origin)
            if base == "String":
                for op in STRING_OPS:
                    members.add(f"{f.name}_{op}", f"{f.name}_{op}: String", origin)
            elif base == "Bytes":
                for op in ("contains", "not_contains"):
                    members.add(f"{f.name}_{op}", f"{f.name}_{op}: Bytes", origin)
        if target is not None:
            members.add(f"{f.name}_", nested, origin)

    members.add("_change_block", "_change_block: BlockChangedFilter", "block filtering")
    members.add("and", f"and: [{name}_filter]", "logical filtering")
    members.add("or", f"or: [{name}_filter]", "logical filtering")
    return members.render("input", f"{name}_filter")


def _order_by_enum(input_schema: InputSchema, name: str, fields) -> str:
    members = _Members(f"{name}_orderBy")
    for f in fields:
        members.add(f.name, f.name, f"field `{f.name}`")
        target = _object_like(input_schema, f.type_name)
        if target is None or f.is_list or f.derived_from:
            continue
        for sub in target.fields:
            if sub.is_list or sub.derived_from or _object_like(input_schema, sub.type_name):
                continue
            value = f"{f.name}__{sub.name}"
            members.add(value, value, f"field `{f.name}.{sub.name}`")
    return members.render("enum", f"{name}_orderBy")


def _root_fields(input_schema: InputSchema) -> _Members:
    """
    Query fields: a singular and a plural field per entity type and
    interface, a plural field per aggregation, one per fulltext search,
    and `_meta`. Uncountable names get `<singular>_collection` as the
    plural field.
    """
    members = _Members("Query")
    for t in input_schema.types.values():
        origin = f"type `{t.name}`"
        singular = utils.lower_camel_case(t.name)
        plural = utils.pluralize(singular)
        if plural == singular:
            plural = f"{singular}{COLLECTION_SUFFIX}"
        members.add(singular, f"{singular}(id: ID!, {BLOCK_ARGS}): {t.name}", origin)
        members.add(plural, f"{plural}({_collection_args(t.name)}, {BLOCK_ARGS}): [{t.name}!]!", origin)

    for agg in input_schema.aggregations.values():
        origin = f"aggregation `{agg.name}`"
        plural = utils.pluralize(utils.lower_camel_case(agg.name))
        members.add(
            plural,
            f"{plural}(interval: Aggregation_interval!, {_collection_args(agg.name)}, {BLOCK_ARGS}): [{agg.name}!]!",
            origin,
        )

    for ft in input_schema.fulltext:
        members.add(
            ft.name,
            f"{ft.name}(text: String!, first: Int = {DEFAULT_FIRST}, skip: Int = 0, "
            f"where: {ft.entity}_filter, {BLOCK_ARGS}): [{ft.entity}!]!",
            f"fulltext search `{ft.name}`",
        )

    members.add("_meta", "_meta(block: Block_height): _Meta_", "subgraph metadata")
    return members
