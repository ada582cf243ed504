"""Structural rules for subgraph input schemas.

Every rule takes the indexed `Definitions` of a document and returns a list
of error messages, empty when the rule passes. Rules never raise.
"""

from dataclasses import dataclass
from typing import Optional, Union

from graphql import (
    ArgumentNode,
    BooleanValueNode,
    DirectiveDefinitionNode,
    DirectiveNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumValueNode,
    ExecutableDefinitionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    ListValueNode,
    ObjectTypeDefinitionNode,
    ObjectValueNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    StringValueNode,
    TypeDefinitionNode,
    TypeSystemExtensionNode,
    UnionTypeDefinitionNode,
    value_from_ast_untyped,
)

from . import utils
from .config import Config
from .identifier import find_directive, has_directive
from .versions import MIN_SPEC_VERSION_AGGREGATIONS, SpecVersion, supports_aggregations

SCHEMA_TYPE = "_Schema_"

ENTITY = "entity"
AGGREGATION = "aggregation"
AGGREGATE = "aggregate"
DERIVED_FROM = "derivedFrom"
FULLTEXT = "fulltext"
IMPORT = "import"

BASE_SCALARS = {"Boolean", "Int", "Int8", "BigInt", "BigDecimal", "String", "Bytes", "ID"}
TIMESTAMP = "Timestamp"
ID_TYPES = {"ID", "String", "Bytes", "Int8"}
NUMERIC_TYPES = {"Int", "Int8", "BigInt", "BigDecimal"}

RESERVED_TYPES = {"Query", "Subscription", "Mutation"}
RESERVED_SUFFIXES = ("_filter", "_orderBy")
# Field names become enum values of `<Type>_orderBy`
RESERVED_FIELD_NAMES = {"true", "false", "null"}

AGGREGATION_INTERVALS = ("hour", "day")
AGGREGATE_FUNCTIONS = {"sum", "max", "min", "count", "first", "last"}

FULLTEXT_LANGUAGES = {
    "simple", "da", "nl", "en", "fi", "fr", "de", "hu",
    "it", "no", "pt", "ro", "ru", "es", "sv", "tr",
}
FULLTEXT_ALGORITHMS = {"rank", "proximityRank"}

ObjectLike = Union[ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode]


@dataclass
class Definitions:
    """Type definitions of a document indexed by name and kind."""

    doc: DocumentNode
    spec_version: SpecVersion
    cfg: Config
    objects: dict[str, ObjectTypeDefinitionNode]
    interfaces: dict[str, InterfaceTypeDefinitionNode]
    enums: dict[str, EnumTypeDefinitionNode]

    @property
    def schema_type(self) -> Optional[ObjectTypeDefinitionNode]:
        return self.objects.get(SCHEMA_TYPE)

    @property
    def entities(self) -> dict[str, ObjectTypeDefinitionNode]:
        return {n: t for n, t in self.objects.items() if has_directive(t, ENTITY)}

    @property
    def aggregations(self) -> dict[str, ObjectTypeDefinitionNode]:
        return {
            n: t
            for n, t in self.objects.items()
            if has_directive(t, AGGREGATION) and not has_directive(t, ENTITY)
        }

    def object_like(self) -> dict[str, ObjectLike]:
        """Entity types and interfaces, the types fields may reference."""
        return {**self.entities, **self.interfaces}

    def scalars(self) -> set[str]:
        if supports_aggregations(self.spec_version):
            return BASE_SCALARS | {TIMESTAMP}
        return set(BASE_SCALARS)


def index(doc: DocumentNode, spec_version: SpecVersion, cfg: Config) -> Definitions:
    """Index a document's type definitions; the first of duplicate names wins."""
    objects, interfaces, enums = {}, {}, {}
    for d in doc.definitions:
        if isinstance(d, ObjectTypeDefinitionNode):
            objects.setdefault(d.name.value, d)
        elif isinstance(d, InterfaceTypeDefinitionNode):
            interfaces.setdefault(d.name.value, d)
        elif isinstance(d, EnumTypeDefinitionNode):
            enums.setdefault(d.name.value, d)
    return Definitions(doc, spec_version, cfg, objects, interfaces, enums)


def field_map(definition: ObjectLike) -> dict[str, FieldDefinitionNode]:
    out = {}
    for f in definition.fields or ():
        out.setdefault(f.name.value, f)
    return out


def entity_flag(definition: ObjectTypeDefinitionNode, name: str) -> Optional[bool]:
    """Value of a Boolean `@entity` argument, None when absent or not Boolean."""
    directive = find_directive(definition, ENTITY)
    if directive is None:
        return None
    arg = utils.argument(directive, name)
    if arg is None or not isinstance(arg.value, BooleanValueNode):
        return None
    return arg.value.value


def is_timeseries(definition: ObjectTypeDefinitionNode) -> bool:
    return bool(entity_flag(definition, "timeseries"))


_UNSUPPORTED = {
    SchemaDefinitionNode: "schema definitions",
    UnionTypeDefinitionNode: "union types",
    InputObjectTypeDefinitionNode: "input types",
    ScalarTypeDefinitionNode: "custom scalars",
    DirectiveDefinitionNode: "directive definitions",
}


def rule_supported_definitions(defs: Definitions) -> list[str]:
    """
    Reject definition kinds that have no meaning in a subgraph schema.

    Returns:
        One error per unsupported definition
    """
    out = []
    for d in defs.doc.definitions:
        name = d.name.value if getattr(d, "name", None) else None
        if isinstance(d, ExecutableDefinitionNode):
            out.append("Operations and fragments are not allowed in a schema")
        elif isinstance(d, TypeSystemExtensionNode):
            out.append(f"Type extensions are not supported: `extend {name or 'schema'}`")
        else:
            for kind, label in _UNSUPPORTED.items():
                if isinstance(d, kind):
                    subject = f"`{name}`: " if name else ""
                    out.append(f"{subject}{label} are not supported")
    return out


def rule_duplicate_types(defs: Definitions) -> list[str]:
    seen, out = set(), []
    for d in defs.doc.definitions:
        if not isinstance(d, TypeDefinitionNode):
            continue
        name = d.name.value
        if name in seen:
            out.append(f"Type `{name}` is defined more than once")
        seen.add(name)
    return out


def rule_reserved_types(defs: Definitions) -> list[str]:
    """Query/Subscription/Mutation and generated filter/order names are reserved."""
    used = []
    for d in defs.doc.definitions:
        if not isinstance(d, TypeDefinitionNode):
            continue
        name = d.name.value
        if name in RESERVED_TYPES or name.endswith(RESERVED_SUFFIXES) or name.startswith("__"):
            used.append(name)
    if used:
        return ["Reserved type names used: " + ", ".join(f"`{n}`" for n in used)]
    return []


def rule_schema_type(defs: Definitions) -> list[str]:
    """The `_Schema_` type only carries `@fulltext` directives."""
    schema_type = defs.schema_type
    if schema_type is None:
        return []
    out = []
    if schema_type.fields:
        out.append(f"`{SCHEMA_TYPE}` must not declare fields")
    for directive in schema_type.directives or ():
        name = directive.name.value
        if name == IMPORT:
            out.append("`@import` is not supported: schemas must be self-contained")
        elif name != FULLTEXT:
            out.append(f"`{SCHEMA_TYPE}` only supports @fulltext, found @{name}")
    return out


def rule_entity_directives(defs: Definitions) -> list[str]:
    """Every object type must be an entity or an aggregation, not both."""
    missing, out = [], []
    for name, t in defs.objects.items():
        if name == SCHEMA_TYPE:
            continue
        entity, aggregation = has_directive(t, ENTITY), has_directive(t, AGGREGATION)
        if entity and aggregation:
            out.append(f"Type `{name}` cannot be both an @entity and an @aggregation")
        elif not entity and not aggregation:
            missing.append(name)
    if missing:
        out.insert(0, "@entity directive missing on the following types: " + ", ".join(f"`{n}`" for n in missing))
    return out


def rule_entity_arguments(defs: Definitions) -> list[str]:
    out = []
    for name, t in defs.entities.items():
        directive = find_directive(t, ENTITY)
        for arg in directive.arguments or ():
            arg_name = arg.name.value
            if arg_name not in ("immutable", "timeseries"):
                out.append(f"Entity type `{name}`: unknown @entity argument `{arg_name}`")
            elif not isinstance(arg.value, BooleanValueNode):
                out.append(f"Entity type `{name}`: @entity argument `{arg_name}` must be a Boolean")
    return out


def rule_id_fields(defs: Definitions) -> list[str]:
    """
    Entity types and interfaces need a non-null `id` of an id type.

    Returns:
        Errors for missing or illegally typed `id` fields
    """
    out = []
    for name, t in defs.object_like().items():
        kind = "Interface" if isinstance(t, InterfaceTypeDefinitionNode) else "Entity type"
        id_field = field_map(t).get("id")
        if id_field is None:
            out.append(f"{kind} `{name}` does not have an `id` field")
            continue
        type_node = id_field.type
        if (
            not utils.is_non_null(type_node)
            or utils.is_list_type(type_node)
            or utils.named_type(type_node) not in ID_TYPES
        ):
            out.append(
                f"{kind} `{name}` uses illegal type `{utils.type_str(type_node)}` for `id`, "
                "expected one of `ID!`, `String!`, `Bytes!`, `Int8!`"
            )
    return out


def rule_field_names(defs: Definitions) -> list[str]:
    out = []
    types = {**defs.object_like(), **defs.aggregations}
    for name, t in types.items():
        seen = set()
        for f in t.fields or ():
            field_name = f.name.value
            if field_name in seen:
                out.append(f"Field `{field_name}` is defined more than once on type `{name}`")
            seen.add(field_name)
            if field_name.startswith("__"):
                out.append(f"Field `{field_name}` on type `{name}` uses the reserved `__` prefix")
            if field_name in RESERVED_FIELD_NAMES:
                out.append(f"Field `{field_name}` on type `{name}` uses a reserved name")
    return out


def rule_enum_values(defs: Definitions) -> list[str]:
    return [
        f"Enum `{name}` must declare at least one value"
        for name, e in defs.enums.items()
        if not e.values
    ]


def rule_field_types(defs: Definitions) -> list[str]:
    """
    Field types must be known scalars, enums, entity types or interfaces.

    Lists of lists and field arguments are rejected.
    """
    known = defs.scalars() | set(defs.enums) | set(defs.object_like())
    out = []
    types = {**defs.object_like(), **defs.aggregations}
    for name, t in types.items():
        for f in t.fields or ():
            field_name = f.name.value
            type_name = utils.named_type(f.type)
            if type_name not in known:
                out.append(f"Field `{field_name}` on type `{name}` has unknown type `{type_name}`")
            if utils.list_depth(f.type) > 1:
                out.append(f"Field `{field_name}` on type `{name}` is a nested list, which is not supported")
            if f.arguments:
                out.append(f"Field `{field_name}` on type `{name}` must not declare arguments")
    return out


def _id_kind(type_name: str) -> str:
    return {"Bytes": "Bytes", "Int8": "Int8"}.get(type_name, "String")


def rule_interfaces(defs: Definitions) -> list[str]:
    """Implementors must exist, declare all interface fields, and agree on id kinds."""
    out = []
    id_kinds: dict[str, dict[str, list[str]]] = {}
    for name, t in defs.entities.items():
        fields = field_map(t)
        for iface_ref in t.interfaces or ():
            iface_name = iface_ref.name.value
            iface = defs.interfaces.get(iface_name)
            if iface is None:
                out.append(f"Entity type `{name}` implements undefined interface `{iface_name}`")
                continue
            missing = []
            for iface_field in iface.fields or ():
                field_name = iface_field.name.value
                own = fields.get(field_name)
                if own is None:
                    missing.append(field_name)
                elif utils.type_str(own.type) != utils.type_str(iface_field.type):
                    out.append(
                        f"Field `{field_name}` on type `{name}` has type `{utils.type_str(own.type)}` "
                        f"but interface `{iface_name}` declares `{utils.type_str(iface_field.type)}`"
                    )
            if missing:
                out.append(
                    f"Entity type `{name}` does not satisfy interface `{iface_name}` because it is "
                    "missing the following fields: " + ", ".join(f"`{m}`" for m in missing)
                )
            if "id" in fields:
                kind = _id_kind(utils.named_type(fields["id"].type))
                id_kinds.setdefault(iface_name, {}).setdefault(kind, []).append(name)
    for iface_name, kinds in id_kinds.items():
        if len(kinds) > 1:
            detail = "; ".join(f"{k}: {', '.join(names)}" for k, names in sorted(kinds.items()))
            out.append(f"Implementors of interface `{iface_name}` use different id types ({detail})")
    return out


def rule_derived_from(defs: Definitions) -> list[str]:
    """
    `@derivedFrom(field: "f")` must point at a field referring back.

    The referenced type must be an entity type or interface declaring `f`,
    and `f` must have the declaring type (or one of its interfaces) as
    its type.
    """
    out = []
    object_like = defs.object_like()
    for name, t in object_like.items():
        own_names = {name} | {i.name.value for i in getattr(t, "interfaces", None) or ()}
        for f in t.fields or ():
            directive = find_directive(f, DERIVED_FROM)
            if directive is None:
                continue
            where = f"`{name}.{f.name.value}`"
            arg = utils.argument(directive, "field")
            if arg is None or not isinstance(arg.value, StringValueNode):
                out.append(f"@derivedFrom on {where} must have a string `field` argument")
                continue
            target_name = utils.named_type(f.type)
            target = object_like.get(target_name)
            if target is None:
                out.append(f"@derivedFrom on {where} refers to `{target_name}`, which is not an entity type or interface")
                continue
            back = field_map(target).get(arg.value.value)
            if back is None:
                out.append(f"@derivedFrom on {where}: field `{arg.value.value}` does not exist on type `{target_name}`")
            elif utils.named_type(back.type) not in own_names:
                out.append(
                    f"@derivedFrom on {where}: field `{target_name}.{arg.value.value}` "
                    f"must have type `{name}` or an interface it implements"
                )
    return out


def _require_field(t: ObjectTypeDefinitionNode, field_name: str, expected: str) -> bool:
    f = field_map(t).get(field_name)
    return f is not None and utils.type_str(f.type) == expected


def rule_timeseries(defs: Definitions) -> list[str]:
    out = []
    for name, t in defs.entities.items():
        if not is_timeseries(t):
            continue
        if not supports_aggregations(defs.spec_version):
            out.append(
                f"Timeseries entity `{name}` requires spec version {MIN_SPEC_VERSION_AGGREGATIONS} or higher"
            )
            continue
        if entity_flag(t, "immutable") is False:
            out.append(f"Timeseries entity `{name}` must be immutable")
        if "id" in field_map(t) and not _require_field(t, "id", "Int8!"):
            out.append(f"Timeseries entity `{name}` must have an `id: Int8!` field")
        if not _require_field(t, "timestamp", "Timestamp!"):
            out.append(f"Timeseries entity `{name}` must have a `timestamp: Timestamp!` field")
    return out


def rule_aggregations(defs: Definitions) -> list[str]:
    """
    Check `@aggregation` types against their timeseries source.

    Returns:
        Errors for bad intervals, sources, required fields, dimensions and
        `@aggregate` functions
    """
    out = []
    for name, t in defs.aggregations.items():
        where = f"Aggregation `{name}`"
        if not supports_aggregations(defs.spec_version):
            out.append(f"{where} requires spec version {MIN_SPEC_VERSION_AGGREGATIONS} or higher")
            continue
        directive = find_directive(t, AGGREGATION)

        intervals = utils.argument(directive, "intervals")
        if (
            intervals is None
            or not isinstance(intervals.value, ListValueNode)
            or not intervals.value.values
            or not all(isinstance(v, StringValueNode) for v in intervals.value.values)
        ):
            out.append(f"{where} must have a non-empty list of string `intervals`")
        else:
            for v in intervals.value.values:
                if v.value not in AGGREGATION_INTERVALS:
                    out.append(f"{where} has invalid interval `{v.value}`, expected one of: hour, day")

        source_arg = utils.argument(directive, "source")
        source = None
        if source_arg is None or not isinstance(source_arg.value, StringValueNode):
            out.append(f"{where} must have a string `source` argument")
        else:
            source = defs.entities.get(source_arg.value.value)
            if source is None or not is_timeseries(source):
                out.append(f"{where} has source `{source_arg.value.value}`, which is not a timeseries entity")
                source = None

        if not _require_field(t, "id", "Int8!"):
            out.append(f"{where} must have an `id: Int8!` field")
        if not _require_field(t, "timestamp", "Timestamp!"):
            out.append(f"{where} must have a `timestamp: Timestamp!` field")

        source_fields = field_map(source) if source is not None else {}
        for f in t.fields or ():
            field_name = f.name.value
            if field_name in ("id", "timestamp"):
                continue
            aggregate = find_directive(f, AGGREGATE)
            if aggregate is None:
                dim = source_fields.get(field_name)
                if source is not None and (dim is None or utils.type_str(dim.type) != utils.type_str(f.type)):
                    out.append(
                        f"{where}: dimension `{field_name}` must match a field of the same type on `{source.name.value}`"
                    )
                continue
            out.extend(_check_aggregate(where, field_name, aggregate, source, source_fields))
    return out


def _check_aggregate(
    where: str,
    field_name: str,
    aggregate: DirectiveNode,
    source: Optional[ObjectTypeDefinitionNode],
    source_fields: dict[str, FieldDefinitionNode],
) -> list[str]:
    out = []
    fn = utils.argument(aggregate, "fn")
    fn_name = fn.value.value if fn is not None and isinstance(fn.value, StringValueNode) else None
    if fn_name not in AGGREGATE_FUNCTIONS:
        out.append(
            f"{where}: field `{field_name}` has invalid aggregate function, "
            f"expected one of: {', '.join(sorted(AGGREGATE_FUNCTIONS))}"
        )
    arg = utils.argument(aggregate, "arg")
    if arg is None:
        if fn_name != "count":
            out.append(f"{where}: field `{field_name}` must name a source field in `arg`")
        return out
    if not isinstance(arg.value, StringValueNode):
        out.append(f"{where}: field `{field_name}` must have a string `arg`")
        return out
    if source is None:
        return out
    src = source_fields.get(arg.value.value)
    if src is None or utils.is_list_type(src.type) or utils.named_type(src.type) not in NUMERIC_TYPES:
        out.append(
            f"{where}: field `{field_name}` aggregates `{arg.value.value}`, "
            f"which is not a numeric field of `{source.name.value}`"
        )
    return out


def rule_fulltext(defs: Definitions) -> list[str]:
    """
    Check `@fulltext` definitions on `_Schema_`.

    Fulltext search is non-deterministic and only validates when the run
    configuration allows it.
    """
    schema_type = defs.schema_type
    if schema_type is None:
        return []
    directives = [d for d in schema_type.directives or () if d.name.value == FULLTEXT]
    if not directives:
        return []
    if not defs.cfg.allow_non_deterministic_fulltext_search:
        return [
            "Fulltext search is non-deterministic and disabled; "
            "enable `allow_non_deterministic_fulltext_search` in the configuration to allow it"
        ]

    out, names = [], set()
    for directive in directives:
        name_arg = utils.argument(directive, "name")
        if name_arg is None or not isinstance(name_arg.value, StringValueNode):
            out.append("@fulltext must have a string `name` argument")
            label = "@fulltext"
        else:
            name = name_arg.value.value
            label = f"@fulltext `{name}`"
            if name in names:
                out.append(f"{label} is defined more than once")
            names.add(name)

        language = utils.argument(directive, "language")
        if language is None or not isinstance(language.value, EnumValueNode):
            out.append(f"{label} must have a `language` argument")
        elif language.value.value not in FULLTEXT_LANGUAGES:
            out.append(f"{label} has unsupported language `{language.value.value}`")

        algorithm = utils.argument(directive, "algorithm")
        if algorithm is None or not isinstance(algorithm.value, EnumValueNode):
            out.append(f"{label} must have an `algorithm` argument")
        elif algorithm.value.value not in FULLTEXT_ALGORITHMS:
            out.append(f"{label} has unsupported algorithm `{algorithm.value.value}`, expected rank or proximityRank")

        out.extend(_check_fulltext_include(defs, label, utils.argument(directive, "include")))
    return out


def _check_fulltext_include(defs: Definitions, label: str, include: Optional[ArgumentNode]) -> list[str]:
    if include is None or not isinstance(include.value, ListValueNode):
        return [f"{label} must have an `include` list"]
    entries = include.value.values
    if len(entries) != 1:
        return [f"{label} must include exactly one entity"]
    entry = entries[0]
    if not isinstance(entry, ObjectValueNode):
        return [f"{label} include entries must be objects with `entity` and `fields`"]
    value = value_from_ast_untyped(entry)
    entity_name = value.get("entity")
    if not isinstance(entity_name, str):
        return [f"{label} include entry must have a string `entity`"]
    entity = defs.entities.get(entity_name)
    if entity is None:
        return [f"{label} includes `{entity_name}`, which is not an entity type"]
    fields = value.get("fields")
    if not isinstance(fields, list) or not fields:
        return [f"{label} must include a non-empty `fields` list for `{entity_name}`"]

    out = []
    entity_fields = field_map(entity)
    for item in fields:
        field_name = item.get("name") if isinstance(item, dict) else None
        if not isinstance(field_name, str):
            out.append(f"{label} include fields must be objects with a string `name`")
            continue
        f = entity_fields.get(field_name)
        if f is None or utils.is_list_type(f.type) or utils.named_type(f.type) != "String":
            out.append(f"{label} includes `{entity_name}.{field_name}`, which is not a String field")
    return out


# Definition-shape rules run first so the first error is the most actionable
RULES = [
    rule_supported_definitions,
    rule_duplicate_types,
    rule_reserved_types,
    rule_schema_type,
    rule_entity_directives,
    rule_entity_arguments,
    rule_id_fields,
    rule_field_names,
    rule_enum_values,
    rule_field_types,
    rule_interfaces,
    rule_derived_from,
    rule_timeseries,
    rule_aggregations,
    rule_fulltext,
]


def check(defs: Definitions) -> list[str]:
    """Run all rules in order and collect their errors."""
    out = []
    for rule in RULES:
        out.extend(rule(defs))
    return out
