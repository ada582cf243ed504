"""Validated, structured representation of a subgraph input schema."""

from dataclasses import dataclass
from typing import Optional

from graphql import DocumentNode, FieldDefinitionNode, TypeNode, value_from_ast_untyped

from . import parser, rules, utils
from .config import Config
from .errors import SchemaValidationError
from .identifier import DeploymentHash, find_directive
from .versions import SpecVersion


@dataclass(frozen=True)
class Field:
    """A field of an entity type, interface or aggregation."""

    name: str
    type: TypeNode
    derived_from: Optional[str] = None
    aggregate_fn: Optional[str] = None

    @property
    def type_name(self) -> str:
        return utils.named_type(self.type)

    @property
    def is_list(self) -> bool:
        return utils.is_list_type(self.type)

    @property
    def sdl(self) -> str:
        return utils.type_str(self.type)


@dataclass(frozen=True)
class ObjectType:
    """An entity type or interface."""

    name: str
    fields: tuple[Field, ...]
    interfaces: tuple[str, ...] = ()
    is_interface: bool = False

    def field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def id_type(self) -> str:
        return self.field("id").type_name


@dataclass(frozen=True)
class Aggregation:
    """An `@aggregation` type computed from a timeseries source."""

    name: str
    fields: tuple[Field, ...]


@dataclass(frozen=True)
class FulltextDefinition:
    """A `@fulltext` search declared on `_Schema_`."""

    name: str
    entity: str


@dataclass(frozen=True)
class InputSchema:
    """
    A schema that passed every structural rule of its spec version.

    Instances only come from `InputSchema.parse`; there is no partially
    valid InputSchema.
    """

    spec_version: SpecVersion
    id: DeploymentHash
    document: DocumentNode
    types: dict[str, ObjectType]
    enums: dict[str, tuple[str, ...]]
    aggregations: dict[str, Aggregation]
    fulltext: tuple[FulltextDefinition, ...]

    @classmethod
    def parse(
        cls,
        spec_version: SpecVersion,
        raw: str,
        id: DeploymentHash,
        cfg: Optional[Config] = None,
    ) -> "InputSchema":
        """
        Parse and validate raw schema text.

        Args:
            spec_version: Version whose rules apply
            raw: Schema definition language text
            id: Deployment hash the schema belongs to
            cfg: Run configuration; defaults to `Config()`

        Returns:
            Validated InputSchema

        Raises:
            ParseError: If the text is syntactically invalid
            SchemaValidationError: If any structural rule is violated
        """
        doc = parser.parse_schema(raw)
        return cls.from_document(spec_version, doc, id, cfg)

    @classmethod
    def from_document(
        cls,
        spec_version: SpecVersion,
        doc: DocumentNode,
        id: DeploymentHash,
        cfg: Optional[Config] = None,
    ) -> "InputSchema":
        """Validate an already parsed document; see `parse`."""
        defs = rules.index(doc, spec_version, cfg or Config())
        errors = rules.check(defs)
        if errors:
            raise SchemaValidationError(errors)

        types = {}
        for name, t in defs.entities.items():
            types[name] = ObjectType(
                name=name,
                fields=_fields(t.fields),
                interfaces=tuple(i.name.value for i in t.interfaces or ()),
            )
        for name, t in defs.interfaces.items():
            types[name] = ObjectType(name=name, fields=_fields(t.fields), is_interface=True)

        enums = {
            name: tuple(v.name.value for v in e.values or ())
            for name, e in defs.enums.items()
        }

        aggregations = {
            name: Aggregation(name=name, fields=_fields(t.fields))
            for name, t in defs.aggregations.items()
        }

        return cls(
            spec_version=spec_version,
            id=id,
            document=doc,
            types=types,
            enums=enums,
            aggregations=aggregations,
            fulltext=_fulltext(defs),
        )


def _fields(nodes: Optional[tuple[FieldDefinitionNode, ...]]) -> tuple[Field, ...]:
    out = []
    for node in nodes or ():
        derived = find_directive(node, rules.DERIVED_FROM)
        aggregate = find_directive(node, rules.AGGREGATE)
        out.append(
            Field(
                name=node.name.value,
                type=node.type,
                derived_from=utils.argument_value(derived, "field") if derived else None,
                aggregate_fn=utils.argument_value(aggregate, "fn") if aggregate else None,
            )
        )
    return tuple(out)


def _fulltext(defs: rules.Definitions) -> tuple[FulltextDefinition, ...]:
    schema_type = defs.schema_type
    if schema_type is None:
        return ()
    out = []
    for directive in schema_type.directives or ():
        if directive.name.value != rules.FULLTEXT:
            continue
        include = value_from_ast_untyped(utils.argument(directive, "include").value)[0]
        out.append(
            FulltextDefinition(
                name=utils.argument_value(directive, "name"),
                entity=include["entity"],
            )
        )
    return tuple(out)
