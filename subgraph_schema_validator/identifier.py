"""Deployment identifier extraction."""

import re
from typing import Optional, Protocol, Sequence

from graphql import DirectiveNode, DocumentNode, ObjectTypeDefinitionNode, StringValueNode

from . import utils
from .errors import IdentifierFormatError

SUBGRAPH_ID_DIRECTIVE = "subgraphId"
SUBGRAPH_ID_ARGUMENT = "id"
UNKNOWN_ID = "unknown"

MAX_HASH_LENGTH = 46
_HASH_CHARS = re.compile(r"[A-Za-z0-9_]+")


class HasDirectives(Protocol):
    """Any definition node that can carry directives."""

    directives: Optional[Sequence[DirectiveNode]]


def find_directive(definition: HasDirectives, name: str) -> Optional[DirectiveNode]:
    """Find the first directive called `name` on a type, field or extension node."""
    for directive in definition.directives or ():
        if directive.name.value == name:
            return directive
    return None


def has_directive(definition: HasDirectives, name: str) -> bool:
    return find_directive(definition, name) is not None


class DeploymentHash(str):
    """A validated deployment identifier."""

    @classmethod
    def new(cls, value: str) -> "DeploymentHash":
        """
        Check `value` against the deployment hash format.

        Raises:
            IdentifierFormatError: If value is empty, too long, or has
                characters other than ASCII letters, digits and `_`
        """
        if len(value) > MAX_HASH_LENGTH or not _HASH_CHARS.fullmatch(value):
            raise IdentifierFormatError(value)
        return cls(value)


def object_type_definitions(doc: DocumentNode) -> list[ObjectTypeDefinitionNode]:
    """Object type definitions in declaration order."""
    return [d for d in doc.definitions if isinstance(d, ObjectTypeDefinitionNode)]


def declared_id(doc: DocumentNode) -> str:
    """
    Read the identifier declared on the first object type.

    Falls back to `unknown` when there is no object type, no `@subgraphId`
    directive, no `id` argument, or the argument is not a string.
    """
    types = object_type_definitions(doc)
    if not types:
        return UNKNOWN_ID
    directive = find_directive(types[0], SUBGRAPH_ID_DIRECTIVE)
    if directive is None:
        return UNKNOWN_ID
    arg = utils.argument(directive, SUBGRAPH_ID_ARGUMENT)
    if arg is None or not isinstance(arg.value, StringValueNode):
        return UNKNOWN_ID
    return arg.value.value


def subgraph_id(doc: DocumentNode) -> DeploymentHash:
    """
    Extract the deployment hash declared in a schema document.

    Raises:
        IdentifierFormatError: If a declared identifier has an invalid format
    """
    return DeploymentHash.new(declared_id(doc))
