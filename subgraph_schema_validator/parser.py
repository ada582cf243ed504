"""GraphQL schema document parsing."""

from graphql import DocumentNode, GraphQLSyntaxError, parse

from .errors import ParseError


def parse_schema(source: str) -> DocumentNode:
    """
    Parse GraphQL schema text into AST.

    Args:
        source: Schema definition language text

    Returns:
        DocumentNode AST

    Raises:
        ParseError: If the text is syntactically invalid
    """
    try:
        return parse(source)
    except GraphQLSyntaxError as e:
        line = column = None
        if e.locations:
            line, column = e.locations[0].line, e.locations[0].column
        # GraphQLSyntaxError messages carry a "Syntax Error: " prefix
        message = e.message.removeprefix("Syntax Error: ")
        raise ParseError(message, line, column) from e
