"""Utility functions for schema document inspection."""

import re
from pathlib import Path
from typing import Any, Optional

from graphql import (
    ArgumentNode,
    DirectiveNode,
    ListTypeNode,
    NonNullTypeNode,
    TypeNode,
    print_ast,
    value_from_ast_untyped,
)


# File system utilities
def ensure_dir(path: str) -> None:
    """Ensure directory exists, creating it if necessary."""
    Path(path).mkdir(parents=True, exist_ok=True)


def exists(path: str) -> bool:
    """Check if file exists."""
    return Path(path).exists()


def dirname(path: str) -> str:
    """Get directory name from path."""
    return str(Path(path).parent)


def expand_path(path: str) -> str:
    """Expand ~ and environment variables in path."""
    return str(Path(path).expanduser())


def read_text(path: str) -> str:
    """Read text file."""
    return Path(path).read_text(encoding="utf-8")


# Type reference helpers
def named_type(type_node: TypeNode) -> str:
    """Unwrap non-null/list wrappers to get the named type."""
    while isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        type_node = type_node.type
    return type_node.name.value


def is_non_null(type_node: TypeNode) -> bool:
    return isinstance(type_node, NonNullTypeNode)


def is_list_type(type_node: TypeNode) -> bool:
    """Check if type is a list type."""
    # Unwrap non-null first
    if isinstance(type_node, NonNullTypeNode):
        type_node = type_node.type
    return isinstance(type_node, ListTypeNode)


def list_depth(type_node: TypeNode) -> int:
    """Number of list wrappers around the named type."""
    depth = 0
    while isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        if isinstance(type_node, ListTypeNode):
            depth += 1
        type_node = type_node.type
    return depth


def type_str(type_node: TypeNode) -> str:
    """Render a type reference as SDL, e.g. `[Token!]!`."""
    return print_ast(type_node)


# Directive helpers
def argument(directive: DirectiveNode, name: str) -> Optional[ArgumentNode]:
    """Find a directive argument by name."""
    for arg in directive.arguments or ():
        if arg.name.value == name:
            return arg
    return None


def argument_value(directive: DirectiveNode, name: str, default: Any = None) -> Any:
    """
    Get the Python value of a directive argument.

    Enum values come back as their name, lists and objects as Python
    lists and dicts.
    """
    arg = argument(directive, name)
    if arg is None:
        return default
    return value_from_ast_untyped(arg.value)


# Naming helpers
_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def lower_camel_case(name: str) -> str:
    """
    Convert a type name to lower camel case.

    Examples:
        TokenDayData -> tokenDayData
        ERC20Token -> erc20Token
    """
    words = _WORD.findall(name)
    if not words:
        return name
    return words[0].lower() + "".join(w[:1].upper() + w[1:] for w in words[1:])


_UNCOUNTABLE = {
    "equipment", "information", "rice", "money", "species", "series",
    "fish", "sheep", "jeans", "police", "data", "metadata",
}

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "zombie": "zombies",
}

# Checked in order, first match wins
_PLURAL_RULES = [
    (re.compile(r"(quiz)$", re.I), r"\1zes"),
    (re.compile(r"^(oxen)$", re.I), r"\1"),
    (re.compile(r"^(ox)$", re.I), r"\1en"),
    (re.compile(r"^(m|l)ice$", re.I), r"\1ice"),
    (re.compile(r"^(m|l)ouse$", re.I), r"\1ice"),
    (re.compile(r"(matr|vert|ind)(?:ix|ex)$", re.I), r"\1ices"),
    (re.compile(r"(x|ch|ss|sh)$", re.I), r"\1es"),
    (re.compile(r"([^aeiouy]|qu)y$", re.I), r"\1ies"),
    (re.compile(r"(hive)$", re.I), r"\1s"),
    (re.compile(r"(?:([^f])fe|([lr])f)$", re.I), r"\1\2ves"),
    (re.compile(r"sis$", re.I), "ses"),
    (re.compile(r"([ti])a$", re.I), r"\1a"),
    (re.compile(r"([ti])um$", re.I), r"\1a"),
    (re.compile(r"(buffal|tomat)o$", re.I), r"\1oes"),
    (re.compile(r"(bu)s$", re.I), r"\1ses"),
    (re.compile(r"(alias|status)$", re.I), r"\1es"),
    (re.compile(r"(octop|vir)(?:us|i)$", re.I), r"\1i"),
    (re.compile(r"^(ax|test)is$", re.I), r"\1es"),
    (re.compile(r"s$", re.I), "s"),
    (re.compile(r"$"), "s"),
]


def pluralize(word: str) -> str:
    """
    Pluralize an English word, preserving its prefix casing.

    Only the last camel case word is inflected, so `tokenDayData` stays
    `tokenDayData` and `userPosition` becomes `userPositions`.
    """
    words = _WORD.findall(word)
    last = words[-1] if words else word
    prefix = word[: len(word) - len(last)] if word.endswith(last) else ""
    if not prefix and last != word:
        last = word

    lower = last.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
        return prefix + last[:1] + plural[1:]
    for pattern, replacement in _PLURAL_RULES:
        if pattern.search(last):
            return prefix + pattern.sub(replacement, last, count=1)
    return word
