"""Error types raised by the validation pipeline."""

from typing import Optional


class ValidatorError(Exception):
    """Base class for all subgraph-validate errors."""


class ConfigError(ValidatorError):
    """Invalid configuration (unknown spec version, malformed config file)."""


class IngestionError(ValidatorError):
    """Input file could not be read or a batch record is malformed.

    Fatal: aborts the whole run.
    """


class ParseError(ValidatorError):
    """Schema text does not conform to the GraphQL grammar."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"Syntax Error: {self.message}"
        return f"Syntax Error: {self.message} (line {self.line}, column {self.column})"


class IdentifierFormatError(ValidatorError):
    """A deployment identifier was present but has an invalid format."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"`{value}` is not a valid deployment hash")


class SchemaValidationError(ValidatorError):
    """Schema violates the structural rules of its spec version."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        if len(self.errors) == 1:
            return self.errors[0]
        return f"{len(self.errors)} errors: " + "; ".join(self.errors)


class ApiSchemaError(ValidatorError):
    """The consumer-facing API schema could not be derived."""
