"""Parse -> identify -> validate -> derive pipeline for one schema."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from graphql import DocumentNode

from . import api_schema, identifier, parser
from .api_schema import ApiSchema
from .config import Config
from .errors import ApiSchemaError, IdentifierFormatError, ParseError, SchemaValidationError
from .identifier import DeploymentHash
from .input_schema import InputSchema

T = TypeVar("T")


class Stage(str, Enum):
    """Pipeline stages, valued by the name shown in reports."""

    PARSE = "Parse"
    IDENTIFIER = "Identifier"
    INPUT_SCHEMA = "InputSchema"
    API_SCHEMA = "ApiSchema"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a single stage: a value or the error it failed with."""

    stage: Stage
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SchemaSource:
    """Raw schema text and the label it is reported under."""

    label: str
    raw: str


@dataclass(frozen=True)
class PipelineOutcome:
    """
    Per-stage results for one schema.

    Stages after a failed one are not run and stay None. `api_schema` is
    also None when derivation was not requested.
    """

    label: str
    parse: StageResult[DocumentNode]
    identifier: Optional[StageResult[DeploymentHash]] = None
    input_schema: Optional[StageResult[InputSchema]] = None
    api_schema: Optional[StageResult[ApiSchema]] = None

    @property
    def deployment_id(self) -> str:
        """The extracted identifier, the rejected raw value, or `unknown`."""
        if self.identifier is None:
            return identifier.UNKNOWN_ID
        if self.identifier.ok:
            return self.identifier.value
        return self.identifier.error.value

    @property
    def results(self) -> list[StageResult]:
        stages = [self.parse, self.identifier, self.input_schema, self.api_schema]
        return [r for r in stages if r is not None]

    @property
    def failure(self) -> Optional[StageResult]:
        """First failed stage, None when every stage that ran succeeded."""
        for result in self.results:
            if not result.ok:
                return result
        return None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _attempt(stage: Stage, fn: Callable[[], Any], errors: tuple) -> StageResult:
    try:
        return StageResult(stage, value=fn())
    except errors as e:
        return StageResult(stage, error=e)


def run(source: SchemaSource, cfg: Config, api: bool = False) -> PipelineOutcome:
    """
    Run every stage for one schema.

    Stage errors are captured in the outcome; nothing raised by one schema
    affects another.

    Args:
        source: Schema text and its report label
        cfg: Run configuration (spec version, fulltext switch)
        api: Also derive the API schema

    Returns:
        PipelineOutcome holding one StageResult per stage that ran
    """
    parsed = _attempt(Stage.PARSE, lambda: parser.parse_schema(source.raw), (ParseError,))
    if not parsed.ok:
        return PipelineOutcome(source.label, parsed)

    ident = _attempt(Stage.IDENTIFIER, lambda: identifier.subgraph_id(parsed.value), (IdentifierFormatError,))
    if not ident.ok:
        return PipelineOutcome(source.label, parsed, ident)

    validated = _attempt(
        Stage.INPUT_SCHEMA,
        lambda: InputSchema.parse(cfg.spec_version, source.raw, ident.value, cfg),
        (ParseError, SchemaValidationError),
    )
    if not validated.ok or not api:
        return PipelineOutcome(source.label, parsed, ident, validated)

    derived = _attempt(
        Stage.API_SCHEMA,
        lambda: api_schema.derive(validated.value),
        (ApiSchemaError,),
    )
    return PipelineOutcome(source.label, parsed, ident, validated, derived)
