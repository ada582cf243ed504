"""Reading schemas from single files and JSONL batch exports."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from . import utils
from .errors import IngestionError
from .pipeline import SchemaSource


@dataclass(frozen=True)
class BatchRecord:
    """One line of a batch export: numeric id and raw schema text."""

    id: int
    schema: str

    def label(self, prefix: str = "sgd") -> str:
        return f"{prefix}{self.id}"


def unescape(line: str) -> str:
    """
    Collapse every `\\\\` into `\\`.

    Database exports double the backslashes inside JSON string values.
    """
    return line.replace("\\\\", "\\")


def parse_record(line: str, location: str = "record") -> BatchRecord:
    """
    Parse one batch line into a record.

    Args:
        line: Raw line as read from the file
        location: `path:line` used in error messages

    Raises:
        IngestionError: If the line is not a JSON object with an integer
            `id` and a string `schema`
    """
    text = unescape(line.rstrip("\r\n"))
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IngestionError(f"{location}: line is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise IngestionError(f"{location}: expected a JSON object with `id` and `schema`")
    id_ = data.get("id")
    schema = data.get("schema")
    if not isinstance(id_, int) or isinstance(id_, bool):
        raise IngestionError(f"{location}: `id` must be an integer")
    if not isinstance(schema, str):
        raise IngestionError(f"{location}: `schema` must be a string")
    return BatchRecord(id=id_, schema=schema)


def _lines(path: str) -> Iterator[str]:
    try:
        with open(path, encoding="utf-8") as f:
            yield from f
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"Cannot read {path}: {e}") from e


def read_single(path: str) -> Iterator[SchemaSource]:
    """Yield the whole file as one schema labelled by its path."""
    try:
        raw = utils.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError(f"Cannot read {path}: {e}") from e
    yield SchemaSource(label=path, raw=raw)


def read_batch(path: str, prefix: str = "sgd") -> Iterator[SchemaSource]:
    """
    Yield one schema per line of a JSONL export, lazily.

    Records before a malformed line are yielded; the malformed line raises.
    """
    for lineno, line in enumerate(_lines(path), start=1):
        record = parse_record(line, f"{path}:{lineno}")
        yield SchemaSource(label=record.label(prefix), raw=record.schema)


class IngestMode(Enum):
    """How input files are turned into schemas; chosen once per run."""

    SINGLE = "single"
    BATCH = "batch"

    def read(self, path: str, prefix: str = "sgd") -> Iterator[SchemaSource]:
        """
        Iterate the schemas stored in `path`.

        Raises:
            IngestionError: On unreadable files or malformed batch records
        """
        if self is IngestMode.BATCH:
            return read_batch(path, prefix)
        return read_single(path)

    @property
    def header(self) -> str:
        return "Validating schemas from" if self is IngestMode.BATCH else "Validating schema from"
