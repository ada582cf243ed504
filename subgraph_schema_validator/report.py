"""Output formatting and reporting."""

from collections import Counter
from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text

from .ingest import IngestMode
from .pipeline import PipelineOutcome

# One report line per schema, never wrapped and never parsed as markup
console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)


@dataclass
class RunSummary:
    """Tally of outcomes over a run."""

    total: int = 0
    passed: int = 0
    failed: Counter = field(default_factory=Counter)

    def record(self, outcome: PipelineOutcome) -> None:
        self.total += 1
        failure = outcome.failure
        if failure is None:
            self.passed += 1
        else:
            self.failed[failure.stage.value] += 1


def format_line(outcome: PipelineOutcome) -> str:
    """
    Render the single report line for an outcome.

    Returns:
        `Schema <label>[<id>]: OK` or `<Stage>: <label>[<id>]: <error>`
    """
    subject = f"{outcome.label}[{outcome.deployment_id}]"
    failure = outcome.failure
    if failure is None:
        return f"Schema {subject}: OK"
    return f"{failure.stage.value}: {subject}: {failure.error}"


def emit(outcome: PipelineOutcome) -> None:
    """Print the report line for one schema."""
    line = format_line(outcome)
    if outcome.ok:
        console.print(Text(line))
    else:
        stage, rest = line.split(":", 1)
        console.print(Text.assemble((stage, "red"), ":", rest))


def header(mode: IngestMode, path: str) -> None:
    console.print(Text(f"{mode.header} {path}", style="cyan"))


def emit_summary(summary: RunSummary) -> None:
    """
    Print the closing tally.

    Args:
        summary: Outcomes recorded during the run
    """
    failed = sum(summary.failed.values())
    text = f"Validated {summary.total} schema(s): {summary.passed} OK, {failed} failed"
    if summary.failed:
        text += " (" + ", ".join(f"{stage}: {n}" for stage, n in sorted(summary.failed.items())) + ")"
    console.print(Text(text, style="bold green" if not failed else "bold yellow"))


def error(message: str) -> None:
    """Print a fatal error to stderr."""
    err_console.print(Text(f"Error: {message}", style="red"))
