"""Table rendering for publish outcomes."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from fastpublish.commands.results import OutcomeStatus, PublishOutcome

_STATUS_STYLES = {
    OutcomeStatus.SUCCEEDED: "green",
    OutcomeStatus.SKIPPED: "yellow",
    OutcomeStatus.FAILED: "red",
}


def print_outcomes(outcomes: Sequence[PublishOutcome], console: Console) -> None:
    """Print one row per package summarizing what happened.

    Args:
        outcomes: Pipeline results, in the order the directories were given.
        console: Console to print to.
    """
    if not outcomes:
        return

    table = Table()
    table.add_column("Package", style="cyan")
    table.add_column("Status")
    table.add_column("Version", style="green")
    table.add_column("Tag", style="blue")
    table.add_column("Note", style="dim")

    for outcome in outcomes:
        style = _STATUS_STYLES[outcome.status]
        if outcome.failed and outcome.stage is not None:
            note = f"failed at {outcome.stage.value}"
            if outcome.recovery_hint:
                note += f"; {outcome.recovery_hint}"
        else:
            note = outcome.reason or ""

        table.add_row(
            outcome.package_name,
            f"[{style}]{outcome.status.value}[/{style}]",
            outcome.new_version or "",
            outcome.tag or "",
            note,
        )

    console.print(table)
