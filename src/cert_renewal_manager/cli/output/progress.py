"""Console progress output for renewal batches."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from cert_renewal_manager.cli.output.table import Table
from cert_renewal_manager.services.renewal.models import RenewalOutcome

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateRef,
        CertificateSummary,
    )
    from cert_renewal_manager.services.renewal.models import PollState, RenewalResult

OUTCOME_STYLES: dict[RenewalOutcome, str] = {
    RenewalOutcome.RENEWED: "green",
    RenewalOutcome.TRIGGERED: "green",
    RenewalOutcome.ALREADY_IN_PROGRESS: "yellow",
    RenewalOutcome.NOT_READY: "yellow",
    RenewalOutcome.TIMED_OUT: "red",
    RenewalOutcome.ERROR: "red",
}


class ConsoleReporter:
    """Writes one line per renewal phase transition to a Rich console."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def selected(self, certificates: list[CertificateSummary]) -> None:
        names = ", ".join(c.name for c in certificates)
        noun = "Certificate" if len(certificates) == 1 else "Certificates"
        self._console.print(f"Found {len(certificates)} {noun}: {escape(names)}")

    def triggered(self, ref: CertificateRef) -> None:
        self._console.print(f"Marked Certificate [cyan]{escape(str(ref))}[/cyan] for renewal")

    def poll_attempt(self, state: PollState) -> None:
        self._console.print(
            f"[dim]Waiting for Certificate {escape(str(state.ref))} to renew "
            f"(attempt {state.attempts}, {state.elapsed:.0f}s)[/dim]"
        )

    def finished(self, result: RenewalResult) -> None:
        style = OUTCOME_STYLES[result.outcome]
        ref = escape(str(result.ref))
        if result.outcome is RenewalOutcome.RENEWED:
            self._console.print(f"[{style}]Certificate {ref} is ready[/{style}]")
        elif result.outcome is RenewalOutcome.TRIGGERED:
            self._console.print(f"[{style}]Certificate {ref} renewal triggered[/{style}]")
        else:
            self._console.print(
                f"[{style}]{result.outcome.value}:[/{style}] {escape(result.detail or str(ref))}"
            )


def render_results(console: Console, results: list[RenewalResult]) -> None:
    """Print a summary table of a batch."""
    table = Table(title="Renewal Summary")
    table.add_column("Namespace")
    table.add_column("Certificate", style="cyan")
    table.add_column("Outcome")
    table.add_column("Attempts", justify="right")
    table.add_column("Detail", style="dim")
    for result in results:
        style = OUTCOME_STYLES[result.outcome]
        table.add_row(
            result.ref.namespace,
            result.ref.name,
            f"[{style}]{result.outcome.value}[/{style}]",
            str(result.attempts) if result.attempts else "-",
            escape(result.detail or ""),
        )
    console.print(table)
