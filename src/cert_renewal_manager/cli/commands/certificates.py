"""CLI commands for renewing and inspecting cert-manager Certificates."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated

import structlog
import typer
from rich.markup import escape

from cert_renewal_manager.cli.commands.base import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    IntervalOption,
    LabelSelectorOption,
    NamesArgument,
    NamespaceOption,
    TimeoutOption,
    build_policy,
    cancel_on_signals,
    console,
    handle_k8s_error,
    handle_renewal_error,
)
from cert_renewal_manager.cli.output import ConsoleReporter, Table, render_results
from cert_renewal_manager.integrations.kubernetes.exceptions import KubernetesError
from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CONDITION_ISSUING,
    CONDITION_READY,
)
from cert_renewal_manager.logging import bind_invocation
from cert_renewal_manager.services.renewal.exceptions import (
    BatchAbortedError,
    RenewalError,
)
from cert_renewal_manager.services.renewal.models import RenewalResult, SelectionCriteria
from cert_renewal_manager.services.renewal.orchestrator import RenewalOrchestrator
from cert_renewal_manager.services.renewal.poller import ReadinessPoller
from cert_renewal_manager.services.renewal.selector import SelectorResolver, validate_selection
from cert_renewal_manager.services.renewal.trigger import RenewalTrigger

if TYPE_CHECKING:
    from cert_renewal_manager.core.config.models import CertctlConfig
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateSummary,
        CertManagerCondition,
    )
    from cert_renewal_manager.services.kubernetes.certmanager_manager import (
        CertManagerManager,
    )

logger = structlog.get_logger()

_CONDITION_STYLES = {"True": "green", "False": "red", "Unknown": "yellow"}


def _selection(names: list[str] | None, selector: str | None) -> SelectionCriteria:
    """Build and validate the selection before anything touches the API."""
    criteria = SelectionCriteria(names=tuple(names or ()), label_selector=selector)
    try:
        validate_selection(criteria)
    except RenewalError as e:
        handle_renewal_error(e)
    return criteria


def _condition_cell(condition: CertManagerCondition | None) -> str:
    if condition is None:
        return "[dim]-[/dim]"
    style = _CONDITION_STYLES.get(condition.status.value, "white")
    return f"[{style}]{condition.status.value}[/{style}]"


def _render_status(certificates: list[CertificateSummary]) -> None:
    table = Table(title="Certificates")
    table.add_column("Namespace")
    table.add_column("Name", style="cyan")
    table.add_column("Ready")
    table.add_column("Issuing")
    table.add_column("Reason")
    table.add_column("Not After")
    table.add_column("Renewal Time")
    table.add_column("Revision", justify="right")
    table.add_column("Age")
    for cert in certificates:
        ready = cert.status.get_condition(CONDITION_READY)
        table.add_row(
            cert.namespace or "",
            cert.name,
            _condition_cell(ready),
            _condition_cell(cert.status.get_condition(CONDITION_ISSUING)),
            escape(ready.reason) if ready and ready.reason else "-",
            cert.status.not_after or "-",
            cert.status.renewal_time or "-",
            str(cert.status.revision) if cert.status.revision is not None else "-",
            cert.age,
        )
    console.print(table)


def register_certificate_commands(
    app: typer.Typer,
    get_manager: Callable[[], CertManagerManager],
    get_config: Callable[[], CertctlConfig],
) -> None:
    """Register the renew and status commands on ``app``."""

    @app.command("renew")
    def renew(
        names: NamesArgument = None,
        selector: LabelSelectorOption = None,
        namespace: NamespaceOption = None,
        interval: IntervalOption = None,
        timeout: TimeoutOption = None,
        continue_on_error: Annotated[
            bool,
            typer.Option(
                "--continue-on-error",
                help="Attempt every Certificate and report failures at the end "
                "instead of stopping at the first one",
            ),
        ] = False,
        no_wait: Annotated[
            bool,
            typer.Option(
                "--no-wait",
                help="Only mark Certificates for renewal; do not wait for them to become ready",
            ),
        ] = False,
    ) -> None:
        """Mark Certificates for manual renewal and wait until they are ready.

        Each Certificate must currently be Ready. Certificates are renewed one
        at a time, in the order given (or as listed by the API server for
        --selector).

        The wait ends at the first check that reads Ready=True. That check
        can run before cert-manager picks up the request, so a quick success
        confirms the request was accepted, not that a new certificate was
        issued. Compare the revision in 'certctl status' to confirm.

        Examples:
            certctl renew my-tls
            certctl renew my-tls other-tls -n production
            certctl renew -l app=web --timeout 300
        """
        criteria = _selection(names, selector)
        config = get_config()
        policy = build_policy(config.polling, interval, timeout)
        fail_fast = config.fail_fast and not continue_on_error

        results: list[RenewalResult] = []
        try:
            manager = get_manager()
            ns = namespace or manager.default_namespace
            bind_invocation(command="renew", namespace=ns, context=manager.current_context)
            poller = ReadinessPoller(manager, policy)
            orchestrator = RenewalOrchestrator(
                SelectorResolver(manager),
                RenewalTrigger(manager),
                poller,
                ConsoleReporter(console),
                fail_fast=fail_fast,
                wait=not no_wait,
            )
            logger.info(
                "renew_command",
                namespace=ns,
                names=list(criteria.names),
                selector=criteria.label_selector,
                interval=policy.interval,
                timeout=policy.timeout,
                fail_fast=fail_fast,
            )
            with cancel_on_signals(poller.sleeper):
                results = orchestrator.run(criteria, ns)
        except BatchAbortedError as e:
            if len(e.results) > 1:
                render_results(console, e.results)
            handle_renewal_error(e)
        except RenewalError as e:
            handle_renewal_error(e)
        except KubernetesError as e:
            handle_k8s_error(e)
        except KeyboardInterrupt:
            console.print("[yellow]Interrupted[/yellow]")
            raise typer.Exit(EXIT_INTERRUPTED) from None

        failed = [r for r in results if not r.succeeded]
        if len(results) > 1 or failed:
            render_results(console, results)
        if failed:
            raise typer.Exit(EXIT_FAILURE)

    @app.command("status")
    def status(
        names: NamesArgument = None,
        selector: LabelSelectorOption = None,
        namespace: NamespaceOption = None,
        wait: Annotated[
            bool,
            typer.Option("--wait", "-w", help="Wait for every selected Certificate to be ready"),
        ] = False,
        interval: IntervalOption = None,
        timeout: TimeoutOption = None,
    ) -> None:
        """Show readiness of Certificates, optionally waiting until they are ready.

        Examples:
            certctl status my-tls
            certctl status -l app=web -n production
            certctl status my-tls --wait --timeout 120
        """
        criteria = _selection(names, selector)
        config = get_config()
        policy = build_policy(config.polling, interval, timeout)

        try:
            manager = get_manager()
            ns = namespace or manager.default_namespace
            bind_invocation(command="status", namespace=ns, context=manager.current_context)
            certificates = SelectorResolver(manager).resolve(criteria, ns)
            _render_status(certificates)
            if not wait:
                return

            poller = ReadinessPoller(manager, policy)
            reporter = ConsoleReporter(console)
            with cancel_on_signals(poller.sleeper):
                for cert in certificates:
                    state = poller.wait_until_ready(cert.ref, on_attempt=reporter.poll_attempt)
                    console.print(
                        f"[green]Certificate {escape(str(cert.ref))} is ready[/green] "
                        f"[dim](after {state.attempts} checks)[/dim]"
                    )
        except RenewalError as e:
            handle_renewal_error(e)
        except KubernetesError as e:
            handle_k8s_error(e)
        except KeyboardInterrupt:
            console.print("[yellow]Interrupted[/yellow]")
            raise typer.Exit(EXIT_INTERRUPTED) from None
