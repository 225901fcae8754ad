"""Base utilities for certctl commands.

Provides common Typer options, error rendering, and signal-driven
cancellation shared by all commands.
"""

from __future__ import annotations

import signal
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Annotated, Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from cert_renewal_manager.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)
from cert_renewal_manager.services.renewal.exceptions import (
    BatchAbortedError,
    NotReadyError,
    RenewalCancelledError,
    RenewalError,
    RenewalTimeoutError,
    ResolutionError,
    SelectionValidationError,
    StatusReadError,
    TriggerError,
)
from cert_renewal_manager.services.renewal.models import PollPolicy

if TYPE_CHECKING:
    from cert_renewal_manager.services.renewal.poller import Sleeper

# Shared console instance
console = Console()

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


# =============================================================================
# Common Typer Annotations
# =============================================================================

NamesArgument = Annotated[
    list[str] | None,
    typer.Argument(
        help="Certificate names (cannot be combined with --selector)",
        show_default=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Namespace (defaults to config, then the kubeconfig context, then 'default')",
    ),
]

LabelSelectorOption = Annotated[
    str | None,
    typer.Option(
        "--selector",
        "-l",
        help="Selector (label query) to filter on, supports '=', '==', and '!='. "
        "(e.g. -l key1=value1,key2=value2)",
    ),
]

IntervalOption = Annotated[
    float | None,
    typer.Option(
        "--interval",
        help="Seconds between readiness checks (default: config or 1)",
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        help="Seconds to wait for each Certificate to become ready (default: config or 60)",
    ),
]


def build_policy(
    base: PollPolicy,
    interval: float | None = None,
    timeout: float | None = None,
) -> PollPolicy:
    """Apply --interval/--timeout on top of the configured policy.

    Raises:
        typer.Exit: With the usage exit code if the result is invalid.
    """
    overrides: dict[str, Any] = {}
    if interval is not None:
        overrides["interval"] = interval
    if timeout is not None:
        overrides["timeout"] = timeout
    if not overrides:
        return base
    try:
        return PollPolicy.model_validate({**base.model_dump(), **overrides})
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        console.print(f"[red]Error:[/red] Invalid polling options: {escape(messages)}")
        raise typer.Exit(EXIT_USAGE) from None


# =============================================================================
# Cancellation
# =============================================================================


@contextmanager
def cancel_on_signals(sleeper: Sleeper, *signals: signal.Signals) -> Iterator[None]:
    """Cancel ``sleeper`` when one of ``signals`` arrives (SIGTERM by default).

    SIGINT is left alone; it already interrupts the wait as KeyboardInterrupt.
    Handlers are restored on exit.
    """
    wanted = signals or (signal.SIGTERM,)

    def _handler(signum: int, frame: Any) -> None:
        cancel = getattr(sleeper, "cancel", None)
        if cancel is not None:
            cancel()

    previous = {}
    try:
        for sig in wanted:
            previous[sig] = signal.signal(sig, _handler)
    except ValueError:
        # Not the main thread: signal handlers cannot be installed here.
        pass
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> NoReturn:
    """Render a Kubernetes error with a hint and exit 1.

    Raises:
        typer.Exit: Always.
    """
    if isinstance(error, KubernetesConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        console.print(f"  {escape(error.message)}")
        if error.original_error:
            console.print(f"  Cause: {escape(str(error.original_error))}")
        console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        console.print("[red]Error:[/red] Authentication/authorization failed")
        console.print(f"  {escape(error.message)}")
        console.print(
            "\n[dim]Hint: Renewing needs get/list on certificates and patch on "
            "certificates/status in the cert-manager.io API group.[/dim]"
        )

    elif isinstance(error, KubernetesNotFoundError):
        console.print("[red]Error:[/red] Resource not found")
        console.print(f"  {escape(error.message)}")

    elif isinstance(error, KubernetesValidationError):
        console.print("[red]Error:[/red] Request rejected by the API server")
        console.print(f"  {escape(error.message)}")

    elif isinstance(error, KubernetesConflictError):
        console.print("[red]Error:[/red] Resource conflict")
        console.print(f"  {escape(error.message)}")

    else:
        console.print(f"[red]Error:[/red] {escape(error.message)}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(EXIT_FAILURE)


def handle_renewal_error(error: RenewalError) -> NoReturn:
    """Render a renewal error and exit with a matching code.

    Validation errors exit 2, cancellation 130, everything else 1.

    Raises:
        typer.Exit: Always.
    """
    if isinstance(error, BatchAbortedError) and isinstance(error.__cause__, RenewalError):
        cause = error.__cause__
        console.print(f"[red]Error:[/red] {escape(cause.message)}")
        _print_hint(cause)
        console.print("[dim]Remaining Certificates were not processed.[/dim]")
        raise typer.Exit(EXIT_FAILURE)

    if isinstance(error, SelectionValidationError):
        console.print(f"[red]Error:[/red] {escape(error.message)}")
        raise typer.Exit(EXIT_USAGE)

    if isinstance(error, RenewalCancelledError):
        console.print(f"[yellow]{escape(error.message)}[/yellow]")
        raise typer.Exit(EXIT_INTERRUPTED)

    console.print(f"[red]Error:[/red] {escape(error.message)}")
    _print_hint(error)
    raise typer.Exit(EXIT_FAILURE)


def _print_hint(error: RenewalError) -> None:
    if isinstance(error, RenewalTimeoutError):
        console.print(
            "\n[dim]Hint: The renewal was requested. Check progress with "
            "'certctl status' or raise --timeout.[/dim]"
        )
    elif isinstance(error, NotReadyError):
        console.print(
            "\n[dim]Hint: Only Ready Certificates can be renewed. "
            "Inspect them with 'certctl status'.[/dim]"
        )
    elif isinstance(error, (TriggerError, StatusReadError, ResolutionError)):
        cause = getattr(error, "cause", None)
        if isinstance(cause, KubernetesAuthError):
            console.print(
                "\n[dim]Hint: Check your RBAC permissions on cert-manager.io certificates.[/dim]"
            )
