"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import structlog
import typer
from rich.console import Console

from cert_renewal_manager import __version__
from cert_renewal_manager.cli.commands.base import EXIT_USAGE
from cert_renewal_manager.cli.commands.certificates import register_certificate_commands
from cert_renewal_manager.core.config.models import CertctlConfig, ConfigError, load_config
from cert_renewal_manager.integrations.kubernetes.client import KubernetesClient
from cert_renewal_manager.logging.config import configure_logging
from cert_renewal_manager.services.kubernetes.certmanager_manager import CertManagerManager

app = typer.Typer(
    name="certctl",
    help="Manual renewal of cert-manager Certificates.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()
logger = structlog.get_logger()


class Runtime:
    """Per-invocation config and API client, created on first use."""

    def __init__(self, config_path: Path | None = None, context: str | None = None) -> None:
        self.config_path = config_path
        self.context = context
        self._config: CertctlConfig | None = None
        self._client: KubernetesClient | None = None

    def get_config(self) -> CertctlConfig:
        """Load configuration, exiting with a usage error if it is invalid."""
        if self._config is None:
            try:
                config = load_config(self.config_path)
            except ConfigError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                if e.path:
                    console.print(f"  File: {e.path}")
                raise typer.Exit(EXIT_USAGE) from None
            if self.context:
                config.kubernetes.active_cluster = self.context
            self._config = config
        return self._config

    def get_manager(self) -> CertManagerManager:
        """Create the Kubernetes client on first use and wrap it in a manager."""
        if self._client is None:
            self._client = KubernetesClient(self.get_config().kubernetes)
        return CertManagerManager(self._client)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        self._config = None


runtime = Runtime()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"certctl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: ~/.config/certctl/config.yaml).",
        dir_okay=False,
    ),
    context: str | None = typer.Option(
        None,
        "--context",
        help="Kubeconfig context or configured cluster name to use.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Write log output to stderr as JSON.",
    ),
) -> None:
    """certctl - Mark cert-manager Certificates for renewal and wait for them."""
    configure_logging(verbose=verbose, debug=debug, json_output=log_json)
    runtime.config_path = config_file
    runtime.context = context
    ctx.call_on_close(runtime.close)


register_certificate_commands(app, runtime.get_manager, runtime.get_config)


if __name__ == "__main__":
    app()
