"""CLI output utilities.

Usage:
    from cert_renewal_manager.cli.output import Table

    table = Table(title="Results")
    table.add_column("Name", style="cyan")
    table.add_row("foo")
    console.print(table)
"""

from cert_renewal_manager.cli.output.progress import ConsoleReporter, render_results
from cert_renewal_manager.cli.output.table import Table

__all__ = ["ConsoleReporter", "Table", "render_results"]
