"""Table output for CLI commands.

Wraps Rich's Table so every command renders with the same defaults: columns
fold long values instead of truncating them, which matters for long
Certificate names and condition messages.
"""

from __future__ import annotations

from typing import Any

from rich import box
from rich.table import Table as RichTable


class Table(RichTable):
    """Rich Table with certctl defaults.

    Usage:
        table = Table(title="Certificates")
        table.add_column("Name", style="cyan")
        table.add_row("my-tls")
    """

    def __init__(self, *headers: Any, **kwargs: Any) -> None:
        kwargs.setdefault("box", box.SIMPLE_HEAD)
        kwargs.setdefault("header_style", "bold")
        super().__init__(*headers, **kwargs)

    def add_column(self, *args: Any, **kwargs: Any) -> None:
        """Add a column with overflow="fold" unless told otherwise."""
        kwargs.setdefault("overflow", "fold")
        super().add_column(*args, **kwargs)
