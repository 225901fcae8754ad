"""Structured logging configuration using structlog.

structlog renders through stdlib ``logging`` so that the kubernetes client's
own log records end up in the same handlers: a console handler on stderr
(stdout is reserved for command output) and a rotating JSON file.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# Log file configuration
LOG_DIR = Path.home() / ".local" / "state" / "certctl"
LOG_FILE = LOG_DIR / "certctl.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
RETENTION_DAYS = 30

CONSOLE_HANDLER_NAME = "certctl-console"
FILE_HANDLER_NAME = "certctl-file"

# Libraries that log every request at DEBUG
_NOISY_LOGGERS = ("kubernetes", "urllib3")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_SHARED_PROCESSORS,
    )


def _install_handler(handler: logging.Handler, name: str) -> None:
    """Attach ``handler`` to the root logger, replacing an earlier one of the same name."""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == name]:
        root.removeHandler(existing)
        existing.close()
    handler.set_name(name)
    root.addHandler(handler)


def _cleanup_old_logs() -> None:
    """Delete rotated log files older than RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in LOG_DIR.glob(f"{LOG_FILE.name}*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            continue


def _setup_file_logging() -> None:
    """Write every record, DEBUG included, to the rotating JSON log."""
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        return  # read-only home; console logging still works

    _cleanup_old_logs()

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    _install_handler(file_handler, FILE_HANDLER_NAME)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    log_to_file: bool = True,
) -> None:
    """Configure structured logging for a certctl invocation.

    Console output goes to stderr at WARNING, INFO with ``verbose`` or DEBUG
    with ``debug``. The file log at ~/.local/state/certctl/certctl.log always
    records DEBUG (10MB max, 5 backups, 30-day retention). Calling this again
    replaces the handlers instead of stacking them.

    Args:
        verbose: Enable verbose (INFO level) output.
        debug: Enable debug mode (DEBUG level).
        json_output: Render console logs as JSON lines.
        log_to_file: Also write the rotating file log.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        # Handlers do the level filtering so the file log still sees DEBUG.
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_formatter(renderer))

    logging.getLogger().setLevel(logging.DEBUG)
    _install_handler(console_handler, CONSOLE_HANDLER_NAME)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)

    if log_to_file:
        _setup_file_logging()


def bind_invocation(**context: Any) -> None:
    """Tag every log line of this invocation with ``context`` (command, namespace, ...)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)

