"""Logging configuration for cert_renewal_manager."""

from cert_renewal_manager.logging.config import bind_invocation, configure_logging

__all__ = ["bind_invocation", "configure_logging"]
