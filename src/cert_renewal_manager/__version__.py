"""Version information for cert_renewal_manager."""

__version__ = "0.1.0"
