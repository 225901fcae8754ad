"""Configuration management with Pydantic validation."""

from cert_renewal_manager.core.config.models import (
    CONFIG_DIR,
    CONFIG_FILE,
    CertctlConfig,
    ConfigError,
    load_config,
)

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "CertctlConfig",
    "ConfigError",
    "load_config",
]
