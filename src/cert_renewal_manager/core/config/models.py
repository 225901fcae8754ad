"""Root configuration model and YAML loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cert_renewal_manager.integrations.kubernetes.config import KubernetesPluginConfig
from cert_renewal_manager.services.renewal.models import PollPolicy

logger = structlog.get_logger()

# XDG-compliant config location
CONFIG_DIR = Path.home() / ".config" / "certctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class ConfigError(Exception):
    """The configuration file is unreadable or invalid."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class CertctlConfig(BaseModel):
    """Complete certctl configuration.

    Example ``~/.config/certctl/config.yaml``::

        kubernetes:
          active_cluster: staging
          clusters:
            staging:
              context: kind-staging
              namespace: certs
        polling:
          interval: 2
          timeout: 300
        fail_fast: true
    """

    model_config = ConfigDict(extra="forbid")

    kubernetes: KubernetesPluginConfig = Field(default_factory=KubernetesPluginConfig)
    polling: PollPolicy = Field(default_factory=PollPolicy)
    fail_fast: bool = True

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> CertctlConfig:
        """Build the config, letting CERTCTL_* environment variables win."""
        config_dict = dict(base_config) if base_config else {}
        config_dict["kubernetes"] = KubernetesPluginConfig.from_env(config_dict.get("kubernetes"))
        config_dict["polling"] = PollPolicy.from_env(config_dict.get("polling"))
        return cls.model_validate(config_dict)


def load_config(path: Path | None = None) -> CertctlConfig:
    """Load configuration from YAML with environment overrides.

    A missing file is not an error: defaults and environment apply.

    Args:
        path: Config file (defaults to ``~/.config/certctl/config.yaml``).

    Raises:
        ConfigError: The file exists but cannot be parsed or validated.
    """
    config_path = path or CONFIG_FILE
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file: {e}", config_path) from e
        if not isinstance(loaded, dict):
            raise ConfigError("Config file must contain a mapping", config_path)
        data = loaded
        logger.debug("loaded_config_file", path=str(config_path))

    try:
        return CertctlConfig.from_env(data)
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}", config_path) from e
