"""Kubernetes integration configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class ClusterConfig(BaseModel):
    """Configuration for a single named cluster."""

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str = "~/.kube/config"
    namespace: str | None = None

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())


class KubernetesDefaultsConfig(BaseModel):
    """Default settings for API access."""

    model_config = ConfigDict(extra="forbid")

    retry_attempts: int = 3

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one (the first try)."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v


class KubernetesPluginConfig(BaseModel):
    """Complete Kubernetes access configuration.

    With no clusters configured the client falls back to the current
    kubeconfig context, the same way ``kubectl`` does.
    """

    model_config = ConfigDict(extra="forbid")

    clusters: dict[str, ClusterConfig] = {}
    active_cluster: str | None = None
    namespace: str | None = None
    kubeconfig: str | None = None
    defaults: KubernetesDefaultsConfig = KubernetesDefaultsConfig()

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KubernetesPluginConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            CERTCTL_CONTEXT: Override active cluster or kubeconfig context
            CERTCTL_NAMESPACE: Override the ambient namespace
            CERTCTL_KUBECONFIG: Override kubeconfig path
        """
        config_dict = dict(base_config) if base_config else {}

        if context := os.environ.get("CERTCTL_CONTEXT"):
            config_dict["active_cluster"] = context

        if namespace := os.environ.get("CERTCTL_NAMESPACE"):
            config_dict["namespace"] = namespace

        if kubeconfig := os.environ.get("CERTCTL_KUBECONFIG"):
            config_dict["kubeconfig"] = str(Path(kubeconfig).expanduser())

        return cls.model_validate(config_dict)

    def _active_cluster_config(self) -> ClusterConfig | None:
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster]
        if not self.active_cluster and self.clusters:
            return next(iter(self.clusters.values()))
        return None

    def get_active_context(self) -> str | None:
        """Get the kubeconfig context to load.

        Returns the context of the active named cluster, the raw
        ``active_cluster`` value when it does not name a configured cluster,
        the first cluster's context, or None for the kubeconfig default.
        """
        if cluster := self._active_cluster_config():
            return cluster.context or None
        return self.active_cluster

    def get_active_kubeconfig(self) -> str | None:
        """Get the kubeconfig path, or None for the client library default."""
        if self.kubeconfig:
            return self.kubeconfig
        if cluster := self._active_cluster_config():
            return cluster.kubeconfig
        return None

    def get_active_namespace(self) -> str | None:
        """Get the configured namespace, or None to defer to kubeconfig."""
        if self.namespace:
            return self.namespace
        if cluster := self._active_cluster_config():
            return cluster.namespace
        return None
