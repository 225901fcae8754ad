"""Kubernetes integration - API client and configuration models."""

from cert_renewal_manager.integrations.kubernetes.client import KubernetesClient
from cert_renewal_manager.integrations.kubernetes.config import (
    ClusterConfig,
    KubernetesDefaultsConfig,
    KubernetesPluginConfig,
)
from cert_renewal_manager.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

__all__ = [
    "ClusterConfig",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesDefaultsConfig",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesPluginConfig",
    "KubernetesValidationError",
]
