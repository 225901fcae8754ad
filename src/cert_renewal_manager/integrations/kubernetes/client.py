"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with kubeconfig / in-cluster
loading, ambient namespace discovery, lazy API initialization, retry logic,
and consistent error translation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cert_renewal_manager.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import ApiException, CustomObjectsApi
    from tenacity import RetryCallState

    from cert_renewal_manager.integrations.kubernetes.config import (
        KubernetesPluginConfig,
    )

logger = structlog.get_logger()

DEFAULT_NAMESPACE = "default"
IN_CLUSTER_CONTEXT = "in-cluster"
SERVICE_ACCOUNT_NAMESPACE_FILE = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")


def _status_message(e: ApiException) -> str | None:
    """Prefer the message of the Status object in the response body over the HTTP reason."""
    if e.body:
        try:
            body = json.loads(e.body)
        except (TypeError, ValueError):
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return e.reason or None


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retrying_api_read",
        attempt=retry_state.attempt_number,
        error=str(error),
    )


class KubernetesClient:
    """Kubernetes API client.

    Wraps the official kubernetes Python client with:
    - kubeconfig loading with in-cluster fallback
    - Ambient namespace resolution (config, then kubeconfig context)
    - Lazy ``CustomObjectsApi`` initialization
    - Retry with tenacity for transient connection errors
    - Consistent error translation to custom exceptions
    - Context manager support

    Example:
        ```python
        config = KubernetesPluginConfig.from_env()
        with KubernetesClient(config) as client:
            client.custom_objects.list_namespaced_custom_object(...)
        ```
    """

    def __init__(self, plugin_config: KubernetesPluginConfig) -> None:
        """Initialize the client from plugin config.

        Args:
            plugin_config: Complete Kubernetes access configuration.

        Raises:
            KubernetesConnectionError: If neither kubeconfig nor in-cluster
                configuration can be loaded.
        """
        self._config = plugin_config
        self._retries = plugin_config.defaults.retry_attempts
        self._current_context: str | None = None
        self._context_namespace: str | None = None

        self._custom_objects: CustomObjectsApi | None = None

        self._load_config()

        logger.info(
            "Kubernetes client initialized",
            context=self._current_context,
            default_namespace=self.default_namespace,
        )

    def _load_config(self) -> None:
        """Load Kubernetes configuration from kubeconfig or in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        active_context = self._config.get_active_context()
        kubeconfig_path = self._config.get_active_kubeconfig()

        try:
            config.load_kube_config(
                config_file=kubeconfig_path,
                context=active_context,
            )
            self._current_context, self._context_namespace = self._read_context(
                kubeconfig_path, active_context
            )
            logger.debug(
                "loaded_kubeconfig",
                context=self._current_context,
                kubeconfig=kubeconfig_path,
            )
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = IN_CLUSTER_CONTEXT
                self._context_namespace = self._read_service_account_namespace()
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._custom_objects = None

    @staticmethod
    def _read_context(
        kubeconfig_path: str | None, context_name: str | None
    ) -> tuple[str | None, str | None]:
        """Return the loaded context name and its namespace, if any."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        try:
            contexts, active = config.list_kube_config_contexts(config_file=kubeconfig_path)
        except ConfigException:
            return context_name, None

        selected = active
        if context_name:
            selected = next((c for c in contexts if c.get("name") == context_name), active)
        if not selected:
            return context_name, None
        namespace = selected.get("context", {}).get("namespace")
        return selected.get("name", context_name), namespace

    @staticmethod
    def _read_service_account_namespace() -> str | None:
        try:
            return SERVICE_ACCOUNT_NAMESPACE_FILE.read_text().strip() or None
        except OSError:
            return None

    @property
    def custom_objects(self) -> CustomObjectsApi:
        """Get CustomObjectsApi instance (cert-manager CRDs)."""
        if self._custom_objects is None:
            from kubernetes.client import CustomObjectsApi

            self._custom_objects = CustomObjectsApi()
        return self._custom_objects

    def get_current_context(self) -> str:
        """Get the current context name, or 'in-cluster' inside a pod."""
        return self._current_context or "unknown"

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Map a client-library failure onto the KubernetesError hierarchy.

        Already-translated errors pass through unchanged, so translating twice
        is harmless.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError

        if isinstance(e, KubernetesError):
            return e
        if isinstance(e, HTTPError):
            return KubernetesConnectionError(
                message=f"Cannot reach the Kubernetes API server: {e}",
                original_error=e,
            )
        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status
        detail = _status_message(e)
        located: dict[str, Any] = {
            "resource_type": resource_type,
            "resource_name": resource_name,
            "namespace": namespace,
        }

        match status:
            case 401 | 403:
                return KubernetesAuthError(
                    message=detail or "Authentication/authorization failed",
                    status_code=status,
                    reason=e.reason,
                )
            case 404:
                return KubernetesNotFoundError(**located)
            case 409:
                return KubernetesConflictError(**located)
            case 400 | 422:
                return KubernetesValidationError(
                    message=detail or "Validation failed",
                    status_code=status,
                )
        return KubernetesError(
            message=detail or f"Kubernetes API error: {status}",
            status_code=status,
            **located,
        )

    def make_retry_decorator(self) -> Any:
        """Retry policy for idempotent reads.

        Only ``KubernetesConnectionError`` is retried, up to
        ``defaults.retry_attempts`` tries with exponential backoff; the last
        error is re-raised as-is.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            before_sleep=_log_retry,
            reraise=True,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def default_namespace(self) -> str:
        """Get the ambient namespace.

        Configured namespace first, then the namespace of the loaded
        kubeconfig context (or service account), then ``default``.
        """
        return (
            self._config.get_active_namespace() or self._context_namespace or DEFAULT_NAMESPACE
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        if self._custom_objects is not None:
            self._custom_objects.api_client.close()
        self._custom_objects = None
        logger.debug("Kubernetes client closed")

    def __enter__(self) -> KubernetesClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
