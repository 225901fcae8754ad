"""Base manager for Kubernetes service managers.

Provides shared infrastructure for resource managers, including client
access, namespace resolution, retried reads, and error translation.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, NoReturn, TypeVar

import structlog

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()

T = TypeVar("T")


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Provides shared concerns for all managers:
    - Client reference and API access
    - Structured logging with entity binding
    - Namespace resolution with client fallback
    - Consistent API error translation

    Subclasses set ``_entity_name`` for structured log context.
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def default_namespace(self) -> str:
        """The ambient namespace used when none is given."""
        return self._client.default_namespace

    @property
    def current_context(self) -> str:
        """The kubeconfig context in use, or 'in-cluster' inside a pod."""
        return self._client.get_current_context()

    def _resolve_namespace(self, namespace: str | None) -> str:
        """Resolve namespace, falling back to the client's ambient namespace."""
        return namespace or self._client.default_namespace

    def _handle_api_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> NoReturn:
        """Translate a Kubernetes API exception and re-raise.

        Raises:
            KubernetesError: Always raises an appropriate subclass.
        """
        raise self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    def _read_with_retry(
        self,
        call: Callable[[], T],
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> T:
        """Run a read-only API call, retrying transient connection failures.

        Translation happens inside the retried function so the retry policy
        sees ``KubernetesConnectionError`` rather than raw transport errors.
        Never use this for writes.
        """

        @self._client.make_retry_decorator()
        def _attempt() -> T:
            try:
                return call()
            except Exception as e:
                self._handle_api_error(e, resource_type, resource_name, namespace)

        return _attempt()
