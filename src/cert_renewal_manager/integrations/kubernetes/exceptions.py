"""Errors raised by the Kubernetes integration.

The client translates ``ApiException``, urllib3 transport failures and
kubeconfig problems into this hierarchy exactly once; code above the client
layer never sees a raw kubernetes-client exception.
"""

from __future__ import annotations

from typing import Any


def _resource_phrase(
    resource_type: str | None,
    resource_name: str | None,
    namespace: str | None,
    verb: str,
) -> str | None:
    """``Certificate 'x' <verb> in namespace 'ns'``, or None if unidentified."""
    if not (resource_type and resource_name):
        return None
    phrase = f"{resource_type} '{resource_name}' {verb}"
    if namespace:
        phrase += f" in namespace '{namespace}'"
    return phrase


class KubernetesError(Exception):
    """An API server interaction failed.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status returned by the API server, if there was one.
        resource_type: Kind involved, e.g. ``Certificate``.
        resource_name: Name of the object involved.
        namespace: Namespace of the object involved.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    @property
    def location(self) -> str | None:
        """``[Kind/name in namespace]`` when the object is known."""
        if not (self.resource_type and self.resource_name):
            return None
        where = f" in {self.namespace}" if self.namespace else ""
        return f"[{self.resource_type}/{self.resource_name}{where}]"

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if location := self.location:
            parts.append(location)
        return " ".join(parts)


class KubernetesConnectionError(KubernetesError):
    """The API server is unreachable or no usable configuration was found.

    The only error class the read retry policy retries.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """401 or 403: bad credentials, or RBAC does not allow the verb."""

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        reason: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code)
        self.reason = reason


class KubernetesNotFoundError(KubernetesError):
    """404 for a named object."""

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(
            message=_resource_phrase(resource_type, resource_name, namespace, "not found")
            or message,
            status_code=404,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesError):
    """400 or 422, e.g. a malformed label selector or a rejected status patch.

    Attributes:
        validation_errors: Field errors reported by the API server, if any.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        validation_errors: dict[str, Any] | None = None,
        status_code: int | None = 422,
    ) -> None:
        super().__init__(message=message, status_code=status_code)
        self.validation_errors = validation_errors or {}


class KubernetesConflictError(KubernetesError):
    """409: the object changed between our read and our write.

    A status patch carrying a stale ``resourceVersion`` ends up here.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(
            message=_resource_phrase(
                resource_type, resource_name, namespace, "was modified concurrently"
            )
            or message,
            status_code=409,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )
