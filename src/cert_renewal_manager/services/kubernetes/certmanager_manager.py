"""Cert-manager Certificate manager.

Reads and marks Certificates for reissuance through the Kubernetes
``CustomObjectsApi``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CONDITION_ISSUING,
    CertificateRef,
    CertificateStatus,
    CertificateSummary,
    CertManagerCondition,
    ConditionStatus,
)
from cert_renewal_manager.services.kubernetes.base import K8sBaseManager

# cert-manager.io CRD coordinates
CERT_MANAGER_GROUP = "cert-manager.io"
CERT_MANAGER_VERSION = "v1"
CERTIFICATE_PLURAL = "certificates"
CERTIFICATE_KIND = "Certificate"

# Issuing condition written when a user asks for reissuance
MANUAL_TRIGGER_REASON = "ManuallyTriggered"
MANUAL_TRIGGER_MESSAGE = "Certificate re-issuance manually triggered"


def _rfc3339(now: datetime) -> str:
    return now.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class CertManagerManager(K8sBaseManager):
    """Manager for cert-manager Certificates.

    Exposes the three store operations the renewal protocol needs: point
    lookup, label-filtered listing, and a reissue request. Lookups and
    listings retry transient connection errors; status reads during polling
    and the reissue write do not.
    """

    _entity_name = "certmanager"

    def list_certificates(
        self,
        namespace: str | None = None,
        *,
        label_selector: str | None = None,
    ) -> list[CertificateSummary]:
        """List Certificates in a namespace.

        Args:
            namespace: Target namespace.
            label_selector: Filter by label selector.

        Returns:
            Certificates in the order returned by the API server.
        """
        ns = self._resolve_namespace(namespace)
        self._log.debug("listing_certificates", namespace=ns, label_selector=label_selector)
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        result = self._read_with_retry(
            lambda: self._client.custom_objects.list_namespaced_custom_object(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                ns,
                CERTIFICATE_PLURAL,
                **kwargs,
            ),
            CERTIFICATE_KIND,
            None,
            ns,
        )
        items: list[dict[str, Any]] = result.get("items", [])
        certs = [CertificateSummary.from_k8s_object(item) for item in items]
        self._log.debug("listed_certificates", count=len(certs), namespace=ns)
        return certs

    def get_certificate(
        self,
        name: str,
        namespace: str | None = None,
    ) -> CertificateSummary:
        """Get a single Certificate by name.

        Args:
            name: Certificate name.
            namespace: Target namespace.

        Returns:
            The Certificate.

        Raises:
            KubernetesNotFoundError: If no such Certificate exists.
        """
        ns = self._resolve_namespace(namespace)
        self._log.debug("getting_certificate", name=name, namespace=ns)
        result = self._read_with_retry(
            lambda: self._client.custom_objects.get_namespaced_custom_object(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                ns,
                CERTIFICATE_PLURAL,
                name,
            ),
            CERTIFICATE_KIND,
            name,
            ns,
        )
        return CertificateSummary.from_k8s_object(result)

    def get_certificate_status(self, ref: CertificateRef) -> CertificateStatus:
        """Read the current status of a Certificate, without retries.

        Args:
            ref: Namespace and name of the Certificate.

        Returns:
            The controller-reported status.
        """
        try:
            result = self._client.custom_objects.get_namespaced_custom_object(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                ref.namespace,
                CERTIFICATE_PLURAL,
                ref.name,
            )
        except Exception as e:
            self._handle_api_error(e, CERTIFICATE_KIND, ref.name, ref.namespace)
        return CertificateStatus.from_k8s_object(result.get("status"))

    def request_reissue(
        self,
        certificate: CertificateSummary,
        *,
        now: datetime | None = None,
    ) -> None:
        """Mark a Certificate for reissuance.

        Sets the ``Issuing`` condition to True on the status subresource,
        which is how cert-manager's trigger controller is told to issue a new
        certificate. Other conditions are kept as-is. The patch carries the
        observed ``resourceVersion`` so a concurrent change yields a conflict
        instead of a blind overwrite. Exactly one request is sent.

        Args:
            certificate: The Certificate as last read.
            now: Transition timestamp (defaults to the current time).
        """
        ref = certificate.ref
        issuing = CertManagerCondition(
            type=CONDITION_ISSUING,
            status=ConditionStatus.TRUE,
            reason=MANUAL_TRIGGER_REASON,
            message=MANUAL_TRIGGER_MESSAGE,
            observed_generation=certificate.generation,
            last_transition_time=_rfc3339(now or datetime.now(UTC)),
        )
        conditions = [
            c.to_k8s_object() for c in certificate.status.conditions if c.type != CONDITION_ISSUING
        ]
        conditions.append(issuing.to_k8s_object())

        patch: dict[str, Any] = {"status": {"conditions": conditions}}
        if certificate.resource_version:
            patch["metadata"] = {"resourceVersion": certificate.resource_version}

        self._log.debug("requesting_reissue", name=ref.name, namespace=ref.namespace)
        try:
            self._client.custom_objects.patch_namespaced_custom_object_status(
                CERT_MANAGER_GROUP,
                CERT_MANAGER_VERSION,
                ref.namespace,
                CERTIFICATE_PLURAL,
                ref.name,
                patch,
            )
        except Exception as e:
            self._handle_api_error(e, CERTIFICATE_KIND, ref.name, ref.namespace)
        self._log.info("requested_reissue", name=ref.name, namespace=ref.namespace)
