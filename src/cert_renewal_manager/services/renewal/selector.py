"""Selector resolution: turn names or a label query into Certificates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cert_renewal_manager.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesNotFoundError,
)
from cert_renewal_manager.integrations.kubernetes.models.certmanager import CertificateRef
from cert_renewal_manager.services.renewal.exceptions import (
    BlankCertificateNameError,
    CertificateNotFoundError,
    ConflictingSelectionError,
    EmptySelectionError,
    ResolutionError,
)

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateSummary,
    )
    from cert_renewal_manager.services.kubernetes.certmanager_manager import (
        CertManagerManager,
    )
    from cert_renewal_manager.services.renewal.models import SelectionCriteria

logger = structlog.get_logger()


def validate_selection(criteria: SelectionCriteria) -> None:
    """Reject names combined with a label selector, and blank names.

    Raises:
        ConflictingSelectionError: If both are set.
        BlankCertificateNameError: If a name is empty.
    """
    if criteria.is_conflicting:
        raise ConflictingSelectionError()
    for position, name in enumerate(criteria.names, start=1):
        if not name:
            raise BlankCertificateNameError(position)


class SelectorResolver:
    """Resolves SelectionCriteria against the certificate store."""

    def __init__(self, store: CertManagerManager) -> None:
        self._store = store
        self._log = logger.bind(entity="selector")

    def resolve(self, criteria: SelectionCriteria, namespace: str) -> list[CertificateSummary]:
        """Resolve the Certificates to act on.

        A label selector is resolved with one list call; explicit names with
        one lookup each, in the given order, stopping at the first missing
        name. Duplicate names are looked up once.

        Args:
            criteria: Names or label selector.
            namespace: Namespace every lookup is scoped to.

        Returns:
            The Certificates, never empty.

        Raises:
            ConflictingSelectionError: Names and selector both given.
            CertificateNotFoundError: A named Certificate does not exist.
            EmptySelectionError: Nothing was selected.
            ResolutionError: Any other API failure.
        """
        validate_selection(criteria)

        if criteria.has_selector:
            certificates = self._list(criteria.label_selector or "", namespace)
        else:
            certificates = self._get_each(criteria.names, namespace)

        if not certificates:
            raise EmptySelectionError(namespace, criteria.label_selector)

        self._log.debug(
            "resolved_certificates",
            namespace=namespace,
            count=len(certificates),
            names=[c.name for c in certificates],
        )
        return certificates

    def _list(self, label_selector: str, namespace: str) -> list[CertificateSummary]:
        try:
            return self._store.list_certificates(namespace, label_selector=label_selector)
        except KubernetesError as e:
            raise ResolutionError(
                f"Failed to list Certificates in namespace '{namespace}' "
                f"matching selector '{label_selector}': {e}",
                namespace,
                cause=e,
            ) from e

    def _get_each(self, names: tuple[str, ...], namespace: str) -> list[CertificateSummary]:
        certificates: list[CertificateSummary] = []
        for name in dict.fromkeys(names):
            ref = CertificateRef(namespace=namespace, name=name)
            try:
                certificates.append(self._store.get_certificate(name, namespace))
            except KubernetesNotFoundError as e:
                raise CertificateNotFoundError(ref, e) from e
            except KubernetesError as e:
                raise ResolutionError(
                    f"Failed to get Certificate {ref}: {e}", namespace, ref, e
                ) from e
        return certificates
