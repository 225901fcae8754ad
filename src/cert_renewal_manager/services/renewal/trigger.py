"""Renewal trigger: gate, then ask the controller to reissue."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cert_renewal_manager.integrations.kubernetes.exceptions import KubernetesError
from cert_renewal_manager.services.renewal.exceptions import TriggerError
from cert_renewal_manager.services.renewal.gate import check_ready

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateSummary,
    )
    from cert_renewal_manager.services.kubernetes.certmanager_manager import (
        CertManagerManager,
    )

logger = structlog.get_logger()


class RenewalTrigger:
    """Issues one reissue request per Certificate. Does not wait."""

    def __init__(self, store: CertManagerManager) -> None:
        self._store = store
        self._log = logger.bind(entity="trigger")

    def trigger(self, certificate: CertificateSummary) -> None:
        """Mark ``certificate`` for renewal.

        Raises:
            NotReadyError: The gate rejected it; nothing was written.
            TriggerError: The write failed.
        """
        ref = certificate.ref
        check_ready(certificate.status, ref)

        try:
            self._store.request_reissue(certificate)
        except KubernetesError as e:
            self._log.warning("trigger_failed", certificate=str(ref), error=str(e))
            raise TriggerError(ref, e) from e
        self._log.info("triggered_renewal", certificate=str(ref))
