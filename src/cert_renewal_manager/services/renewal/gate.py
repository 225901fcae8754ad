"""Readiness gate: may this Certificate be renewed right now?"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CONDITION_READY,
    ConditionStatus,
)
from cert_renewal_manager.services.renewal.exceptions import (
    NotReadyError,
    RenewalInProgressError,
)

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateRef,
        CertificateStatus,
    )


def check_ready(status: CertificateStatus, ref: CertificateRef | None = None) -> None:
    """Allow renewal only when the Ready condition is True.

    Pure: no I/O, same answer for the same status.

    Args:
        status: Current Certificate status.
        ref: Certificate named in the error, if known.

    Raises:
        RenewalInProgressError: Not Ready and the Issuing condition is True.
        NotReadyError: Ready condition absent, False or Unknown.
    """
    ready = status.get_condition(CONDITION_READY)
    if ready is not None and ready.status is ConditionStatus.TRUE:
        return
    if status.issuing:
        raise RenewalInProgressError(ready, ref)
    raise NotReadyError(ready, ref)
