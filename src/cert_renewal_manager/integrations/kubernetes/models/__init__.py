"""Kubernetes resource models."""

from cert_renewal_manager.integrations.kubernetes.models.base import K8sEntityBase
from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CONDITION_ISSUING,
    CONDITION_READY,
    CertificateRef,
    CertificateStatus,
    CertificateSummary,
    CertManagerCondition,
    ConditionStatus,
)

__all__ = [
    "CONDITION_ISSUING",
    "CONDITION_READY",
    "CertManagerCondition",
    "CertificateRef",
    "CertificateStatus",
    "CertificateSummary",
    "ConditionStatus",
    "K8sEntityBase",
]
