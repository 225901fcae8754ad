"""Kubernetes service managers."""

from cert_renewal_manager.services.kubernetes.base import K8sBaseManager
from cert_renewal_manager.services.kubernetes.certmanager_manager import CertManagerManager

__all__ = ["CertManagerManager", "K8sBaseManager"]
