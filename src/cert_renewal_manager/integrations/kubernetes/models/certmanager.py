"""Cert-manager Certificate models.

Cert-manager CRDs are accessed via ``CustomObjectsApi`` which returns raw
``dict`` objects rather than typed SDK classes.  The ``from_k8s_object``
classmethods therefore use ``dict.get()`` instead of ``getattr()``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cert_renewal_manager.integrations.kubernetes.models.base import K8sEntityBase

CONDITION_READY = "Ready"
CONDITION_ISSUING = "Issuing"


class ConditionStatus(StrEnum):
    """Tri-state value of a status condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> ConditionStatus:
        """Parse an API value, treating anything unrecognized as Unknown."""
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


class CertManagerCondition(BaseModel):
    """Cert-manager status condition from ``.status.conditions[]``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = Field(default="", description="Condition type (Ready, Issuing, etc.)")
    status: ConditionStatus = Field(
        default=ConditionStatus.UNKNOWN, description="Condition status (True, False, Unknown)"
    )
    reason: str = Field(default="", description="Machine-readable reason")
    message: str | None = Field(default=None, description="Human-readable message")
    observed_generation: int | None = Field(
        default=None, description="Certificate generation the condition was computed for"
    )
    last_transition_time: str | None = Field(default=None, description="Last transition timestamp")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> CertManagerCondition:
        """Create from a condition dict."""
        return cls(
            type=obj.get("type", ""),
            status=ConditionStatus.parse(obj.get("status", "Unknown")),
            reason=obj.get("reason", ""),
            message=obj.get("message"),
            observed_generation=obj.get("observedGeneration"),
            last_transition_time=obj.get("lastTransitionTime"),
        )

    def to_k8s_object(self) -> dict[str, Any]:
        """Render back to the API's camelCase condition dict."""
        obj: dict[str, Any] = {
            "type": self.type,
            "status": self.status.value,
            "reason": self.reason,
        }
        if self.message is not None:
            obj["message"] = self.message
        if self.observed_generation is not None:
            obj["observedGeneration"] = self.observed_generation
        if self.last_transition_time is not None:
            obj["lastTransitionTime"] = self.last_transition_time
        return obj

    def describe(self) -> str:
        """One-line summary, e.g. ``Ready=False (Issuing): Renewing certificate``."""
        text = f"{self.type}={self.status.value}"
        if self.reason:
            text += f" ({self.reason})"
        if self.message:
            text += f": {self.message}"
        return text


class CertificateStatus(BaseModel):
    """``.status`` of a Certificate. Written by the controller only."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    conditions: tuple[CertManagerCondition, ...] = Field(
        default=(), description="Status conditions"
    )
    not_after: str | None = Field(default=None, description="Certificate expiration timestamp")
    not_before: str | None = Field(default=None, description="Certificate valid-from timestamp")
    renewal_time: str | None = Field(default=None, description="Next scheduled renewal time")
    revision: int | None = Field(default=None, description="Current certificate revision")

    @classmethod
    def from_k8s_object(cls, status: dict[str, Any] | None) -> CertificateStatus:
        """Create from a ``.status`` dict (which may be missing entirely)."""
        status = status or {}
        raw: list[dict[str, Any]] = status.get("conditions") or []
        return cls(
            conditions=tuple(CertManagerCondition.from_k8s_object(c) for c in raw),
            not_after=status.get("notAfter"),
            not_before=status.get("notBefore"),
            renewal_time=status.get("renewalTime"),
            revision=status.get("revision"),
        )

    def get_condition(self, condition_type: str) -> CertManagerCondition | None:
        """Return the first condition of the given type, if present."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def has_condition(self, condition_type: str, status: ConditionStatus) -> bool:
        condition = self.get_condition(condition_type)
        return condition is not None and condition.status is status

    @property
    def ready(self) -> bool:
        return self.has_condition(CONDITION_READY, ConditionStatus.TRUE)

    @property
    def issuing(self) -> bool:
        return self.has_condition(CONDITION_ISSUING, ConditionStatus.TRUE)


class CertificateRef(BaseModel):
    """Namespace and name identifying one Certificate."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    namespace: str
    name: str

    @field_validator("namespace", "name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty identifiers."""
        if not v:
            raise ValueError("must not be empty")
        return v

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


# =============================================================================
# Certificate
# =============================================================================


class CertificateSummary(K8sEntityBase):
    """Cert-manager Certificate model."""

    _entity_name: ClassVar[str] = "certificate"

    generation: int | None = Field(default=None, description="metadata.generation")
    resource_version: str | None = Field(default=None, description="metadata.resourceVersion")
    secret_name: str = Field(default="", description="Target Secret name for the certificate")
    issuer_name: str = Field(default="", description="Issuer reference name")
    issuer_kind: str = Field(default="Issuer", description="Issuer kind (Issuer or ClusterIssuer)")
    dns_names: list[str] = Field(default_factory=list, description="Subject Alternative Names")
    common_name: str | None = Field(default=None, description="Certificate Common Name")
    status: CertificateStatus = Field(
        default_factory=CertificateStatus, description="Controller-reported status"
    )

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> CertificateSummary:
        """Create from a cert-manager Certificate CRD dict."""
        metadata: dict[str, Any] = obj.get("metadata", {})
        spec: dict[str, Any] = obj.get("spec", {})
        issuer_ref: dict[str, Any] = spec.get("issuerRef", {})

        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace"),
            uid=metadata.get("uid"),
            creation_timestamp=metadata.get("creationTimestamp"),
            labels=metadata.get("labels") or None,
            annotations=metadata.get("annotations") or None,
            generation=metadata.get("generation"),
            resource_version=metadata.get("resourceVersion"),
            secret_name=spec.get("secretName", ""),
            issuer_name=issuer_ref.get("name", ""),
            issuer_kind=issuer_ref.get("kind", "Issuer"),
            dns_names=spec.get("dnsNames", []),
            common_name=spec.get("commonName"),
            status=CertificateStatus.from_k8s_object(obj.get("status")),
        )

    @property
    def ref(self) -> CertificateRef:
        """The namespace/name identity of this Certificate."""
        return CertificateRef(namespace=self.namespace or "", name=self.name)
