"""Renewal protocol exceptions.

Every error carries the phase it was raised in and, where one is known, the
Certificate it concerns, so a failure can be diagnosed from its message alone.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.exceptions import KubernetesError
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateRef,
        CertManagerCondition,
    )
    from cert_renewal_manager.services.renewal.models import RenewalResult

PHASE_SELECT = "select"
PHASE_GATE = "gate"
PHASE_TRIGGER = "trigger"
PHASE_POLL = "poll"


class RenewalError(Exception):
    """Base exception for the renewal protocol.

    Attributes:
        message: Human-readable error message.
        phase: Protocol phase the error was raised in.
        ref: The Certificate concerned, if any.
    """

    phase: str = ""

    def __init__(self, message: str, ref: CertificateRef | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.ref = ref

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Selection
# =============================================================================


class SelectionValidationError(RenewalError):
    """The caller's selection is invalid. Raised before any API call."""

    phase = PHASE_SELECT


class ConflictingSelectionError(SelectionValidationError):
    """Both Certificate names and a label selector were given."""

    def __init__(self) -> None:
        super().__init__("cannot specify Certificate names as well as a label selector")


class BlankCertificateNameError(SelectionValidationError):
    """A Certificate name was empty or only whitespace."""

    def __init__(self, position: int) -> None:
        super().__init__(f"Certificate name #{position} is empty")
        self.position = position


class ResolutionError(RenewalError):
    """Target Certificates could not be resolved.

    Attributes:
        namespace: Namespace the resolution was scoped to.
        cause: Underlying API error, if any.
    """

    phase = PHASE_SELECT

    def __init__(
        self,
        message: str,
        namespace: str,
        ref: CertificateRef | None = None,
        cause: KubernetesError | None = None,
    ) -> None:
        super().__init__(message, ref)
        self.namespace = namespace
        self.cause = cause


class EmptySelectionError(ResolutionError):
    """The selection resolved to zero Certificates."""

    def __init__(self, namespace: str, label_selector: str | None = None) -> None:
        if label_selector:
            message = (
                f"No Certificates found in namespace '{namespace}' "
                f"matching selector '{label_selector}'"
            )
        else:
            message = "No Certificates specified: give Certificate names or a label selector"
        super().__init__(message, namespace)
        self.label_selector = label_selector


class CertificateNotFoundError(ResolutionError):
    """A Certificate named explicitly does not exist."""

    def __init__(self, ref: CertificateRef, cause: KubernetesError | None = None) -> None:
        super().__init__(
            f"Certificate '{ref.name}' not found in namespace '{ref.namespace}'",
            ref.namespace,
            ref,
            cause,
        )


# =============================================================================
# Gate / trigger
# =============================================================================


class NotReadyError(RenewalError):
    """The Certificate's Ready condition is not True, so it may not be renewed.

    Attributes:
        observed_condition: The Ready condition as read, or None if absent.
    """

    phase = PHASE_GATE

    def __init__(
        self,
        observed_condition: CertManagerCondition | None,
        ref: CertificateRef | None = None,
        message: str | None = None,
    ) -> None:
        observed = observed_condition.describe() if observed_condition else "no Ready condition"
        target = f"Certificate {ref}" if ref else "Certificate"
        super().__init__(message or f"{target} not in ready condition: {observed}", ref)
        self.observed_condition = observed_condition


class RenewalInProgressError(NotReadyError):
    """The Certificate is not Ready because it is already being issued."""

    def __init__(
        self,
        observed_condition: CertManagerCondition | None,
        ref: CertificateRef | None = None,
    ) -> None:
        target = f"Certificate {ref}" if ref else "Certificate"
        super().__init__(
            observed_condition,
            ref,
            message=f"{target} is already being issued",
        )


class TriggerError(RenewalError):
    """The reissue request itself failed.

    Attributes:
        cause: The API error, propagated verbatim.
    """

    phase = PHASE_TRIGGER

    def __init__(self, ref: CertificateRef, cause: KubernetesError) -> None:
        super().__init__(f"Failed to mark Certificate {ref} for renewal: {cause}", ref)
        self.cause = cause


# =============================================================================
# Polling
# =============================================================================


class StatusReadError(RenewalError):
    """Reading the Certificate during the wait failed. Ends the wait."""

    phase = PHASE_POLL

    def __init__(self, ref: CertificateRef, cause: KubernetesError, attempts: int) -> None:
        super().__init__(
            f"Failed to read status of Certificate {ref} (attempt {attempts}): {cause}",
            ref,
        )
        self.cause = cause
        self.attempts = attempts


class RenewalTimeoutError(RenewalError):
    """The deadline passed before the Certificate was observed Ready.

    The reissue request succeeded; only the confirmation is missing.

    Attributes:
        timeout: The deadline in seconds.
        attempts: Number of status reads made.
        last_condition: The last Ready condition observed, if any.
    """

    phase = PHASE_POLL

    def __init__(
        self,
        ref: CertificateRef,
        timeout: float,
        attempts: int,
        last_condition: CertManagerCondition | None = None,
    ) -> None:
        message = (
            f"Timed out after {timeout:g}s waiting for Certificate {ref} to become ready "
            f"({attempts} attempts)"
        )
        if last_condition is not None:
            message += f"; last observed {last_condition.describe()}"
        super().__init__(message, ref)
        self.timeout = timeout
        self.attempts = attempts
        self.last_condition = last_condition


class RenewalCancelledError(RenewalError):
    """The run was cancelled before the Certificate became Ready.

    ``waiting`` is False when cancellation was noticed before the renewal
    request was written; nothing was changed for ``ref`` in that case.
    """

    phase = PHASE_POLL

    def __init__(self, ref: CertificateRef, attempts: int = 0, *, waiting: bool = True) -> None:
        if waiting:
            message = f"Cancelled while waiting for Certificate {ref}"
        else:
            message = f"Cancelled before renewing Certificate {ref}"
        super().__init__(message, ref)
        self.attempts = attempts
        self.waiting = waiting
        if not waiting:
            self.phase = PHASE_TRIGGER


# =============================================================================
# Batch
# =============================================================================


class BatchAbortedError(RenewalError):
    """A fail-fast batch stopped at its first failing Certificate.

    Attributes:
        results: Results for every Certificate processed, the failing one last.
        failed: The failing result.
    """

    def __init__(self, results: list[RenewalResult], failed: RenewalResult) -> None:
        super().__init__(f"Renewal aborted at Certificate {failed.ref}: {failed.detail}", failed.ref)
        self.results = results
        self.failed = failed
        self.phase = failed.phase or ""
