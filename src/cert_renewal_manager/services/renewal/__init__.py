"""Certificate renewal protocol.

Selector resolution, readiness gate, renewal trigger, readiness poller and
the batch orchestrator that sequences them.
"""

from cert_renewal_manager.services.renewal.exceptions import (
    BatchAbortedError,
    BlankCertificateNameError,
    CertificateNotFoundError,
    ConflictingSelectionError,
    EmptySelectionError,
    NotReadyError,
    RenewalCancelledError,
    RenewalError,
    RenewalInProgressError,
    RenewalTimeoutError,
    ResolutionError,
    SelectionValidationError,
    StatusReadError,
    TriggerError,
)
from cert_renewal_manager.services.renewal.gate import check_ready
from cert_renewal_manager.services.renewal.models import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
    PollPhase,
    PollPolicy,
    PollState,
    RenewalOutcome,
    RenewalResult,
    SelectionCriteria,
)
from cert_renewal_manager.services.renewal.orchestrator import RenewalOrchestrator
from cert_renewal_manager.services.renewal.poller import InterruptibleSleeper, ReadinessPoller
from cert_renewal_manager.services.renewal.selector import SelectorResolver, validate_selection
from cert_renewal_manager.services.renewal.trigger import RenewalTrigger

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_POLL_TIMEOUT",
    "BatchAbortedError",
    "BlankCertificateNameError",
    "CertificateNotFoundError",
    "ConflictingSelectionError",
    "EmptySelectionError",
    "InterruptibleSleeper",
    "NotReadyError",
    "PollPhase",
    "PollPolicy",
    "PollState",
    "ReadinessPoller",
    "RenewalCancelledError",
    "RenewalError",
    "RenewalInProgressError",
    "RenewalOrchestrator",
    "RenewalOutcome",
    "RenewalResult",
    "RenewalTimeoutError",
    "RenewalTrigger",
    "ResolutionError",
    "SelectionCriteria",
    "SelectionValidationError",
    "SelectorResolver",
    "StatusReadError",
    "TriggerError",
    "check_ready",
    "validate_selection",
]
