"""Batch orchestration: resolve, then gate, trigger and wait per Certificate."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cert_renewal_manager.services.renewal.exceptions import (
    BatchAbortedError,
    NotReadyError,
    RenewalCancelledError,
    RenewalError,
    RenewalInProgressError,
    RenewalTimeoutError,
)
from cert_renewal_manager.services.renewal.models import PollState, RenewalOutcome, RenewalResult
from cert_renewal_manager.services.renewal.reporter import NullReporter

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateSummary,
    )
    from cert_renewal_manager.services.renewal.models import SelectionCriteria
    from cert_renewal_manager.services.renewal.poller import ReadinessPoller
    from cert_renewal_manager.services.renewal.reporter import ProgressReporter
    from cert_renewal_manager.services.renewal.selector import SelectorResolver
    from cert_renewal_manager.services.renewal.trigger import RenewalTrigger

logger = structlog.get_logger()


def outcome_for(error: RenewalError) -> RenewalOutcome:
    """Map a per-Certificate failure to its outcome."""
    if isinstance(error, RenewalInProgressError):
        return RenewalOutcome.ALREADY_IN_PROGRESS
    if isinstance(error, NotReadyError):
        return RenewalOutcome.NOT_READY
    if isinstance(error, RenewalTimeoutError):
        return RenewalOutcome.TIMED_OUT
    return RenewalOutcome.ERROR


class RenewalOrchestrator:
    """Renews a selection of Certificates one at a time.

    In fail-fast mode (the default) the first failing Certificate stops the
    batch with ``BatchAbortedError``; the remaining Certificates are not
    touched. With ``fail_fast=False`` every Certificate is attempted and
    failures are returned as results.

    Cancellation (``RenewalCancelledError``, ``KeyboardInterrupt``) always
    stops the whole batch. The poller's sleeper is checked before every
    renewal request, so no Certificate is written after a cancel.
    """

    def __init__(
        self,
        resolver: SelectorResolver,
        trigger: RenewalTrigger,
        poller: ReadinessPoller,
        reporter: ProgressReporter | None = None,
        *,
        fail_fast: bool = True,
        wait: bool = True,
    ) -> None:
        self._resolver = resolver
        self._trigger = trigger
        self._poller = poller
        self._reporter: ProgressReporter = reporter or NullReporter()
        self._fail_fast = fail_fast
        self._wait = wait
        self._log = logger.bind(entity="orchestrator")

    def run(self, criteria: SelectionCriteria, namespace: str) -> list[RenewalResult]:
        """Renew every selected Certificate, in resolution order.

        Args:
            criteria: Names or label selector.
            namespace: Namespace to resolve in.

        Returns:
            One result per Certificate.

        Raises:
            SelectionValidationError: Invalid selection; nothing was read.
            ResolutionError: Nothing could be resolved; nothing was written.
            BatchAbortedError: Fail-fast stop; carries results so far.
            RenewalCancelledError: The run was cancelled.
        """
        certificates = self._resolver.resolve(criteria, namespace)
        self._reporter.selected(certificates)
        self._log.info("renewal_started", namespace=namespace, count=len(certificates))

        results: list[RenewalResult] = []
        for certificate in certificates:
            result, error = self._renew_one(certificate)
            results.append(result)
            self._reporter.finished(result)
            if error is not None and self._fail_fast:
                self._log.warning(
                    "renewal_aborted", certificate=str(result.ref), outcome=result.outcome.value
                )
                raise BatchAbortedError(results, result) from error

        self._log.info(
            "renewal_finished",
            namespace=namespace,
            succeeded=sum(1 for r in results if r.succeeded),
            failed=sum(1 for r in results if not r.succeeded),
        )
        return results

    def _renew_one(
        self, certificate: CertificateSummary
    ) -> tuple[RenewalResult, RenewalError | None]:
        ref = certificate.ref
        if self._poller.sleeper.cancelled:
            raise RenewalCancelledError(ref, waiting=False)

        attempts = 0

        def on_attempt(state: PollState) -> None:
            nonlocal attempts
            attempts = state.attempts
            self._reporter.poll_attempt(state)

        try:
            self._trigger.trigger(certificate)
            self._reporter.triggered(ref)
            if not self._wait:
                return RenewalResult(ref=ref, outcome=RenewalOutcome.TRIGGERED), None
            state = self._poller.wait_until_ready(ref, on_attempt=on_attempt)
        except RenewalCancelledError:
            raise
        except RenewalError as e:
            result = RenewalResult(
                ref=ref,
                outcome=outcome_for(e),
                detail=str(e),
                phase=e.phase,
                attempts=getattr(e, "attempts", attempts),
            )
            return result, e

        return (
            RenewalResult(ref=ref, outcome=RenewalOutcome.RENEWED, attempts=state.attempts),
            None,
        )
