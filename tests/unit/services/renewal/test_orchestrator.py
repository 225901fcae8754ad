"""Unit tests for RenewalOrchestrator, run end to end over a mocked store."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from cert_renewal_manager.integrations.kubernetes.exceptions import (
    KubernetesConnectionError,
    KubernetesNotFoundError,
)
from cert_renewal_manager.services.renewal.exceptions import (
    BatchAbortedError,
    CertificateNotFoundError,
    ConflictingSelectionError,
    NotReadyError,
    RenewalCancelledError,
    RenewalInProgressError,
    RenewalTimeoutError,
    StatusReadError,
    TriggerError,
)
from cert_renewal_manager.services.renewal.models import (
    PollPolicy,
    RenewalOutcome,
    SelectionCriteria,
)
from cert_renewal_manager.services.renewal.orchestrator import RenewalOrchestrator, outcome_for
from cert_renewal_manager.services.renewal.poller import ReadinessPoller
from cert_renewal_manager.services.renewal.selector import SelectorResolver
from cert_renewal_manager.services.renewal.trigger import RenewalTrigger


@pytest.fixture
def reporter() -> MagicMock:
    """Mock progress reporter."""
    return MagicMock()


@pytest.fixture
def make_orchestrator(store: MagicMock, clock: Any, sleeper: Any, reporter: MagicMock) -> Any:
    """Build an orchestrator wired to the mocked store and fake clock."""

    def _make(
        fail_fast: bool = True,
        wait: bool = True,
        interval: float = 1.0,
        timeout: float = 5.0,
    ) -> RenewalOrchestrator:
        poller = ReadinessPoller(
            store,
            PollPolicy(interval=interval, timeout=timeout),
            clock=clock,
            sleeper=sleeper,
        )
        return RenewalOrchestrator(
            SelectorResolver(store),
            RenewalTrigger(store),
            poller,
            reporter,
            fail_fast=fail_fast,
            wait=wait,
        )

    return _make


@pytest.mark.unit
@pytest.mark.kubernetes
class TestRenewalScenarios:
    """End-to-end renewal flows."""

    def test_single_ready_certificate_renewed(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """A Ready Certificate is triggered and observed Ready on the first read."""
        cert = summary_factory("cert-a")
        store.get_certificate.return_value = cert
        store.get_certificate_status.return_value = status_factory("True")

        results = make_orchestrator().run(SelectionCriteria(names=("cert-a",)), "default")

        assert len(results) == 1
        assert results[0].outcome is RenewalOutcome.RENEWED
        assert results[0].attempts == 1
        assert results[0].succeeded
        store.request_reissue.assert_called_once_with(cert)
        store.get_certificate_status.assert_called_once_with(cert.ref)

    def test_selector_batch_aborts_on_not_ready(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """The first Certificate renews, then the non-ready one stops the batch."""
        cert_b = summary_factory("cert-b", ready="True")
        cert_c = summary_factory("cert-c", ready="False")
        store.list_certificates.return_value = [cert_b, cert_c]
        store.get_certificate_status.return_value = status_factory("True")

        with pytest.raises(BatchAbortedError) as exc_info:
            make_orchestrator().run(SelectionCriteria(label_selector="app=web"), "default")

        error = exc_info.value
        assert isinstance(error.__cause__, NotReadyError)
        assert [r.outcome for r in error.results] == [
            RenewalOutcome.RENEWED,
            RenewalOutcome.NOT_READY,
        ]
        assert error.failed.ref == cert_c.ref
        assert error.failed.phase == "gate"
        assert error.phase == "gate"
        store.request_reissue.assert_called_once_with(cert_b)

    def test_missing_certificate_fails_before_trigger(
        self, make_orchestrator: Any, store: MagicMock
    ) -> None:
        """A missing named Certificate fails resolution; nothing is triggered."""
        store.get_certificate.side_effect = KubernetesNotFoundError(
            resource_type="Certificate", resource_name="cert-d", namespace="default"
        )

        with pytest.raises(CertificateNotFoundError):
            make_orchestrator().run(SelectionCriteria(names=("cert-d",)), "default")

        store.request_reissue.assert_not_called()
        store.get_certificate_status.assert_not_called()

    def test_never_ready_times_out(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        sleeper: Any,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """A Certificate that never becomes Ready times out after five reads."""
        store.get_certificate.return_value = summary_factory("cert-e")
        store.get_certificate_status.return_value = status_factory("False", "True")

        with pytest.raises(BatchAbortedError) as exc_info:
            make_orchestrator(interval=1.0, timeout=5.0).run(
                SelectionCriteria(names=("cert-e",)), "default"
            )

        failed = exc_info.value.failed
        assert failed.outcome is RenewalOutcome.TIMED_OUT
        assert failed.attempts == 5
        assert failed.phase == "poll"
        assert isinstance(exc_info.value.__cause__, RenewalTimeoutError)
        assert sum(sleeper.sleeps) == 5.0
        assert store.get_certificate_status.call_count == 5

    def test_never_ready_best_effort_returns_result(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """Without fail-fast, a timeout is returned as a TimedOut result."""
        store.get_certificate.return_value = summary_factory("cert-e")
        store.get_certificate_status.return_value = status_factory("False")

        results = make_orchestrator(fail_fast=False).run(
            SelectionCriteria(names=("cert-e",)), "default"
        )

        assert results[0].outcome is RenewalOutcome.TIMED_OUT
        assert results[0].attempts == 5
        assert results[0].detail is not None and "Timed out after 5s" in results[0].detail


@pytest.mark.unit
@pytest.mark.kubernetes
class TestRenewalOrchestrator:
    """Tests for batch behavior of RenewalOrchestrator."""

    def test_best_effort_attempts_every_certificate(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """With fail_fast=False a failure does not stop later Certificates."""
        certs = [
            summary_factory("a"),
            summary_factory("b", ready="False"),
            summary_factory("c", ready="False", issuing="True"),
            summary_factory("d"),
        ]
        store.list_certificates.return_value = certs
        store.get_certificate_status.return_value = status_factory("True")

        results = make_orchestrator(fail_fast=False).run(
            SelectionCriteria(label_selector="tier=edge"), "default"
        )

        assert [r.ref.name for r in results] == ["a", "b", "c", "d"]
        assert [r.outcome for r in results] == [
            RenewalOutcome.RENEWED,
            RenewalOutcome.NOT_READY,
            RenewalOutcome.ALREADY_IN_PROGRESS,
            RenewalOutcome.RENEWED,
        ]
        assert store.request_reissue.call_count == 2

    def test_no_wait_only_triggers(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
    ) -> None:
        """With wait=False Certificates are marked and never polled."""
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)

        results = make_orchestrator(wait=False).run(SelectionCriteria(names=("a", "b")), "prod")

        assert [r.outcome for r in results] == [RenewalOutcome.TRIGGERED] * 2
        assert all(r.succeeded for r in results)
        assert store.request_reissue.call_count == 2
        store.get_certificate_status.assert_not_called()

    def test_sequential_trigger_then_wait(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """Each Certificate is triggered and awaited before the next is touched."""
        calls: list[str] = []
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)
        store.request_reissue.side_effect = lambda cert: calls.append(f"trigger:{cert.name}")

        def read_status(ref: Any) -> Any:
            calls.append(f"poll:{ref.name}")
            return status_factory("True")

        store.get_certificate_status.side_effect = read_status

        make_orchestrator().run(SelectionCriteria(names=("a", "b")), "default")

        assert calls == ["trigger:a", "poll:a", "trigger:b", "poll:b"]

    def test_trigger_failure_aborts(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
    ) -> None:
        """A failed write stops a fail-fast batch with a trigger-phase error."""
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)
        store.request_reissue.side_effect = KubernetesConnectionError("connection reset")

        with pytest.raises(BatchAbortedError) as exc_info:
            make_orchestrator().run(SelectionCriteria(names=("a", "b")), "default")

        assert isinstance(exc_info.value.__cause__, TriggerError)
        assert len(exc_info.value.results) == 1
        assert exc_info.value.failed.outcome is RenewalOutcome.ERROR
        store.get_certificate_status.assert_not_called()

    def test_status_read_failure_recorded(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        summary_factory: Any,
    ) -> None:
        """A failed read during the wait is an Error result in the poll phase."""
        store.get_certificate.return_value = summary_factory("a")
        store.get_certificate_status.side_effect = KubernetesConnectionError("timeout")

        results = make_orchestrator(fail_fast=False).run(SelectionCriteria(names=("a",)), "default")

        assert results[0].outcome is RenewalOutcome.ERROR
        assert results[0].phase == "poll"
        assert results[0].attempts == 1

    def test_conflicting_selection_raises_before_reads(
        self, make_orchestrator: Any, store: MagicMock
    ) -> None:
        """Invalid selection is raised directly, not as a batch result."""
        with pytest.raises(ConflictingSelectionError):
            make_orchestrator().run(
                SelectionCriteria(names=("a",), label_selector="app=web"), "default"
            )

        store.get_certificate.assert_not_called()
        store.list_certificates.assert_not_called()

    def test_cancellation_stops_batch(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        sleeper: Any,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """Cancellation propagates even in best-effort mode, before any write."""
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)
        store.get_certificate_status.return_value = status_factory("False")
        sleeper.cancel()

        with pytest.raises(RenewalCancelledError) as exc_info:
            make_orchestrator(fail_fast=False).run(SelectionCriteria(names=("a", "b")), "default")

        store.request_reissue.assert_not_called()
        store.get_certificate_status.assert_not_called()
        assert exc_info.value.waiting is False
        assert exc_info.value.phase == "trigger"
        assert "before renewing" in exc_info.value.message

    def test_cancellation_without_wait_writes_nothing(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        sleeper: Any,
        summary_factory: Any,
    ) -> None:
        """--no-wait never enters the poller, yet still honours a cancel."""
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)
        sleeper.cancel()

        with pytest.raises(RenewalCancelledError):
            make_orchestrator(wait=False).run(SelectionCriteria(names=("a", "b", "c")), "default")

        store.request_reissue.assert_not_called()

    def test_cancellation_mid_batch_skips_remaining(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        sleeper: Any,
        reporter: MagicMock,
        summary_factory: Any,
    ) -> None:
        """A cancel arriving during one write stops the next Certificate."""
        store.get_certificate.side_effect = lambda name, ns: summary_factory(name, ns)
        store.request_reissue.side_effect = lambda certificate: sleeper.cancel()

        with pytest.raises(RenewalCancelledError) as exc_info:
            make_orchestrator(wait=False).run(SelectionCriteria(names=("a", "b")), "default")

        store.request_reissue.assert_called_once()
        assert exc_info.value.ref is not None
        assert exc_info.value.ref.name == "b"
        assert reporter.finished.call_args.args[0].outcome is RenewalOutcome.TRIGGERED

    def test_reporter_receives_phase_transitions(
        self,
        make_orchestrator: Any,
        store: MagicMock,
        reporter: MagicMock,
        summary_factory: Any,
        status_factory: Any,
    ) -> None:
        """The reporter hears about selection, trigger, polls and the result."""
        cert = summary_factory("a")
        store.get_certificate.return_value = cert
        store.get_certificate_status.side_effect = [status_factory("False"), status_factory("True")]

        make_orchestrator().run(SelectionCriteria(names=("a",)), "default")

        reporter.selected.assert_called_once_with([cert])
        reporter.triggered.assert_called_once_with(cert.ref)
        assert reporter.poll_attempt.call_count == 2
        finished = reporter.finished.call_args.args[0]
        assert finished.outcome is RenewalOutcome.RENEWED
        assert finished.attempts == 2


@pytest.mark.unit
class TestOutcomeFor:
    """Tests for outcome_for."""

    def test_in_progress(self) -> None:
        """RenewalInProgressError maps to AlreadyInProgress."""
        assert outcome_for(RenewalInProgressError(None)) is RenewalOutcome.ALREADY_IN_PROGRESS

    def test_not_ready(self) -> None:
        """NotReadyError maps to NotReady."""
        assert outcome_for(NotReadyError(None)) is RenewalOutcome.NOT_READY

    def test_other_errors(self, ref: Any) -> None:
        """Read failures map to Error."""
        error = StatusReadError(ref, KubernetesConnectionError(), 1)

        assert outcome_for(error) is RenewalOutcome.ERROR
