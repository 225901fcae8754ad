"""Readiness poller: wait, with a deadline, for a Certificate to be Ready.

The wait is an explicit state machine::

    Polling --ready--> Done
    Polling --read error--> Failed
    Polling --deadline--> TimedOut

Terminal states perform no further reads. Sleeping goes through an
``InterruptibleSleeper`` so a cancelled run stops promptly, and both the clock
and the sleeper can be swapped for fakes in tests.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

import structlog

from cert_renewal_manager.integrations.kubernetes.exceptions import KubernetesError
from cert_renewal_manager.integrations.kubernetes.models.certmanager import CONDITION_READY
from cert_renewal_manager.services.renewal.exceptions import (
    RenewalCancelledError,
    RenewalTimeoutError,
    StatusReadError,
)
from cert_renewal_manager.services.renewal.models import PollPhase, PollPolicy, PollState

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import CertificateRef
    from cert_renewal_manager.services.kubernetes.certmanager_manager import (
        CertManagerManager,
    )

logger = structlog.get_logger()

Clock = Callable[[], float]
AttemptCallback = Callable[[PollState], None]


class Sleeper(Protocol):
    """Something that can sleep and be woken early."""

    @property
    def cancelled(self) -> bool: ...

    def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return False if cancelled."""
        ...


class InterruptibleSleeper:
    """``threading.Event``-backed sleep that ``cancel()`` cuts short.

    Cancellation is sticky: once cancelled, every later ``sleep`` returns
    False immediately.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def sleep(self, seconds: float) -> bool:
        return not self._cancelled.wait(seconds)

    def cancel(self) -> None:
        self._cancelled.set()


class ReadinessPoller:
    """Re-reads a Certificate's status until Ready or the deadline passes."""

    def __init__(
        self,
        store: CertManagerManager,
        policy: PollPolicy | None = None,
        *,
        clock: Clock = time.monotonic,
        sleeper: Sleeper | None = None,
    ) -> None:
        """Initialize the poller.

        Args:
            store: Certificate store used for status reads.
            policy: Interval and timeout (defaults: 1s / 60s).
            clock: Monotonic seconds source.
            sleeper: Interruptible sleep primitive.
        """
        self._store = store
        self.policy = policy or PollPolicy()
        self._clock = clock
        self.sleeper: Sleeper = sleeper or InterruptibleSleeper()
        self._log = logger.bind(entity="poller")

    def wait_until_ready(
        self,
        ref: CertificateRef,
        on_attempt: AttemptCallback | None = None,
    ) -> PollState:
        """Block until ``ref`` reports Ready.

        The first read happens immediately; later reads follow every
        ``policy.interval`` seconds until ``policy.timeout`` has elapsed.

        Args:
            ref: Certificate to wait for.
            on_attempt: Called with the state after every read.

        Returns:
            The final state, in phase Done.

        Raises:
            StatusReadError: A read failed (phase Failed).
            RenewalTimeoutError: Deadline passed (phase TimedOut).
            RenewalCancelledError: The sleeper was cancelled.
        """
        interval = self.policy.interval
        timeout = self.policy.timeout
        state = PollState(ref=ref)
        start = self._clock()

        while not state.phase.terminal:
            if self.sleeper.cancelled:
                raise RenewalCancelledError(ref, state.attempts)

            state.attempts += 1
            try:
                status = self._store.get_certificate_status(ref)
            except KubernetesError as e:
                state.phase = PollPhase.FAILED
                state.elapsed = self._clock() - start
                self._log.warning(
                    "poll_read_failed", certificate=str(ref), attempt=state.attempts, error=str(e)
                )
                raise StatusReadError(ref, e, state.attempts) from e

            state.last_status = status
            state.elapsed = self._clock() - start
            if status.ready:
                state.phase = PollPhase.DONE
            self._log.debug(
                "poll_attempt",
                certificate=str(ref),
                attempt=state.attempts,
                elapsed=round(state.elapsed, 3),
                ready=status.ready,
            )
            if on_attempt is not None:
                on_attempt(state)
            if state.phase is PollPhase.DONE:
                break

            remaining = timeout - state.elapsed
            if remaining > 0 and not self.sleeper.sleep(min(interval, remaining)):
                raise RenewalCancelledError(ref, state.attempts)

            state.elapsed = self._clock() - start
            if state.elapsed >= timeout:
                state.phase = PollPhase.TIMED_OUT

        if state.phase is PollPhase.TIMED_OUT:
            last = state.last_status.get_condition(CONDITION_READY) if state.last_status else None
            self._log.warning(
                "poll_timed_out", certificate=str(ref), attempts=state.attempts, timeout=timeout
            )
            raise RenewalTimeoutError(ref, timeout, state.attempts, last)

        self._log.info("certificate_ready", certificate=str(ref), attempts=state.attempts)
        return state
