"""Fixtures for renewal protocol tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CertificateRef,
    CertificateStatus,
    CertificateSummary,
)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleeper:
    """Sleeper that advances a FakeClock instead of blocking."""

    def __init__(self, clock: FakeClock, cancel_after: int | None = None) -> None:
        self._clock = clock
        self._cancel_after = cancel_after
        self.sleeps: list[float] = []
        self.cancelled = False

    def sleep(self, seconds: float) -> bool:
        if self.cancelled:
            return False
        self.sleeps.append(seconds)
        self._clock.advance(seconds)
        if self._cancel_after is not None and len(self.sleeps) >= self._cancel_after:
            self.cancelled = True
            return False
        return True

    def cancel(self) -> None:
        self.cancelled = True


def status_with(ready: str | None = "True", issuing: str | None = None) -> CertificateStatus:
    """Build a CertificateStatus from Ready/Issuing condition values."""
    conditions: list[dict[str, Any]] = []
    if ready is not None:
        conditions.append({"type": "Ready", "status": ready, "reason": "Test"})
    if issuing is not None:
        conditions.append({"type": "Issuing", "status": issuing, "reason": "Test"})
    return CertificateStatus.from_k8s_object({"conditions": conditions})


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at zero."""
    return FakeClock()


@pytest.fixture
def sleeper(clock: FakeClock) -> FakeSleeper:
    """Fake sleeper driving the fake clock."""
    return FakeSleeper(clock)


@pytest.fixture
def store() -> MagicMock:
    """Mock CertManagerManager."""
    return MagicMock()


@pytest.fixture
def ref() -> CertificateRef:
    """Reference to a sample Certificate."""
    return CertificateRef(namespace="default", name="my-tls")


@pytest.fixture
def summary_factory(certificate_factory: Any) -> Any:
    """Factory for CertificateSummary models."""

    def _make(name: str = "my-tls", namespace: str = "default", **kwargs: Any) -> CertificateSummary:
        return CertificateSummary.from_k8s_object(certificate_factory(name, namespace, **kwargs))

    return _make


@pytest.fixture
def status_factory() -> Any:
    """Factory for CertificateStatus models."""
    return status_with


@pytest.fixture
def sleeper_factory(clock: FakeClock) -> Any:
    """Factory for fake sleepers that cancel themselves after N sleeps."""

    def _make(cancel_after: int | None = None) -> FakeSleeper:
        return FakeSleeper(clock, cancel_after=cancel_after)

    return _make
