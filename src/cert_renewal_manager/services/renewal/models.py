"""Renewal protocol models: selection, poll policy and state, outcomes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CertificateRef,
    CertificateStatus,
)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 60.0


class SelectionCriteria(BaseModel):
    """Which Certificates to act on: explicit names XOR a label selector.

    Both being set is representable here so that the resolver can reject it
    with a proper error before touching the API.
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = ()
    label_selector: str | None = None

    @field_validator("names")
    @classmethod
    def strip_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Strip surrounding whitespace; blank names are rejected by the resolver."""
        return tuple(name.strip() for name in v)

    @property
    def has_selector(self) -> bool:
        return bool(self.label_selector and self.label_selector.strip())

    @property
    def is_conflicting(self) -> bool:
        return bool(self.names) and self.has_selector


class PollPolicy(BaseModel):
    """Interval and deadline for waiting on a Certificate to become Ready."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between reads")
    timeout: float = Field(default=DEFAULT_POLL_TIMEOUT, gt=0, description="Deadline in seconds")

    @model_validator(mode="after")
    def validate_interval_within_timeout(self) -> PollPolicy:
        """Reject an interval longer than the whole deadline."""
        if self.interval > self.timeout:
            raise ValueError("interval must not exceed timeout")
        return self

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> PollPolicy:
        """Create a policy with environment variable overrides.

        Supported environment variables:
            CERTCTL_POLL_INTERVAL: Seconds between status reads
            CERTCTL_POLL_TIMEOUT: Seconds to wait for readiness
        """
        config_dict = dict(base_config) if base_config else {}
        if interval := os.environ.get("CERTCTL_POLL_INTERVAL"):
            config_dict["interval"] = float(interval)
        if timeout := os.environ.get("CERTCTL_POLL_TIMEOUT"):
            config_dict["timeout"] = float(timeout)
        return cls.model_validate(config_dict)


class PollPhase(StrEnum):
    """States of one readiness wait."""

    POLLING = "Polling"
    DONE = "Done"
    FAILED = "Failed"
    TIMED_OUT = "TimedOut"

    @property
    def terminal(self) -> bool:
        return self is not PollPhase.POLLING


@dataclass
class PollState:
    """Progress of one readiness wait. Discarded when the wait ends."""

    ref: CertificateRef
    phase: PollPhase = PollPhase.POLLING
    attempts: int = 0
    elapsed: float = 0.0
    last_status: CertificateStatus | None = field(default=None, repr=False)


class RenewalOutcome(StrEnum):
    """Per-Certificate result of a renewal."""

    RENEWED = "Renewed"
    TRIGGERED = "Triggered"
    ALREADY_IN_PROGRESS = "AlreadyInProgress"
    NOT_READY = "NotReady"
    TIMED_OUT = "TimedOut"
    ERROR = "Error"

    @property
    def succeeded(self) -> bool:
        return self in (RenewalOutcome.RENEWED, RenewalOutcome.TRIGGERED)


class RenewalResult(BaseModel):
    """Outcome of renewing one Certificate."""

    model_config = ConfigDict(frozen=True)

    ref: CertificateRef
    outcome: RenewalOutcome
    detail: str | None = None
    phase: str | None = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome.succeeded
