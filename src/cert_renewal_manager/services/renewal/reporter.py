"""Progress reporting interface for the renewal batch."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
        CertificateRef,
        CertificateSummary,
    )
    from cert_renewal_manager.services.renewal.models import PollState, RenewalResult


class ProgressReporter(Protocol):
    """Receives one call per phase transition of a renewal batch."""

    def selected(self, certificates: list[CertificateSummary]) -> None: ...

    def triggered(self, ref: CertificateRef) -> None: ...

    def poll_attempt(self, state: PollState) -> None: ...

    def finished(self, result: RenewalResult) -> None: ...


class NullReporter:
    """Reporter that discards everything."""

    def selected(self, certificates: list[CertificateSummary]) -> None:
        pass

    def triggered(self, ref: CertificateRef) -> None:
        pass

    def poll_attempt(self, state: PollState) -> None:
        pass

    def finished(self, result: RenewalResult) -> None:
        pass
