"""Fixtures for CLI command tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
import typer

from cert_renewal_manager.cli.commands.certificates import register_certificate_commands
from cert_renewal_manager.core.config.models import CertctlConfig
from cert_renewal_manager.integrations.kubernetes.models.certmanager import (
    CertificateStatus,
    CertificateSummary,
)


@pytest.fixture
def mock_manager() -> MagicMock:
    """Create a mock CertManagerManager."""
    manager = MagicMock()
    manager.default_namespace = "default"
    manager.current_context = "kind-test"
    return manager


@pytest.fixture
def config() -> CertctlConfig:
    """Default configuration."""
    return CertctlConfig()


@pytest.fixture
def get_manager(mock_manager: MagicMock) -> MagicMock:
    """Factory returning the mock manager."""
    return MagicMock(return_value=mock_manager)


@pytest.fixture
def app(get_manager: MagicMock, config: CertctlConfig) -> typer.Typer:
    """Create a test app with certificate commands."""
    test_app = typer.Typer()
    register_certificate_commands(test_app, get_manager, lambda: config)
    return test_app


@pytest.fixture
def summary(certificate_factory: Any) -> Callable[..., CertificateSummary]:
    """Factory for CertificateSummary models."""

    def _make(name: str = "my-tls", namespace: str = "default", **kwargs: Any) -> CertificateSummary:
        return CertificateSummary.from_k8s_object(certificate_factory(name, namespace, **kwargs))

    return _make


@pytest.fixture
def ready_status() -> CertificateStatus:
    """Status with Ready=True."""
    return CertificateStatus.from_k8s_object({"conditions": [{"type": "Ready", "status": "True"}]})


@pytest.fixture
def pending_status() -> CertificateStatus:
    """Status of a Certificate being reissued."""
    return CertificateStatus.from_k8s_object(
        {
            "conditions": [
                {"type": "Ready", "status": "False", "reason": "Issuing"},
                {"type": "Issuing", "status": "True", "reason": "ManuallyTriggered"},
            ]
        }
    )


def flatten(text: str) -> str:
    """Collapse console line wrapping so assertions can match whole phrases."""
    return " ".join(text.split())


@pytest.fixture
def text() -> Callable[[str], str]:
    """Whitespace-normalizing helper for console output."""
    return flatten
