"""Shared pytest fixtures for cert_renewal_manager tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from typer.testing import CliRunner

CertificateFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear CERTCTL_ environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("CERTCTL_"):
            monkeypatch.delenv(key, raising=False)


def build_certificate(
    name: str = "my-tls",
    namespace: str = "default",
    *,
    ready: str | None = "True",
    issuing: str | None = None,
    labels: dict[str, str] | None = None,
    generation: int = 1,
    resource_version: str = "1000",
    revision: int = 1,
) -> dict[str, Any]:
    """Build a cert-manager Certificate object as returned by CustomObjectsApi."""
    conditions: list[dict[str, Any]] = []
    if ready is not None:
        conditions.append(
            {
                "type": "Ready",
                "status": ready,
                "reason": "Ready" if ready == "True" else "DoesNotExist",
                "message": "Certificate is up to date and has not expired"
                if ready == "True"
                else "Issuing certificate as Secret does not exist",
                "observedGeneration": generation,
                "lastTransitionTime": "2026-01-01T00:00:00Z",
            }
        )
    if issuing is not None:
        conditions.append(
            {
                "type": "Issuing",
                "status": issuing,
                "reason": "Renewing",
                "message": "Renewing certificate as renewal was scheduled",
                "observedGeneration": generation,
                "lastTransitionTime": "2026-01-02T00:00:00Z",
            }
        )
    return {
        "apiVersion": "cert-manager.io/v1",
        "kind": "Certificate",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "generation": generation,
            "resourceVersion": resource_version,
            "creationTimestamp": "2026-01-01T00:00:00Z",
            "labels": labels or {},
        },
        "spec": {
            "secretName": f"{name}-secret",
            "issuerRef": {"name": "letsencrypt-prod", "kind": "ClusterIssuer"},
            "dnsNames": ["example.com"],
        },
        "status": {
            "conditions": conditions,
            "notAfter": "2026-04-01T00:00:00Z",
            "notBefore": "2026-01-01T00:00:00Z",
            "renewalTime": "2026-03-17T00:00:00Z",
            "revision": revision,
        },
    }


@pytest.fixture
def certificate_factory() -> CertificateFactory:
    """Factory for Certificate API objects."""
    return build_certificate
