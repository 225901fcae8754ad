"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cert_renewal_manager.integrations.kubernetes.client import KubernetesClient


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client.

    Reads are not retried and API errors go through the real translation.
    """
    mock_client = MagicMock()
    mock_client.default_namespace = "default"
    mock_client.make_retry_decorator.return_value = lambda f: f
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    return mock_client
