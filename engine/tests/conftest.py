"""Shared pytest fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from azure.core.credentials import AccessToken

from cirrus.auth import InMemoryKeyStore
from cirrus.services.resilience import error_tracker


@pytest.fixture(autouse=True)
def _clear_error_tracker():
    error_tracker.clear()
    yield
    error_tracker.clear()


@pytest.fixture
def key_store() -> InMemoryKeyStore:
    """Key store holding secret S1 for app-1 in tenant t-1."""
    store = InMemoryKeyStore()
    store.add_key("app-1", "t-1", "S1")
    return store


@pytest.fixture
def token() -> AccessToken:
    return AccessToken("eyJ0eXAiOiJKV1QiLCJhbGciOi.test", 1_900_000_000)


@pytest.fixture
def token_acquirer(token: AccessToken) -> MagicMock:
    acquirer = MagicMock()
    acquirer.acquire_token_for_client.return_value = token
    return acquirer

