"""Shared fixtures for the SUSE Manager / meshStack intent test suite."""

import json
from unittest.mock import MagicMock

import pytest
import responses

from apiclients.meshstack import MeshstackClient
from apiclients.suma import API_PREFIX, SumaClient
from intent import SumaWorkflows

SUMA_URL = "https://suma.test"
MESHSTACK_URL = "https://meshstack.test"

# ── helpers ──────────────────────────────────────────────────────────


def suma_api(path: str) -> str:
    """Absolute URL of a SUSE Manager API call."""
    return f"{SUMA_URL}{API_PREFIX}{path}"


def request_json(call) -> dict:
    """Decode the JSON body of a recorded ``responses`` call."""
    return json.loads(call.request.body)


# ── fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def mock_responses():
    """Intercept every ``requests`` call made during the test."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture()
def suma_client():
    return SumaClient(SUMA_URL, session_cookie="dummy")


@pytest.fixture()
def meshstack_client():
    return MeshstackClient(MESHSTACK_URL, api_key="test-api-key")


@pytest.fixture()
def mock_suma_client():
    """A SumaClient double: a system at 192.168.1.10 with id 42, every mutation answering 200."""
    mock = MagicMock(spec=SumaClient)
    mock.get_system_id.return_value = 42
    mock.get_system_ip.return_value = "192.168.1.10"
    mock.add_or_remove_systems.return_value = 200
    mock.delete_system.return_value = 200
    mock.delete_system_group.return_value = 200
    mock.create_user.return_value = 200
    mock.delete_user.return_value = 200
    mock.list_system_groups.return_value = []
    mock.list_users.return_value = []
    return mock


@pytest.fixture()
def workflows(mock_suma_client):
    return SumaWorkflows(mock_suma_client)
