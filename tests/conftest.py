"""Test fixtures and utilities."""

import pytest

from starkledger.auth import Organization, Project, create_key_pair
from starkledger.config import clear_default_user
from starkledger.transport import TransportClient, set_default_client

from fixtures import make_transaction_json


@pytest.fixture(scope="session")
def key_pair() -> tuple[str, str]:
    """(private_pem, public_pem) generated once per test session."""
    return create_key_pair()


@pytest.fixture
def private_key(key_pair) -> str:
    return key_pair[0]


@pytest.fixture
def public_key(key_pair) -> str:
    return key_pair[1]


@pytest.fixture
def project(private_key) -> Project:
    """Sandbox project credential."""
    return Project(environment="sandbox", id="5656565656565656", private_key=private_key)


@pytest.fixture
def organization(private_key) -> Organization:
    """Sandbox organization credential without workspace."""
    return Organization(environment="sandbox", id="4545454545454545", private_key=private_key)


@pytest.fixture
def client() -> TransportClient:
    return TransportClient()


@pytest.fixture(autouse=True)
def reset_defaults():
    """Every test starts without default user or shared client."""
    clear_default_user()
    set_default_client(None)
    yield
    clear_default_user()
    set_default_client(None)


@pytest.fixture
def sample_transaction_json() -> dict:
    return make_transaction_json(0)


@pytest.fixture
def sample_brcode_log_json() -> dict:
    return {
        "id": "5155165527080960",
        "type": "success",
        "errors": [],
        "created": "2021-01-04T19:27:51.183742+00:00",
        "payment": {"id": "6212312312312312", "status": "success", "amount": 5000},
        "unexpectedField": "dropped",
    }
