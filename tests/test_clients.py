"""
Tests for the signed transport client.

These tests use responses library to mock HTTP requests,
validating client behavior without making real API calls.
"""

import json
import re
from urllib.parse import urlsplit

import pytest
import requests
import responses
from responses import matchers

from starkledger.auth.signer import canonical_message, verify_signature
from starkledger.config import ClientConfig, set_default_user
from starkledger.errors import (
    ApiError,
    ConfigurationError,
    MalformedResponse,
    NetworkError,
    NotFound,
    ServerError,
    Unauthorized,
    ValidationError,
)
from starkledger.transaction import Transaction
from starkledger.transaction import resource as transaction_resource
from starkledger.transport import TransportClient

from fixtures import SANDBOX_URL, make_transaction_json

TRANSACTION_URL = f"{SANDBOX_URL}/transaction"


def new_transactions(count: int) -> list[Transaction]:
    return [
        Transaction(
            amount=100 * (i + 1),
            description=f"funds redistribution {i}",
            external_id=f"transaction-{i}",
            receiver_id="5768064935133184",
            tags=["test"],
        )
        for i in range(count)
    ]


class TestCreate:
    @responses.activate
    def test_create_success(self, client, project):
        """Created resources come back with server-assigned fields."""
        responses.add(
            responses.POST,
            TRANSACTION_URL,
            json={
                "message": "Transaction(s) successfully created",
                "transactions": [make_transaction_json(i) for i in range(3)],
            },
            status=200,
        )

        created = client.create(transaction_resource, new_transactions(3), user=project)

        assert len(created) == 3
        assert all(tx.id for tx in created)
        assert [tx.external_id for tx in created] == ["transaction-0", "transaction-1", "transaction-2"]
        assert created[0].fee == 0

        sent = json.loads(responses.calls[0].request.body)
        assert len(sent["transactions"]) == 3
        assert sent["transactions"][0] == {
            "amount": 100,
            "description": "funds redistribution 0",
            "externalId": "transaction-0",
            "receiverId": "5768064935133184",
            "tags": ["test"],
        }

    @responses.activate
    def test_request_is_signed(self, client, project, public_key):
        responses.add(
            responses.POST,
            TRANSACTION_URL,
            json={"transactions": [make_transaction_json(0)]},
            status=200,
        )

        client.create(transaction_resource, new_transactions(1), user=project)

        request = responses.calls[0].request
        assert request.headers["Access-Id"] == "project/5656565656565656"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept-Language"] == "en-US"

        message = canonical_message(
            request.headers["Access-Id"],
            request.headers["Access-Time"],
            "POST",
            urlsplit(request.url).path,
            request.body.decode("utf-8"),
        )
        assert verify_signature(message, request.headers["Access-Signature"], public_key)

    @responses.activate
    def test_create_validation_error_names_index(self, client, project):
        """One invalid entry among three fails the whole batch."""
        responses.add(
            responses.POST,
            TRANSACTION_URL,
            json={
                "errors": [
                    {
                        "code": "invalidAmount",
                        "message": "Element 1: amount must be a positive integer",
                    }
                ]
            },
            status=400,
        )

        with pytest.raises(ValidationError) as exc_info:
            client.create(transaction_resource, new_transactions(3), user=project)

        error = exc_info.value
        assert error.status_code == 400
        assert error.indexes == [1]
        assert error.errors[0].code == "invalidAmount"
        assert len(responses.calls) == 1

    @responses.activate
    def test_create_validation_error_explicit_index(self, client, project):
        responses.add(
            responses.POST,
            TRANSACTION_URL,
            json={"errors": [{"code": "invalidDescription", "message": "too short", "index": 2}]},
            status=400,
        )

        with pytest.raises(ValidationError) as exc_info:
            client.create(transaction_resource, new_transactions(3), user=project)

        assert exc_info.value.indexes == [2]

    @responses.activate
    def test_create_missing_envelope(self, client, project):
        responses.add(responses.POST, TRANSACTION_URL, json={"message": "ok"}, status=200)

        with pytest.raises(MalformedResponse):
            client.create(transaction_resource, new_transactions(1), user=project)


class TestGetById:
    @responses.activate
    def test_get_success(self, client, project):
        raw = make_transaction_json(7)
        responses.add(
            responses.GET,
            f"{TRANSACTION_URL}/{raw['id']}",
            json={"transaction": raw},
            status=200,
        )

        tx = client.get_by_id(transaction_resource, raw["id"], user=project)

        assert isinstance(tx, Transaction)
        assert tx.id == raw["id"]
        assert tx.amount == 800

    @responses.activate
    def test_get_is_idempotent(self, client, project):
        raw = make_transaction_json(1)
        responses.add(
            responses.GET,
            f"{TRANSACTION_URL}/{raw['id']}",
            json={"transaction": raw},
            status=200,
        )

        first = client.get_by_id(transaction_resource, raw["id"], user=project)
        second = client.get_by_id(transaction_resource, raw["id"], user=project)

        assert first == second

    @responses.activate
    def test_get_not_found(self, client, project):
        responses.add(
            responses.GET,
            f"{TRANSACTION_URL}/404",
            json={"errors": [{"code": "invalidTransactionId", "message": "Transaction not found"}]},
            status=404,
        )

        with pytest.raises(NotFound):
            client.get_by_id(transaction_resource, "404", user=project)

    def test_get_requires_id(self, client, project):
        with pytest.raises(ValueError):
            client.get_by_id(transaction_resource, "", user=project)

    @responses.activate
    def test_get_escapes_id(self, client, project):
        """An id cannot change the path or add a query string."""
        responses.add(
            responses.GET,
            re.compile(r".*/v2/transaction/\.\.%2Ftransaction%3Flimit%3D1$"),
            json={"errors": [{"code": "invalidTransactionId", "message": "Transaction not found"}]},
            status=404,
        )

        with pytest.raises(NotFound):
            client.get_by_id(transaction_resource, "../transaction?limit=1", user=project)

        sent = urlsplit(responses.calls[0].request.url)
        assert sent.path == "/v2/transaction/..%2Ftransaction%3Flimit%3D1"
        assert sent.query == ""


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,error_class",
        [(401, Unauthorized), (403, Unauthorized), (500, ServerError), (503, ServerError)],
    )
    @responses.activate
    def test_status_codes(self, client, project, status, error_class):
        responses.add(
            responses.GET,
            f"{TRANSACTION_URL}/1",
            json={"errors": [{"code": "error", "message": "nope"}]},
            status=status,
        )

        with pytest.raises(error_class) as exc_info:
            client.get_by_id(transaction_resource, "1", user=project)

        assert exc_info.value.status_code == status

    @responses.activate
    def test_unexpected_status_is_api_error(self, client, project):
        responses.add(responses.GET, f"{TRANSACTION_URL}/1", body="slow down", status=429)

        with pytest.raises(ApiError) as exc_info:
            client.get_by_id(transaction_resource, "1", user=project)

        assert type(exc_info.value) is ApiError
        assert exc_info.value.response_body == "slow down"

    @responses.activate
    def test_non_json_success_is_malformed(self, client, project):
        responses.add(responses.GET, f"{TRANSACTION_URL}/1", body="<html>", status=200)

        with pytest.raises(MalformedResponse):
            client.get_by_id(transaction_resource, "1", user=project)

    @pytest.mark.parametrize(
        "fault",
        [
            requests.exceptions.ConnectionError("connection reset"),
            requests.exceptions.Timeout("timed out"),
        ],
    )
    @responses.activate
    def test_transport_faults_are_network_errors(self, client, project, fault):
        responses.add(responses.GET, f"{TRANSACTION_URL}/1", body=fault)

        with pytest.raises(NetworkError):
            client.get_by_id(transaction_resource, "1", user=project)

    @responses.activate
    def test_missing_user_fails_before_network(self, client):
        responses.add(responses.GET, f"{TRANSACTION_URL}/1", json={})

        with pytest.raises(ConfigurationError):
            client.get_by_id(transaction_resource, "1")

        assert len(responses.calls) == 0

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            TransportClient(ClientConfig(timeout=-1))


class TestPaging:
    @responses.activate
    def test_get_page_caps_limit_and_sends_cursor(self, client, project):
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": "next-cursor", "transactions": [make_transaction_json(0)]},
            status=200,
            match=[
                matchers.query_param_matcher(
                    {"limit": "100", "cursor": "abc", "externalIds": "x,y"}
                )
            ],
        )

        page = client.get_page(
            transaction_resource,
            {"limit": 500, "external_ids": ["x", "y"], "tags": None},
            cursor="abc",
            user=project,
        )

        assert len(page.items) == 1
        assert page.cursor == "next-cursor"

    @responses.activate
    def test_get_page_rejects_negative_limit(self, client, project):
        with pytest.raises(ValueError, match="limit"):
            client.get_page(transaction_resource, {"limit": -1}, user=project)

        assert len(responses.calls) == 0

    @responses.activate
    def test_exhausted_cursor_returns_empty_page(self, client, project):
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": None, "transactions": []},
            status=200,
        )

        items, cursor = client.get_page(transaction_resource, {}, cursor="last", user=project)

        assert items == []
        assert cursor is None

    @responses.activate
    def test_get_list_follows_cursors(self, client, project):
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": "p2", "transactions": [make_transaction_json(i) for i in range(2)]},
            match=[matchers.query_param_matcher({"limit": "100"})],
        )
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": None, "transactions": [make_transaction_json(i) for i in range(2, 4)]},
            match=[matchers.query_param_matcher({"limit": "100", "cursor": "p2"})],
        )

        transactions = list(client.get_list(transaction_resource, {}, user=project))

        assert [tx.external_id for tx in transactions] == [f"transaction-{i}" for i in range(4)]
        assert len(responses.calls) == 2

    @responses.activate
    def test_get_list_limit_one(self, client, project):
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": "more", "transactions": [make_transaction_json(0)]},
            match=[matchers.query_param_matcher({"limit": "1"})],
        )

        transactions = list(client.get_list(transaction_resource, {"limit": 1}, user=project))

        assert len(transactions) == 1
        assert len(responses.calls) == 1

    @responses.activate
    def test_default_user_is_used(self, client, project):
        set_default_user(project)
        responses.add(
            responses.GET,
            TRANSACTION_URL,
            json={"cursor": None, "transactions": []},
        )

        assert list(client.get_list(transaction_resource)) == []
        assert responses.calls[0].request.headers["Access-Id"] == project.access_id
