# tests/test_ledger_client.py
"""
Ledger Client Tests - Gateway Calls with requests.post Mocked

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- pricing_oracle.adapters.ledger.client (LedgerGatewayClient)
- pricing_oracle.config (Settings)
- unittest.mock (patch for requests.post)
"""
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests

from pricing_oracle.adapters.ledger.client import LedgerGatewayClient
from pricing_oracle.config import Settings
from pricing_oracle.domain.errors import SubmissionError
from pricing_oracle.domain.models import ConversionData, ConversionTable

POST = "pricing_oracle.adapters.ledger.client.requests.post"


def response(payload=None, status=200, text=""):
    resp = Mock()
    resp.status_code = status
    resp.text = text
    resp.json.return_value = payload
    return resp


@pytest.fixture
def client():
    cfg = Settings(ledger_url="http://ledger.local:8888/", ledger_app_id="bridging-app", ledger_role_name="alliance")
    return LedgerGatewayClient(cfg, timeout=4)


@pytest.fixture
def table():
    return ConversionTable(
        data={0: ConversionData(Decimal("1.5"), "10.00", "", ("geckoterminal",), "0x" + "a" * 40)},
        forex_rates=(),
        global_definition="gd-1",
    )


@patch(POST)
def test_fetch_global_definition(mock_post, client):
    mock_post.return_value = response({"id": "gd-1", "signed_action": {}})

    assert client.fetch_global_definition() == "gd-1"
    url = mock_post.call_args[0][0]
    assert url == "http://ledger.local:8888/bridging-app/alliance/transactor/get_current_global_definition"
    assert mock_post.call_args[1]["timeout"] == 4


@patch(POST)
def test_fetch_global_definition_without_id(mock_post, client):
    mock_post.return_value = response(None)
    with pytest.raises(SubmissionError, match="no id"):
        client.fetch_global_definition()


@patch(POST)
def test_submit_sends_table_dict(mock_post, client, table):
    mock_post.return_value = response("uhCkk-table-hash")

    assert client.submit_conversion_table(table) == "uhCkk-table-hash"
    payload = mock_post.call_args[1]["json"]
    assert payload["global_definition"] == "gd-1"
    assert payload["data"]["0"]["current_price"] == "1.5"
    assert mock_post.call_args[0][0].endswith("/transactor/create_conversion_table")


@patch(POST)
def test_submit_accepts_hash_object(mock_post, client, table):
    mock_post.return_value = response({"hash": "uhCkk-other"})
    assert client.submit_conversion_table(table) == "uhCkk-other"


@patch(POST)
def test_http_error(mock_post, client, table):
    mock_post.return_value = response(status=500, text="zome call failed")
    with pytest.raises(SubmissionError, match="HTTP 500"):
        client.submit_conversion_table(table)


@patch(POST)
def test_connection_error(mock_post, client):
    mock_post.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(SubmissionError, match="failed to connect"):
        client.fetch_global_definition()


@patch(POST)
def test_timeout(mock_post, client):
    mock_post.side_effect = requests.exceptions.Timeout()
    with pytest.raises(SubmissionError, match="timed out"):
        client.fetch_global_definition()
