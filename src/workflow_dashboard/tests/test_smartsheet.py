from unittest.mock import MagicMock

import pytest
import requests

from workflow_dashboard.config import REQUIRED_FIELDS
from workflow_dashboard.smartsheet import (
    SmartsheetClient,
    SmartsheetCredentials,
    SmartsheetError,
    sheet_to_records,
)

API = "https://api.example.test/2.0/"
CREDS = SmartsheetCredentials(sheet_id="123", token="tok")

SHEET = {
    "columns": [
        {"id": 1, "title": "Component"},
        {"id": 2, "title": "Health"},
        {"id": 3, "title": "Extra"},
    ],
    "rows": [
        {"cells": [
            {"columnId": 1, "value": "Math"},
            {"columnId": 2, "value": None},
            {"columnId": 3, "value": "x"},
            {"columnId": 99, "value": "orphan"},
        ]},
        {"cells": []},
    ],
}


def _response(ok=True, status=200, body=None, json_error=None):
    response = MagicMock()
    response.ok = ok
    response.status_code = status
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


def _client(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return SmartsheetClient(api_base=API, timeout=5, session=session), session


# ----------------------------------------------------------------
# 1. SHEET CONVERSION
# ----------------------------------------------------------------

def test_sheet_to_records():
    records = sheet_to_records(SHEET)

    assert len(records) == 2
    first = records[0]
    assert first["Component"] == "Math"
    assert first["Health"] == ""
    assert first["Extra"] == "x"
    assert all(field in first for field in REQUIRED_FIELDS)
    assert all(records[1][field] == "" for field in REQUIRED_FIELDS)


@pytest.mark.parametrize("payload", [{}, {"rows": [], "columns": SHEET["columns"]}, {"rows": SHEET["rows"]}, "nope"])
def test_sheet_to_records_rejects_bad_payload(payload):
    assert sheet_to_records(payload) == []


def test_credentials_repr_hides_token():
    text = repr(SmartsheetCredentials(sheet_id="1", token="s3cr3t"))
    assert "s3cr3t" not in text
    assert "***" in text


# ----------------------------------------------------------------
# 2. FETCH
# ----------------------------------------------------------------

def test_fetch_success():
    client, session = _client(_response(body=SHEET))

    records = client.fetch(CREDS)

    assert records[0]["Component"] == "Math"
    session.get.assert_called_once()
    args, kwargs = session.get.call_args
    assert args[0] == "https://api.example.test/2.0/sheets/123"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["timeout"] == 5


@pytest.mark.parametrize(
    "status, kind",
    [(401, "auth"), (403, "auth"), (404, "not_found"), (429, "rate_limited"), (503, "unavailable"), (400, "error")],
)
def test_http_errors_are_classified(status, kind):
    client, _ = _client(_response(ok=False, status=status, body={"message": "nope"}))

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(CREDS)

    assert exc.value.kind == kind
    assert exc.value.status == status


def test_error_detail_from_api_message():
    client, _ = _client(_response(ok=False, status=404, body={"message": "Not found: 123"}))

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(CREDS)

    assert "Not found: 123" in exc.value.message


@pytest.mark.parametrize("response", [
    _response(ok=False, status=500, body=["unexpected"]),
    _response(ok=False, status=500, json_error=ValueError("no json")),
])
def test_error_body_need_not_be_json_object(response):
    client, _ = _client(response)

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(CREDS)

    assert exc.value.kind == "unavailable"


def test_network_failure_is_unavailable():
    client, _ = _client(error=requests.exceptions.ConnectionError("down"))

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(CREDS)

    assert exc.value.kind == "unavailable"


def test_malformed_success_body():
    client, _ = _client(_response(json_error=ValueError("bad json")))

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(CREDS)

    assert exc.value.kind == "error"


@pytest.mark.parametrize("creds", [
    SmartsheetCredentials(sheet_id="", token="tok"),
    SmartsheetCredentials(sheet_id="12ab", token="tok"),
    SmartsheetCredentials(sheet_id="123", token=""),
])
def test_invalid_credentials_rejected_before_request(creds):
    client, session = _client(_response(body=SHEET))

    with pytest.raises(SmartsheetError) as exc:
        client.fetch(creds)

    assert exc.value.kind == "invalid_request"
    session.get.assert_not_called()
