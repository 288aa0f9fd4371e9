"""
Unit tests for pivy_stealth.core.ledger — JSON-RPC client over a mocked transport.
"""

import base64
import json

import httpx
import pytest

from pivy_stealth.core.ledger import RpcLedger
from pivy_stealth.exceptions import LedgerError

RPC_URL = "http://ledger.test"


def _ledger(handler) -> RpcLedger:
    return RpcLedger(RPC_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestSubmit:

    def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "5sigABC"})

        with _ledger(handler) as ledger:
            assert ledger.submit(b"\x01\x02\x03") == "5sigABC"

        body = seen["body"]
        assert seen["url"].rstrip("/") == RPC_URL
        assert body["method"] == "sendTransaction"
        assert body["jsonrpc"] == "2.0"
        assert body["params"][0] == base64.b64encode(b"\x01\x02\x03").decode()
        assert body["params"][1] == {"encoding": "base64"}

    def test_request_ids_increment(self):
        ids = []

        def handler(request):
            ids.append(json.loads(request.content)["id"])
            return httpx.Response(200, json={"result": "sig"})

        ledger = _ledger(handler)
        ledger.submit(b"a")
        ledger.submit(b"b")
        assert ids == [1, 2]

    def test_rpc_error(self):
        def handler(request):
            return httpx.Response(
                200, json={"error": {"code": -32002, "message": "Blockhash not found"}}
            )

        with pytest.raises(LedgerError) as exc_info:
            _ledger(handler).submit(b"tx")
        assert exc_info.value.code == -32002
        assert str(exc_info.value) == "[-32002] Blockhash not found"

    def test_http_error(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        with pytest.raises(LedgerError, match="HTTP 503"):
            _ledger(handler).submit(b"tx")

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(LedgerError, match="request failed"):
            _ledger(handler).submit(b"tx")

    def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(LedgerError, match="invalid JSON"):
            _ledger(handler).submit(b"tx")

    def test_non_object_body(self):
        def handler(request):
            return httpx.Response(200, json=["sig"])

        with pytest.raises(LedgerError, match="unexpected body"):
            _ledger(handler).submit(b"tx")


class TestFetch:

    def test_returns_account_data(self):
        data = b"\x00" * 8 + b"stealth-account"

        def handler(request):
            body = json.loads(request.content)
            assert body["method"] == "getAccountInfo"
            assert body["params"][0] == "Acct111"
            return httpx.Response(
                200,
                json={"result": {"value": {"data": [base64.b64encode(data).decode(), "base64"]}}},
            )

        assert _ledger(handler).fetch("Acct111") == data

    def test_missing_account(self):
        def handler(request):
            return httpx.Response(200, json={"result": {"context": {"slot": 1}, "value": None}})

        with pytest.raises(LedgerError, match="Account not found"):
            _ledger(handler).fetch("Nope111")
