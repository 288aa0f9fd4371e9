import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from pivy_stealth.api.server import app
from pivy_stealth.config import StealthConfig
from pivy_stealth.core.ledger import RpcLedger
from pivy_stealth.crypto.signer import verify_signature
from pivy_stealth.encoding import b58encode
from pivy_stealth.relayer.attestation import AttestationClient


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def keys_body(meta_keys):
    return {
        "meta_view_priv": meta_keys.view.private_key.hex(),
        "meta_spend_pub": meta_keys.spend.public_key_base58,
    }


@pytest.fixture
def announcement(client, meta_keys):
    address = meta_keys.meta_address
    response = client.post(
        "/stealth/pay",
        json={
            "meta_spend_pub": address.meta_spend_pub,
            "meta_view_pub": address.meta_view_pub,
            "label": "lunch",
            "amount": 2500,
        },
    )
    assert response.status_code == 200
    body = response.json()
    return {
        "stealth_owner": body["stealth_owner"],
        "eph_pubkey": body["eph_pubkey"],
        "memo": body["memo"],
        "label": body["label"],
        "amount": body["amount"],
    }


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_pay_missing_view_key(client):
    # Should fail pydantic validation
    response = client.post("/stealth/pay", json={"meta_spend_pub": "abc"})
    assert response.status_code == 422


def test_pay_invalid_key(client, meta_keys):
    response = client.post(
        "/stealth/pay",
        json={"meta_spend_pub": "abc", "meta_view_pub": meta_keys.meta_address.meta_view_pub},
    )
    assert response.status_code == 400
    assert "meta_spend_pub" in response.text


def test_pay_label_too_long(client, meta_keys):
    address = meta_keys.meta_address
    response = client.post(
        "/stealth/pay",
        json={
            "meta_spend_pub": address.meta_spend_pub,
            "meta_view_pub": address.meta_view_pub,
            "label": "x" * 33,
        },
    )
    assert response.status_code == 400


def test_pay_returns_payment(announcement):
    assert announcement["label"] == "lunch"
    assert announcement["amount"] == 2500


def test_receive_view_only(client, keys_body, announcement):
    response = client.post("/stealth/receive", json={**keys_body, "announcement": announcement})
    assert response.status_code == 200
    assert response.json() == {
        "stealth_owner": announcement["stealth_owner"],
        "label": "lunch",
        "spendable": False,
    }


def test_receive_with_spend_key(client, keys_body, announcement, meta_keys):
    body = {**keys_body, "meta_spend_priv": meta_keys.spend.private_key.hex(), "announcement": announcement}
    response = client.post("/stealth/receive", json=body)
    assert response.status_code == 200
    assert response.json()["spendable"] is True


def test_receive_not_ours(client, announcement, other_meta_keys):
    body = {
        "meta_view_priv": other_meta_keys.view.private_key.hex(),
        "meta_spend_pub": other_meta_keys.spend.public_key_base58,
        "announcement": announcement,
    }
    response = client.post("/stealth/receive", json=body)
    assert response.status_code == 404


def test_sign(client, keys_body, announcement, meta_keys):
    message = b"spend authorization"
    body = {
        **keys_body,
        "meta_spend_priv": meta_keys.spend.private_key.hex(),
        "announcement": announcement,
        "message_hex": message.hex(),
    }
    response = client.post("/stealth/sign", json=body)
    assert response.status_code == 200
    result = response.json()
    assert result["public_key"] == announcement["stealth_owner"]
    assert verify_signature(bytes.fromhex(result["signature"]), message, result["public_key"])


def test_sign_bad_hex(client, keys_body, announcement, meta_keys):
    body = {
        **keys_body,
        "meta_spend_priv": meta_keys.spend.private_key.hex(),
        "announcement": announcement,
        "message_hex": "zz",
    }
    response = client.post("/stealth/sign", json=body)
    assert response.status_code == 400


def test_sign_wrong_owner(client, keys_body, announcement, meta_keys):
    forged = {**announcement, "stealth_owner": b58encode(meta_keys.spend.public_key)}
    body = {
        **keys_body,
        "meta_spend_priv": meta_keys.spend.private_key.hex(),
        "announcement": forged,
        "message_hex": "00",
    }
    response = client.post("/stealth/sign", json=body)
    assert response.status_code == 409


def test_sign_foreign_memo(client, announcement, other_meta_keys):
    body = {
        "meta_view_priv": other_meta_keys.view.private_key.hex(),
        "meta_spend_pub": other_meta_keys.spend.public_key_base58,
        "meta_spend_priv": other_meta_keys.spend.private_key.hex(),
        "announcement": announcement,
        "message_hex": "00",
    }
    response = client.post("/stealth/sign", json=body)
    assert response.status_code == 422


def test_scan(client, keys_body, announcement, other_meta_keys):
    address = other_meta_keys.meta_address
    theirs = client.post(
        "/stealth/pay",
        json={"meta_spend_pub": address.meta_spend_pub, "meta_view_pub": address.meta_view_pub},
    ).json()
    response = client.post(
        "/stealth/scan",
        json={**keys_body, "announcements": [theirs, announcement]},
    )
    assert response.status_code == 200
    result = response.json()
    assert result["scanned"] == 2
    assert len(result["payments"]) == 1
    assert result["payments"][0]["stealth_owner"] == announcement["stealth_owner"]


@pytest.fixture
def wired_client(monkeypatch):
    """App whose ledger and attestation clients answer from in-memory handlers."""
    seen = []
    attestations = {"5KtReady": {"messages": [{"message": "0xabc", "attestation": "0xdef"}]}}

    def rpc(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        if body["params"][0] == base64.b64encode(b"stale").decode():
            return httpx.Response(
                200, json={"error": {"code": -32002, "message": "Blockhash not found"}}
            )
        return httpx.Response(200, json={"result": "5sigSubmitted"})

    def iris(request: httpx.Request) -> httpx.Response:
        tx = request.url.path.rsplit("/", 1)[-1]
        if tx not in attestations:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=attestations[tx])

    monkeypatch.setattr(
        StealthConfig,
        "ledger",
        lambda self: RpcLedger(self.rpc_url, client=httpx.Client(transport=httpx.MockTransport(rpc))),
    )
    monkeypatch.setattr(
        StealthConfig,
        "attestation_client",
        lambda self: AttestationClient(
            self.attestation_url, client=httpx.Client(transport=httpx.MockTransport(iris))
        ),
    )
    with TestClient(app) as c:
        yield c, seen


def test_submit(wired_client):
    client, seen = wired_client
    response = client.post(
        "/stealth/submit", json={"transaction": base64.b64encode(b"signed-tx").decode()}
    )
    assert response.status_code == 200
    assert response.json() == {"tx_id": "5sigSubmitted"}
    assert seen[0]["method"] == "sendTransaction"
    assert seen[0]["params"][0] == base64.b64encode(b"signed-tx").decode()


def test_submit_bad_base64(wired_client):
    client, seen = wired_client
    response = client.post("/stealth/submit", json={"transaction": "not base64!"})
    assert response.status_code == 400
    assert seen == []


def test_submit_ledger_error(wired_client):
    client, _ = wired_client
    response = client.post(
        "/stealth/submit", json={"transaction": base64.b64encode(b"stale").decode()}
    )
    assert response.status_code == 502
    assert "Blockhash not found" in response.json()["detail"]


def test_attestation_ready(wired_client):
    client, _ = wired_client
    response = client.get("/stealth/attestation/5/5KtReady")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "message": "0xabc", "attestation": "0xdef"}


def test_attestation_pending(wired_client):
    client, _ = wired_client
    response = client.get("/stealth/attestation/5/5KtUnseen")
    assert response.status_code == 202
    assert response.json()["status"] == "pending"


def test_announcement_label_too_long(client, keys_body, announcement):
    response = client.post(
        "/stealth/receive",
        json={**keys_body, "announcement": {**announcement, "label": "x" * 33}},
    )
    assert response.status_code == 422
