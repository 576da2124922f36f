"""
Module 10 - API Tests

Tests for the FastAPI endpoints:
1. GET /health and /summary
2. State transitions and state history
3. GIST root, root history and proofs
4. Proof request lifecycle
5. Proof submission, linked proofs and raw values
6. Registry errors mapped to HTTP status codes
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from core.clock import FrozenBlockClock

from fixtures.registry_fixtures import OWNER, make_genesis_identity, make_stub_ledger


@pytest.fixture
def api_ledger():
    return make_stub_ledger(FrozenBlockClock(timestamp=1_000, block=10))


@pytest.fixture
def client(api_ledger):
    return TestClient(create_app(ledger=api_ledger))


@pytest.fixture
def identity():
    return make_genesis_identity(0x13)


def transit(client, id, old_state, new_state, genesis):
    return client.post("/state/transit", json={
        "id": id,
        "old_state": old_state,
        "new_state": new_state,
        "is_old_state_genesis": genesis,
    })


def put_request(client, request_id, validator="stub", caller="alice", data="0x"):
    return client.put(f"/requests/{request_id}", json={
        "caller": caller,
        "metadata": "age check",
        "validator": validator,
        "data": data,
    })


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["service"] == "idstate-registry-api"

    def test_root(self, client):
        assert client.get("/").json()["ok"] is True

    def test_summary(self, client):
        data = client.get("/summary").json()
        assert data["gist_root"] == "0"
        assert data["requests_count"] == 0


class TestStateRoutes:
    def test_transit_and_read(self, client, identity):
        id, genesis = identity
        response = transit(client, id, genesis, 0x100, True)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(id)
        assert body["state"] == str(0x100)
        assert body["created_at_block"] == 10

        assert client.get(f"/state/{id}").json()["state"] == str(0x100)

        history = client.get(f"/state/{id}/history", params={"start": 0, "length": 2}).json()
        assert [h["state"] for h in history] == [str(genesis), str(0x100)]

        genesis_info = client.get(f"/state/{id}/states/{genesis}").json()
        assert genesis_info["replaced_by_state"] == str(0x100)

    def test_invalid_transition_is_400(self, client, identity):
        id, _ = identity
        response = transit(client, id, 0x14, 0x100, True)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_STATE_TRANSITION"
        assert error["category"] == "validation"
        assert "genesis state" in error["message"]

    def test_unknown_identity_is_404(self, client, identity):
        id, _ = identity
        assert client.get(f"/state/{id}").status_code == 404
        assert transit(client, id, 0x100, 0x200, False).status_code == 404

    def test_history_length_zero(self, client, identity):
        id, genesis = identity
        transit(client, id, genesis, 0x100, True)
        response = client.get(f"/state/{id}/history", params={"start": 0, "length": 0})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "LENGTH_ZERO"

    def test_malformed_body_is_422(self, client):
        response = client.post("/state/transit", json={"id": "abc"})
        assert response.status_code == 422


class TestGistRoutes:
    def test_root_and_history(self, client, api_ledger, identity):
        id, genesis = identity
        transit(client, id, genesis, 0x100, True)
        root = str(api_ledger.tree.root)

        assert client.get("/gist/root").json()["root"] == root

        history = client.get("/gist/roots", params={"length": 1}).json()
        assert history["total"] == 1
        assert history["entries"][0]["root"] == root

        assert client.get(f"/gist/roots/{root}").json()["created_at_block"] == 10
        assert client.get("/gist/roots/by-block/10").json()["root"] == root
        assert client.get("/gist/roots/by-time/999").json() is None

    def test_root_history_limit(self, client, identity):
        id, genesis = identity
        transit(client, id, genesis, 0x100, True)
        response = client.get("/gist/roots", params={"length": 1001})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "LENGTH_LIMIT_EXCEEDED"

    def test_unknown_root_is_404(self, client):
        response = client.get("/gist/roots/12345")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ROOT_NOT_FOUND"

    def test_proofs(self, client, api_ledger, identity):
        id, genesis = identity
        transit(client, id, genesis, 0x100, True)
        root = api_ledger.tree.root

        current = client.get(f"/gist/proof/{id}").json()
        assert current["existence"] is True
        assert current["value"] == str(0x100)
        assert len(current["siblings"]) == 32

        by_root = client.get(f"/gist/proof/{id}", params={"root": root}).json()
        assert by_root == current

        before = client.get(f"/gist/proof/{id}", params={"timestamp": 999}).json()
        assert before["root"] == "0"
        assert before["existence"] is False

    def test_proof_selectors_are_exclusive(self, client, identity):
        id, _ = identity
        response = client.get(f"/gist/proof/{id}", params={"root": 1, "block": 1})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestRequestRoutes:
    def test_lifecycle(self, client):
        assert client.get("/validators").json()["validators"] == ["stub", "stub-v3"]

        created = put_request(client, 1, data="0x0102")
        assert created.status_code == 200
        assert created.json()["controller"] == "alice"
        assert created.json()["data"] == "0x0102"

        assert client.post("/requests/1/disable", json={"caller": "alice"}).json()["ok"] is True
        assert client.get("/requests/1").json()["is_disabled"] is True
        assert client.post("/requests/1/enable", json={"caller": OWNER}).status_code == 200
        assert client.get("/requests/1").json()["is_disabled"] is False

    def test_not_whitelisted_is_403(self, client):
        response = put_request(client, 1, validator="unknown")
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Validator is not whitelisted"

    def test_stranger_is_403(self, client):
        put_request(client, 1)
        response = client.post("/requests/1/disable", json={"caller": "mallory"})
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_unknown_request_is_404(self, client):
        response = client.get("/requests/77")
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "request id doesn't exist"

    def test_listing(self, client):
        put_request(client, 1, caller="alice")
        put_request(client, 2, caller="bob")
        put_request(client, 3, caller="alice")

        everything = client.get("/requests", params={"offset": 0, "length": 10}).json()
        assert everything["total"] == 3
        assert [r["request_id"] for r in everything["requests"]] == [1, 2, 3]
        assert everything["requests"][0]["controller"] is None

        mine = client.get("/requests", params={"controller": "alice", "offset": 1, "length": 10}).json()
        assert mine["total"] == 2
        assert [r["request_id"] for r in mine["requests"]] == [3]

        out_of_bounds = client.get("/requests", params={"offset": 3, "length": 1})
        assert out_of_bounds.status_code == 400
        assert out_of_bounds.json()["error"]["code"] == "START_OUT_OF_BOUNDS"


class TestProofRoutes:
    def test_submit_and_query(self, client):
        put_request(client, 1)
        response = client.post("/requests/1/responses", json={"inputs": [42], "proof": {"valid": True}})

        assert response.status_code == 200
        assert response.json()["is_proved"] is True
        assert response.json()["storage"] == {"userID": "42"}

        status = client.get("/proofs/42/1").json()
        assert status["validator_version"] == "stub-v1"
        assert client.get("/proofs/43/1").json()["is_proved"] is False

    def test_invalid_proof_is_422(self, client):
        put_request(client, 1)
        response = client.post("/requests/1/responses", json={"inputs": [42], "proof": {"valid": False}})
        assert response.status_code == 422
        assert response.json()["error"]["category"] == "verification"

    def test_disabled_request_is_403(self, client):
        put_request(client, 1)
        client.post("/requests/1/disable", json={"caller": "alice"})
        response = client.post("/requests/1/responses", json={"inputs": [42], "proof": {"valid": True}})
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Request is disabled"

    def test_user_id_mismatch_is_403(self, client):
        put_request(client, 2, validator="stub-v3")
        response = client.post("/requests/2/responses", json={
            "inputs": [42, 7], "proof": {"valid": True}, "requester_id": 43,
        })
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "USER_ID_MISMATCH"

    def test_verify_only(self, client):
        put_request(client, 2, validator="stub-v3")
        response = client.post("/requests/2/responses/verify", json={"inputs": [42, 7], "proof": {"valid": True}})
        assert response.json() == {"ok": True, "signals": {"userID": "42", "linkID": "7"}}
        assert client.get("/proofs/42/2").json()["is_proved"] is False

    def test_linked_proofs(self, client):
        for request_id in (2, 3):
            put_request(client, request_id, validator="stub-v3")
        client.post("/requests/2/responses", json={"inputs": [42, 7], "proof": {"valid": True}})
        client.post("/requests/3/responses", json={"inputs": [42, 8], "proof": {"valid": True}})

        response = client.post("/proofs/linked", json={"request_ids": [2, 3], "requester": 42})
        assert response.status_code == 422
        assert response.json()["error"]["message"] == "LinkedProofError"

        single = client.post("/proofs/linked", json={"request_ids": [2], "requester": 42})
        assert single.status_code == 400

    def test_raw_value(self, client):
        put_request(client, 1)
        client.post("/requests/1/responses", json={"inputs": [42], "proof": {"valid": True}})

        response = client.put("/proofs/42/1/raw/score", json={"raw_value": "0xbeef"})
        assert response.status_code == 200
        assert response.json()["raw_values"] == {"score": "0xbeef"}

        missing = client.put("/proofs/42/9/raw/score", json={"raw_value": "0x01"})
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "PROOF_NOT_FOUND"
