"""
Tests for the JSON contract call surface.
"""

import json

import pytest

from core.constants import parse_ether

from .conftest import ALICE, BOB, DAY, OWNER, units


def post(client, path, body):
    return client.post(f"/api/{path}", json.dumps(body), content_type="application/json")


@pytest.mark.django_db
class TestDemo:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"ok": True}

    def test_seed(self, client):
        resp = client.post("/api/demo/seed")
        assert resp.status_code == 201
        data = resp.json()
        assert data["deployer"] == OWNER
        info = client.get(f"/api/token/{data['token']}").json()
        assert info["symbol"] == "DDT"
        assert info["total_supply"] == str(units(1_000_000))
        assert client.get(f"/api/counter/{data['counter']}").json()["x"] == "0"

    def test_deploy_token_in_whole_tokens(self, client, accounts):
        resp = post(client, "demo/deploy/token", {"from": ALICE, "initial_supply": "500"})
        assert resp.status_code == 201
        info = client.get(f"/api/token/{resp.json()['address']}").json()
        assert info["owner"] == ALICE
        assert info["total_supply"] == str(units(500))

    def test_deploy_requires_sender(self, client):
        assert post(client, "demo/deploy/counter", {}).status_code == 400

    def test_writes_are_post_only(self, client, token):
        assert client.get(f"/api/token/{token.address}/transfer").status_code == 400


class TestTokenEndpoints:

    def test_transfer_returns_receipt(self, client, token):
        resp = post(client, f"token/{token.address}/transfer", {"from": OWNER, "to": ALICE, "amount": str(units(5))})
        assert resp.status_code == 201
        assert resp.json()["method"] == "transfer"
        balance = client.get(f"/api/token/{token.address}/balance/{ALICE}").json()
        assert balance == {"balance": str(units(5)), "staked": "0"}

    def test_revert_shape(self, client, token):
        resp = post(client, f"token/{token.address}/transfer", {"from": ALICE, "to": BOB, "amount": "1"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "DAppToken: insufficient balance", "code": "InsufficientBalance"}

    def test_missing_field(self, client, token):
        resp = post(client, f"token/{token.address}/transfer", {"from": OWNER})
        assert resp.status_code == 400

    def test_unknown_token(self, client, accounts):
        resp = client.get(f"/api/token/{BOB}")
        assert resp.status_code == 400
        assert resp.json()["code"] == "UnknownContract"

    def test_approve_and_allowance(self, client, token):
        post(client, f"token/{token.address}/approve", {"from": OWNER, "spender": ALICE, "amount": "9"})
        data = client.get(f"/api/token/{token.address}/allowance/{OWNER}/{ALICE}").json()
        assert data == {"allowance": "9"}

    def test_transfer_from(self, client, token):
        post(client, f"token/{token.address}/approve", {"from": OWNER, "spender": ALICE, "amount": "9"})
        resp = post(client, f"token/{token.address}/transfer-from", {"from": ALICE, "owner": OWNER, "to": BOB, "amount": "4"})
        assert resp.status_code == 201
        assert client.get(f"/api/token/{token.address}/allowance/{OWNER}/{ALICE}").json() == {"allowance": "5"}

    def test_mint_by_non_owner(self, client, token):
        resp = post(client, f"token/{token.address}/mint", {"from": ALICE, "to": ALICE, "amount": "1"})
        assert resp.json()["code"] == "NotOwner"

    def test_mint_past_uint256_max(self, client, token):
        resp = post(client, f"token/{token.address}/mint", {"from": OWNER, "to": ALICE, "amount": str(2 ** 256 - 1)})
        assert resp.status_code == 400
        assert resp.json() == {"error": "DAppToken: supply overflow", "code": "InvalidAmount"}
        info = client.get(f"/api/token/{token.address}").json()
        assert info["total_supply"] == str(units(1_000_000))

    def test_fractional_amount_is_rejected(self, client, token):
        resp = post(client, f"token/{token.address}/transfer", {"from": OWNER, "to": ALICE, "amount": 1.5})
        assert resp.status_code == 400
        assert resp.json()["code"] == "InvalidAmount"
        assert client.get(f"/api/token/{token.address}/balance/{ALICE}").json()["balance"] == "0"

    def test_stake_and_list(self, client, funded_alice):
        address = funded_alice.address
        resp = post(client, f"token/{address}/stake", {"from": ALICE, "amount": str(units(10)), "duration": 30 * DAY})
        assert resp.status_code == 201
        data = client.get(f"/api/token/{address}/stakes/{ALICE}").json()
        assert data["count"] == 1
        assert data["total_staked"] == str(units(10))
        assert data["stakes"][0]["claimed"] is False
        detail = client.get(f"/api/token/{address}/stakes/{ALICE}/0").json()
        assert detail["duration"] == 30 * DAY

    def test_unstake_locked(self, client, funded_alice):
        address = funded_alice.address
        post(client, f"token/{address}/stake", {"from": ALICE, "amount": "1", "duration": 30 * DAY})
        resp = post(client, f"token/{address}/unstake", {"from": ALICE, "index": 0})
        assert resp.json()["code"] == "StillLocked"

    def test_eth_deposit_and_withdraw(self, client, token):
        resp = post(client, "eth/send", {"from": ALICE, "to": token.address, "value": str(parse_ether("1"))})
        assert resp.json()["method"] == "receive"
        assert client.get(f"/api/token/{token.address}/eth/{ALICE}").json() == {"eth_balance": str(parse_ether("1"))}

        resp = post(client, f"token/{token.address}/withdraw-my-eth", {"from": ALICE, "amount": str(parse_ether("1.5"))})
        assert resp.json()["code"] == "InsufficientBalance"
        resp = post(client, f"token/{token.address}/withdraw-all-my-eth", {"from": ALICE})
        assert resp.status_code == 201
        assert client.get(f"/api/token/{token.address}/eth").json() == {"eth_balance": "0"}

    def test_events(self, client, token):
        post(client, f"token/{token.address}/burn", {"from": OWNER, "amount": "3"})
        events = client.get(f"/api/token/{token.address}/events?name=Burn").json()
        assert [e["args"]["amount"] for e in events] == ["3"]


class TestCounterEndpoints:

    def test_inc_and_inc_by(self, client, counter):
        post(client, f"counter/{counter.address}/inc-by", {"from": ALICE, "by": 5})
        post(client, f"counter/{counter.address}/inc", {"from": ALICE})
        assert client.get(f"/api/counter/{counter.address}").json()["x"] == "6"

    def test_inc_by_zero(self, client, counter):
        resp = post(client, f"counter/{counter.address}/inc-by", {"from": ALICE, "by": 0})
        assert resp.status_code == 400
        assert resp.json()["error"] == "incBy: increment should be positive"
