"""
Tests for the dev chain: block clock, receipts, confirmations, events and the JSON-RPC endpoint.
"""

import json

import pytest

from core.adapters.chain_adapter import ChainAdapter

from .conftest import ALICE, BOB, DAY, OWNER


@pytest.mark.django_db
class TestBlockClock:

    def test_mine_increments_block(self):
        start = ChainAdapter.block_number()
        assert ChainAdapter.mine() == start + 1
        assert ChainAdapter.block_number() == start + 1

    def test_increase_time_moves_now(self):
        before = ChainAdapter.now()
        ChainAdapter.increase_time(DAY)
        assert ChainAdapter.now() >= before + DAY

    def test_time_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            ChainAdapter.increase_time(-1)

    def test_each_call_mines_one_block(self):
        first = ChainAdapter.record_tx(ALICE, BOB, "transfer")
        second = ChainAdapter.record_tx(ALICE, BOB, "transfer")
        assert second.block_number == first.block_number + 1
        assert second.nonce == first.nonce + 1
        assert first.tx_hash != second.tx_hash
        assert second.timestamp >= first.timestamp


@pytest.mark.django_db
class TestReceipts:

    def test_wait_for_receipt_mines_confirmations(self):
        receipt = ChainAdapter.record_tx(ALICE, BOB, "transfer")
        got = ChainAdapter.wait_for_receipt(receipt.tx_hash, confirmations=3)
        assert got.tx_hash == receipt.tx_hash
        assert ChainAdapter.block_number() == receipt.block_number + 2

    def test_single_confirmation_does_not_mine(self):
        receipt = ChainAdapter.record_tx(ALICE, BOB, "transfer")
        ChainAdapter.wait_for_receipt(receipt.tx_hash)
        assert ChainAdapter.block_number() == receipt.block_number

    def test_unknown_hash(self):
        with pytest.raises(LookupError):
            ChainAdapter.wait_for_receipt("0x" + "00" * 32)

    def test_contract_address_is_deterministic(self):
        assert ChainAdapter.contract_address(OWNER, 0) == ChainAdapter.contract_address(OWNER.lower(), 0)
        assert ChainAdapter.contract_address(OWNER, 0) != ChainAdapter.contract_address(OWNER, 1)

    def test_events_filter_by_name(self, token):
        token.ledger.approve(OWNER, ALICE, 1)
        assert [log.name for log in ChainAdapter.events(token.address, "Approval")] == ["Approval"]


@pytest.mark.django_db
class TestRpcEndpoint:

    def rpc(self, client, method, params=None):
        body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params or []}
        return client.post("/stub/chain/rpc", json.dumps(body), content_type="application/json").json()

    def test_block_number(self, client):
        ChainAdapter.mine()
        assert self.rpc(client, "eth_blockNumber")["result"] == hex(ChainAdapter.block_number())

    def test_increase_time_and_mine(self, client):
        assert self.rpc(client, "evm_increaseTime", [3600])["result"] == 3600
        assert self.rpc(client, "evm_mine")["result"] == "0x1"

    def test_receipt(self, client):
        receipt = ChainAdapter.record_tx(ALICE, BOB, "transfer")
        result = self.rpc(client, "eth_getTransactionReceipt", [receipt.tx_hash])["result"]
        assert result["status"] == "confirmed"
        assert result["from"] == ALICE

    def test_unknown_method(self, client):
        assert self.rpc(client, "eth_call")["error"]["code"] == -32601

    def test_events_endpoint(self, client, token):
        data = client.get(f"/stub/chain/events/{token.address}?name=OwnershipTransferred").json()
        assert len(data) == 1
        assert data[0]["args"]["newOwner"] == OWNER

    def test_events_from_block_must_be_numeric(self, client, token):
        resp = client.get(f"/stub/chain/events/{token.address}?from_block=latest")
        assert resp.status_code == 400
        assert resp.json() == {"error": "from_block must be an integer"}

    def test_events_from_block(self, client, token):
        later = ChainAdapter.block_number() + 1
        token.ledger.transfer(OWNER, ALICE, 1)
        data = client.get(f"/stub/chain/events/{token.address}?from_block={later}").json()
        assert [log["name"] for log in data] == ["Transfer"]
