"""
Tests for the ETH custody ledger and the payable receive path.
"""

import pytest

from core.adapters.wallet_adapter import WalletAdapter
from core.constants import parse_ether
from core.errors import InsufficientBalance, InvalidAmount
from core.services import send_eth
from wallet_stub.models import WalletStubTx

from .conftest import ALICE, BOB, OWNER


class TestDeposit:

    def test_send_to_token_credits_custody(self, token):
        receipt = send_eth(ALICE, token.address, parse_ether("1.0"))
        assert receipt.method == "receive"
        assert token.custody.get_user_eth_balance(ALICE) == parse_ether("1.0")
        assert token.custody.get_eth_balance() == parse_ether("1.0")
        assert receipt.logs.get().args == {"from": ALICE, "value": str(parse_ether("1.0"))}

    def test_deposits_accumulate(self, token):
        send_eth(ALICE, token.address, parse_ether("1"))
        send_eth(ALICE, token.address, parse_ether("0.25"))
        send_eth(BOB, token.address, parse_ether("2"))
        assert token.custody.get_user_eth_balance(ALICE) == parse_ether("1.25")
        assert token.custody.total_custody() == parse_ether("3.25")

    def test_send_to_plain_account_is_not_custody(self, token):
        receipt = send_eth(ALICE, BOB, parse_ether("1"))
        assert receipt.method == "transfer"
        assert token.custody.get_user_eth_balance(ALICE) == 0

    def test_deposit_beyond_wallet_balance(self, token):
        with pytest.raises(InsufficientBalance):
            send_eth(ALICE, token.address, parse_ether("20000"))
        assert token.custody.get_user_eth_balance(ALICE) == 0


class TestWithdraw:

    def test_custody_scenario(self, token):
        """Deposit 1.0 -> withdraw 1.5 fails -> withdraw 1.0 zeroes the entry."""
        custody = token.custody
        send_eth(ALICE, token.address, parse_ether("1.0"))
        assert custody.get_user_eth_balance(ALICE) == parse_ether("1.0")

        with pytest.raises(InsufficientBalance):
            custody.withdraw_my_eth(ALICE, parse_ether("1.5"))
        assert custody.get_user_eth_balance(ALICE) == parse_ether("1.0")

        wallet_before = WalletAdapter.balance(ALICE)
        custody.withdraw_my_eth(ALICE, parse_ether("1.0"))
        assert custody.get_user_eth_balance(ALICE) == 0
        assert WalletAdapter.balance(ALICE) == wallet_before + parse_ether("1.0")
        assert custody.get_eth_balance() == 0

    def test_withdraw_only_own_deposit(self, token):
        send_eth(ALICE, token.address, parse_ether("1"))
        with pytest.raises(InsufficientBalance):
            token.custody.withdraw_my_eth(BOB, 1)

    def test_withdraw_zero(self, token):
        with pytest.raises(InvalidAmount):
            token.custody.withdraw_my_eth(ALICE, 0)

    def test_withdraw_all(self, token):
        send_eth(ALICE, token.address, parse_ether("0.75"))
        receipt = token.custody.withdraw_all_my_eth(ALICE)
        assert receipt.logs.get().name == "EthWithdrawn"
        assert token.custody.get_user_eth_balance(ALICE) == 0
        assert WalletStubTx.objects.filter(tx_hash=receipt.tx_hash).count() == 1

    def test_withdraw_all_with_nothing_deposited(self, token):
        with pytest.raises(InsufficientBalance) as exc:
            token.custody.withdraw_all_my_eth(ALICE)
        assert exc.value.message == "DAppToken: no ETH to withdraw"

    def test_withdraw_after_owner_drain_fails(self, token):
        send_eth(ALICE, token.address, parse_ether("1"))
        token.ownership.withdraw_all_eth(OWNER)
        with pytest.raises(InsufficientBalance):
            token.custody.withdraw_my_eth(ALICE, parse_ether("1"))
        assert token.custody.get_user_eth_balance(ALICE) == parse_ether("1")
