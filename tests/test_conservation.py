"""
Conservation Law Property Tests

INVARIANT: for every DAppToken, after any sequence of calls:
    Σ_{holders} (balance + staked) = totalSupply

Transfers, approvals and stakes redistribute; only mint, burn and staking
rewards change the supply, and they change it by exactly the amount moved.
Reverted calls change nothing.
"""

from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.extra.django import TestCase

from core.constants import SECONDS_PER_DAY, STAKING_APY
from core.errors import ContractRevert
from core.services import DemoServices, deploy_token

from .conftest import ALICE, BOB, CAROL, OWNER

HOLDERS = [OWNER, ALICE, BOB, CAROL]
SUPPLY = 10 ** 24

amounts = st.integers(min_value=0, max_value=SUPPLY + 10 ** 22)
holders = st.sampled_from(HOLDERS)

operations = st.one_of(
    st.tuples(st.just("transfer"), holders, holders, amounts),
    st.tuples(st.just("approve"), holders, holders, amounts),
    st.tuples(st.just("transfer_from"), holders, holders, amounts),
    st.tuples(st.just("mint"), holders, holders, amounts),
    st.tuples(st.just("burn"), holders, holders, amounts),
    st.tuples(st.just("stake"), holders, st.sampled_from(sorted(STAKING_APY)), amounts),
)


def apply(token, op):
    kind, a, b, amount = op
    if kind == "transfer":
        token.ledger.transfer(a, b, amount)
    elif kind == "approve":
        token.ledger.approve(a, b, amount)
    elif kind == "transfer_from":
        # `b` spends on behalf of `a`, paying OWNER
        token.ledger.transfer_from(b, a, OWNER, amount)
    elif kind == "mint":
        token.ownership.mint(a, b, amount)
    elif kind == "burn":
        token.ledger.burn(a, amount)
    elif kind == "stake":
        token.staking.stake_tokens(a, amount, b * SECONDS_PER_DAY)


def state(token):
    rows = token.ledger.contract.balances.all()
    return {r.holder: (r.balance, r.staked) for r in rows if r.balance or r.staked}, token.ledger.total_supply()


class TestConservation(TestCase):

    @settings(max_examples=30, deadline=None)
    @given(st.lists(operations, max_size=12))
    def test_supply_is_conserved(self, ops):
        DemoServices.fund_demo_accounts()
        token = deploy_token(OWNER, SUPPLY)
        expected_supply = SUPPLY

        for op in ops:
            before = state(token)
            try:
                apply(token, op)
            except ContractRevert:
                assert state(token) == before
                continue
            kind, _, _, amount = op
            if kind == "mint":
                expected_supply += amount
            elif kind == "burn":
                expected_supply -= amount

            holdings, supply = state(token)
            assert supply == expected_supply
            assert sum(balance + staked for balance, staked in holdings.values()) == supply

    @settings(max_examples=20, deadline=None)
    @given(st.lists(st.tuples(holders, holders, amounts), max_size=10))
    def test_plain_transfers_keep_balances_summing_to_supply(self, transfers):
        DemoServices.fund_demo_accounts()
        token = deploy_token(OWNER, SUPPLY)
        for sender, to, amount in transfers:
            try:
                token.ledger.transfer(sender, to, amount)
            except ContractRevert:
                pass
        assert sum(token.ledger.holders().values()) == token.ledger.total_supply() == SUPPLY
