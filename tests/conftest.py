"""
conftest.py - Shared pytest fixtures for the DApp ledger tests

Provides:
- funded dev accounts (owner + three users)
- a deployed DAppToken (1,000,000 DDT to the owner) and Counter
- helpers to read balances in whole tokens
"""

import pytest

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ALICE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BOB = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
CAROL = "0x90F79bf6EB2c4f870365E785982E1f101E93b906"

DAY = 24 * 60 * 60


def units(amount) -> int:
    """Whole tokens -> base units (18 decimals)."""
    from core.constants import parse_units
    return parse_units(str(amount), 18)


@pytest.fixture
def accounts(db):
    """Dev accounts funded with 10,000 ETH each and managed by the wallet stub."""
    from core.services import DemoServices
    return DemoServices.fund_demo_accounts()


@pytest.fixture
def token(accounts):
    """DAppToken deployed by OWNER with the whole 1,000,000 DDT supply."""
    from core.services import deploy_token
    return deploy_token(OWNER, units(1_000_000))


@pytest.fixture
def counter(accounts):
    from core.services import deploy_counter
    return deploy_counter(OWNER)


@pytest.fixture
def funded_alice(token):
    """ALICE holds 1,000 DDT transferred from the owner."""
    token.ledger.transfer(OWNER, ALICE, units(1_000))
    return token
