"""
Tests for the Counter contract.
"""

import pytest

from core.adapters.chain_adapter import ChainAdapter
from core.errors import InvalidAmount, UnknownContract
from core.services import CounterService

from .conftest import ALICE, OWNER


class TestCounter:

    def test_starts_at_zero(self, counter):
        assert counter.x() == 0

    def test_inc_by_then_inc(self, counter):
        counter.inc_by(ALICE, 5)
        counter.inc(ALICE)
        assert counter.x() == 6

    def test_inc_by_zero_reverts(self, counter):
        with pytest.raises(InvalidAmount) as exc:
            counter.inc_by(ALICE, 0)
        assert exc.value.message == "incBy: increment should be positive"
        assert counter.x() == 0
        assert ChainAdapter.events(counter.address) == []

    def test_increment_events_sum_to_x(self, counter):
        for by in (3, 1, 10):
            counter.inc_by(OWNER, by)
        counter.inc(OWNER)
        events = ChainAdapter.events(counter.address, "Increment")
        assert [e.args["by"] for e in events] == ["3", "1", "10", "1"]
        assert sum(int(e.args["by"]) for e in events) == counter.x() == 15

    def test_shared_state_across_handles(self, counter):
        other = CounterService.at(counter.address.lower())
        other.inc(ALICE)
        assert counter.x() == 1

    def test_unknown_counter(self, accounts):
        with pytest.raises(UnknownContract):
            CounterService.at(ALICE)
