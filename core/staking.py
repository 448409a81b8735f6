"""Time-locked staking on top of the token ledger.

Each stake entry is Active until claimed, then Claimed forever:

    stakeTokens   -> Active   (principal moves from balance to the staked sub-total)
    unstakeTokens -> Claimed  (principal + reward back to balance, reward minted)

The reward is fixed when the stake is created, from the APY table snapshot:
amount * apy * duration // (100 * 365 days). Waiting past the unlock time
earns nothing extra. Rewards are newly minted, so total supply grows on claim.
"""

import logging

from django.db import transaction

from .adapters.chain_adapter import ChainAdapter
from .adapters.wallet_adapter import checksum
from .constants import ZERO_ADDRESS, apy_for_duration, staking_reward
from .errors import AlreadyClaimed, InsufficientBalance, InvalidAmount, InvalidDuration, InvalidIndex, StillLocked
from .ledger import TokenLedger, as_uint
from .models import StakeEntry

logger = logging.getLogger(__name__)


class StakingService:

	def __init__(self, ledger: TokenLedger):
		self.ledger = ledger

	# --- Reads -------------------------------------------------------------------

	def _entries(self, user: str):
		return StakeEntry.objects.filter(contract=self.ledger.contract, holder=checksum(user))

	def get_user_stakes(self, user: str) -> int:
		"""
		Number of stake entries ever created by `user` (claimed ones included)
		"""
		return self._entries(user).count()

	def get_stake(self, user: str, index: int) -> StakeEntry:
		entry = self._entries(user).filter(index=as_uint(index)).first()
		if entry is None:
			raise InvalidIndex()
		return entry

	def get_stake_details(self, user: str, index: int) -> tuple:
		return self.get_stake(user, index).as_tuple()

	def calculate_reward(self, user: str, index: int) -> int:
		return self.get_stake(user, index).reward

	def total_staked(self, user: str) -> int:
		return self.ledger.staked_of(user)

	def stakes(self, user: str) -> list[StakeEntry]:
		return list(self._entries(user))

	# --- Mutations ---------------------------------------------------------------

	@transaction.atomic
	def stake_tokens(self, sender: str, amount: int, duration: int):
		"""
		Lock `amount` for `duration` seconds; the duration must be one of the reward tiers
		"""
		sender, amount, duration = checksum(sender), as_uint(amount), as_uint(duration)
		if amount == 0:
			raise InvalidAmount("DAppToken: stake amount must be positive")
		apy = apy_for_duration(duration)
		if apy is None:
			raise InvalidDuration()
		row = self.ledger.balance_row(sender)
		if row.balance < amount:
			raise InsufficientBalance("DAppToken: insufficient balance to stake")
		row.balance -= amount
		row.staked += amount
		row.save(update_fields=["balance", "staked"])

		receipt = self.ledger.begin(sender, "stakeTokens")
		start = receipt.timestamp
		entry = StakeEntry.objects.create(
			contract=self.ledger.contract,
			holder=sender,
			index=self._entries(sender).count(),
			amount=amount,
			start_time=start,
			duration=duration,
			unlock_time=start + duration,
			apy=apy,
			reward=staking_reward(amount, apy, duration),
		)
		ChainAdapter.emit(
			receipt, self.ledger.address, "TokensStaked",
			user=sender, amount=amount, duration=duration, unlockTime=entry.unlock_time,
		)
		logger.info("%s staked %s for %ss (index %s, reward %s)", sender, amount, duration, entry.index, entry.reward)
		return receipt

	@transaction.atomic
	def unstake_tokens(self, sender: str, index: int):
		"""
		Claim an unlocked entry: principal + reward back to the free balance, once
		"""
		sender = checksum(sender)
		entry = StakeEntry.objects.select_for_update().filter(
			contract=self.ledger.contract, holder=sender, index=as_uint(index)
		).first()
		if entry is None:
			raise InvalidIndex()
		if entry.claimed:
			raise AlreadyClaimed()
		now = ChainAdapter.now()
		if now < entry.unlock_time:
			raise StillLocked(f"DAppToken: stake is still locked ({entry.unlock_time - now}s left)")

		row = self.ledger.balance_row(sender)
		row.staked -= entry.amount
		row.balance += entry.amount
		row.save(update_fields=["balance", "staked"])

		receipt = self.ledger.begin(sender, "unstakeTokens")
		if entry.reward:
			self.ledger.grow_supply(entry.reward)
			self.ledger.credit(sender, entry.reward)
			ChainAdapter.emit(receipt, self.ledger.address, "Transfer", **{"from": ZERO_ADDRESS, "to": sender, "value": entry.reward})

		entry.claimed = True
		entry.claimed_at = receipt.timestamp
		entry.save(update_fields=["claimed", "claimed_at"])
		ChainAdapter.emit(receipt, self.ledger.address, "TokensUnstaked", user=sender, amount=entry.amount, reward=entry.reward)
		logger.info("%s unstaked index %s: %s + reward %s", sender, entry.index, entry.amount, entry.reward)
		return receipt
