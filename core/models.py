"""Database models for the contract state.


Tables:
- TokenContract: one deployed DAppToken (metadata, total supply, owner)
- TokenBalance: free token balance + staked sub-total per holder
- Allowance: (owner, spender) -> approved amount
- StakeEntry: append-only, per-holder ordered list of time-locked stakes
- EthCustodyBalance: per-depositor native balance held in trust by a token contract
- CounterContract: one deployed Counter

The contract's pooled native balance is not stored here: it is the wallet_stub
account at the contract address (authoritative source for getEthBalance).
"""

from django.db import models

from .fields import AddressField, Uint256Field


class TokenContract(models.Model):
	"""
	A deployed DAppToken instance; `address` is its on-chain identity
	"""
	address = AddressField(unique=True)
	name = models.CharField(max_length=100)
	symbol = models.CharField(max_length=20)
	decimals = models.PositiveSmallIntegerField(default=18)
	total_supply = Uint256Field()
	owner = AddressField()
	deployer = AddressField()
	deployed_at = models.DateTimeField(auto_now_add=True)

	def __str__(self):
		return f"{self.symbol}@{self.address}"


class TokenBalance(models.Model):
	"""
	Holder balance. `staked` is the locked sub-total, still part of total supply.
	"""
	contract = models.ForeignKey(TokenContract, on_delete=models.CASCADE, related_name="balances")
	holder = AddressField()
	balance = Uint256Field()
	staked = Uint256Field()

	class Meta:
		unique_together = (("contract", "holder"),)


class Allowance(models.Model):
	contract = models.ForeignKey(TokenContract, on_delete=models.CASCADE, related_name="allowances")
	owner = AddressField()
	spender = AddressField()
	amount = Uint256Field()

	class Meta:
		unique_together = (("contract", "owner", "spender"),)


class StakeEntry(models.Model):
	"""
	One locked position. Mutated exactly once (claimed -> True), immutable afterwards.
	Uniqueness: (contract, holder, index)
	"""
	contract = models.ForeignKey(TokenContract, on_delete=models.CASCADE, related_name="stakes")
	holder = AddressField()
	index = models.PositiveIntegerField()
	amount = Uint256Field()
	start_time = models.BigIntegerField()  # unix seconds, chain clock
	duration = models.BigIntegerField()  # seconds
	unlock_time = models.BigIntegerField()
	apy = models.PositiveSmallIntegerField()  # percent, snapshot of the reward table
	reward = Uint256Field()  # fixed at stake time
	claimed = models.BooleanField(default=False)
	claimed_at = models.BigIntegerField(null=True, blank=True)

	class Meta:
		unique_together = (("contract", "holder", "index"),)
		ordering = ["index"]

	def as_tuple(self):
		"""(amount, startTime, duration, unlockTime, claimed, reward) as getStakeDetails returns it"""
		return (self.amount, self.start_time, self.duration, self.unlock_time, self.claimed, self.reward)


class EthCustodyBalance(models.Model):
	contract = models.ForeignKey(TokenContract, on_delete=models.CASCADE, related_name="eth_balances")
	holder = AddressField()
	balance_wei = Uint256Field()

	class Meta:
		unique_together = (("contract", "holder"),)


class CounterContract(models.Model):
	"""
	A deployed Counter: x() view, inc(), incBy(by)
	"""
	address = AddressField(unique=True)
	deployer = AddressField()
	x = Uint256Field()
	deployed_at = models.DateTimeField(auto_now_add=True)
