"""Ownership guard: owner-only mint, ownership transfer and the pooled-ETH drain.

withdrawEth / withdrawAllEth / emergencyWithdraw move the contract's whole
native balance to the owner without touching per-user custody balances, so
after a drain sum(custody) can exceed what the contract holds. That broad
privilege is part of the contract's behaviour and is kept as is.
"""

import logging

from django.db import transaction

from .adapters.chain_adapter import ChainAdapter
from .adapters.wallet_adapter import WalletAdapter, checksum
from .constants import ZERO_ADDRESS
from .errors import InsufficientBalance, InvalidAddress, InvalidAmount, NotOwner
from .ledger import TokenLedger, as_uint

logger = logging.getLogger(__name__)


class OwnershipGuard:

	def __init__(self, ledger: TokenLedger):
		self.ledger = ledger

	def require_owner(self, sender: str) -> str:
		"""
		Lock the contract row and check the caller; returns the checksummed owner
		"""
		contract = self.ledger.lock_contract()
		if checksum(sender) != contract.owner:
			raise NotOwner()
		return contract.owner

	def is_owner(self, account: str) -> bool:
		return checksum(account) == self.ledger.owner()

	@transaction.atomic
	def mint(self, sender: str, to: str, amount: int):
		self.require_owner(sender)
		to, amount = checksum(to), as_uint(amount)
		if to == ZERO_ADDRESS:
			raise InvalidAddress()
		if amount == 0:
			raise InvalidAmount("DAppToken: mint amount must be positive")
		receipt = self.ledger.begin(sender, "mint")
		self.ledger.mint_to(receipt, to, amount)
		logger.info("minted %s to %s on %s", amount, to, self.ledger.address)
		return receipt

	@transaction.atomic
	def transfer_ownership(self, sender: str, new_owner: str):
		previous = self.require_owner(sender)
		new_owner = checksum(new_owner)
		if new_owner == ZERO_ADDRESS:
			raise InvalidAddress()
		contract = self.ledger.contract
		contract.owner = new_owner
		contract.save(update_fields=["owner"])
		receipt = self.ledger.begin(sender, "transferOwnership")
		ChainAdapter.emit(receipt, self.ledger.address, "OwnershipTransferred", previousOwner=previous, newOwner=new_owner)
		logger.info("ownership of %s: %s -> %s", self.ledger.address, previous, new_owner)
		return receipt

	# --- Pooled ETH drain --------------------------------------------------------

	def _drain(self, owner: str, method: str, value: int):
		receipt = self.ledger.begin(owner, method)
		WalletAdapter.move(self.ledger.address, owner, value, tx_hash=receipt.tx_hash, memo=method)
		ChainAdapter.emit(receipt, self.ledger.address, "EthWithdrawn", to=owner, value=value)
		logger.info("%s drained %s wei from %s", owner, value, self.ledger.address)
		return receipt

	@transaction.atomic
	def withdraw_eth(self, sender: str, amount: int):
		owner = self.require_owner(sender)
		amount = as_uint(amount)
		if amount == 0:
			raise InvalidAmount()
		if amount > WalletAdapter.balance(self.ledger.address):
			raise InsufficientBalance("DAppToken: insufficient ETH balance")
		return self._drain(owner, "withdrawEth", amount)

	@transaction.atomic
	def withdraw_all_eth(self, sender: str):
		owner = self.require_owner(sender)
		held = WalletAdapter.balance(self.ledger.address)
		if held == 0:
			raise InsufficientBalance("DAppToken: no ETH to withdraw")
		return self._drain(owner, "withdrawAllEth", held)

	@transaction.atomic
	def emergency_withdraw(self, sender: str, amount: int):
		"""
		Like withdrawEth but capped at what the contract holds instead of reverting
		"""
		owner = self.require_owner(sender)
		amount = as_uint(amount)
		if amount == 0:
			raise InvalidAmount()
		value = min(amount, WalletAdapter.balance(self.ledger.address))
		if value == 0:
			raise InsufficientBalance("DAppToken: no ETH to withdraw")
		return self._drain(owner, "emergencyWithdraw", value)
