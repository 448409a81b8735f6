"""ETH custody ledger: native currency deposited into a token contract, tracked per depositor.

Withdrawals follow checks-effects-interactions: the custody balance is
decremented and saved before the native value leaves the contract.
"""

import logging

from django.db import transaction

from .adapters.chain_adapter import ChainAdapter
from .adapters.wallet_adapter import WalletAdapter, checksum
from .errors import InsufficientBalance, InvalidAmount
from .ledger import TokenLedger, as_uint
from .models import EthCustodyBalance

logger = logging.getLogger(__name__)


class EthCustody:

	def __init__(self, ledger: TokenLedger):
		self.ledger = ledger

	def _row(self, holder: str) -> EthCustodyBalance:
		row, _ = EthCustodyBalance.objects.select_for_update().get_or_create(
			contract=self.ledger.contract, holder=checksum(holder), defaults={"balance_wei": 0}
		)
		return row

	# --- Reads -------------------------------------------------------------------

	def get_eth_balance(self) -> int:
		"""
		Everything the contract holds: all deposits plus funds no depositor owns
		"""
		return WalletAdapter.balance(self.ledger.address)

	def get_user_eth_balance(self, user: str) -> int:
		row = EthCustodyBalance.objects.filter(contract=self.ledger.contract, holder=checksum(user)).first()
		return row.balance_wei if row else 0

	def total_custody(self) -> int:
		return sum(row.balance_wei for row in EthCustodyBalance.objects.filter(contract=self.ledger.contract))

	# --- Payable receive path ----------------------------------------------------

	def receive(self, receipt, sender: str, value: int) -> EthCustodyBalance:
		"""
		Credit a deposit whose native value already reached the contract account
		"""
		row = self._row(sender)
		row.balance_wei += value
		row.save(update_fields=["balance_wei"])
		ChainAdapter.emit(receipt, self.ledger.address, "EthDeposited", **{"from": checksum(sender), "value": value})
		logger.info("%s deposited %s wei into %s", sender, value, self.ledger.address)
		return row

	# --- Withdrawals -------------------------------------------------------------

	def _withdraw(self, row: EthCustodyBalance, method: str, value: int):
		# effects before the interaction
		row.balance_wei -= value
		row.save(update_fields=["balance_wei"])
		receipt = self.ledger.begin(row.holder, method)
		WalletAdapter.move(self.ledger.address, row.holder, value, tx_hash=receipt.tx_hash, memo=method)
		ChainAdapter.emit(receipt, self.ledger.address, "EthWithdrawn", to=row.holder, value=value)
		logger.info("%s withdrew %s wei from %s", row.holder, value, self.ledger.address)
		return receipt

	@transaction.atomic
	def withdraw_my_eth(self, sender: str, amount: int):
		amount = as_uint(amount)
		if amount == 0:
			raise InvalidAmount("DAppToken: withdraw amount must be positive")
		row = self._row(sender)
		if amount > row.balance_wei:
			raise InsufficientBalance("DAppToken: insufficient ETH balance")
		return self._withdraw(row, "withdrawMyEth", amount)

	@transaction.atomic
	def withdraw_all_my_eth(self, sender: str):
		row = self._row(sender)
		if row.balance_wei == 0:
			raise InsufficientBalance("DAppToken: no ETH to withdraw")
		return self._withdraw(row, "withdrawAllMyEth", row.balance_wei)
