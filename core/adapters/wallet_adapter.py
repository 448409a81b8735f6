"""Adapter over the local wallet stub.

In production, native balances live on-chain and value moves through signed
transactions sent by a real wallet provider. Here we call the stub's ORM models
directly for repeatable, deterministic tests.
"""

import logging

from django.db import transaction
from eth_utils import is_address, to_checksum_address

from core.constants import ZERO_ADDRESS
from core.errors import InsufficientBalance, InvalidAddress, InvalidAmount
from wallet_stub.models import WalletStubAccount, WalletStubTx

logger = logging.getLogger(__name__)


def checksum(address: str) -> str:
	"""
	Normalize to EIP-55; malformed input is a revert, not a crash
	"""
	if not isinstance(address, str) or not is_address(address):
		raise InvalidAddress()
	return to_checksum_address(address)


class WalletAdapter:
	"""
	Pure functions that wrap native balance operations for credits/transfers/reads
	"""

	provider_name = "stub-wallet"


	@staticmethod
	def ensure_account(address: str, *, for_update: bool = False) -> WalletStubAccount:
		qs = WalletStubAccount.objects.select_for_update() if for_update else WalletStubAccount.objects
		acct, _ = qs.get_or_create(address=checksum(address), defaults={"balance_wei": 0})
		return acct


	@staticmethod
	def balance(address: str) -> int:
		return WalletAdapter.ensure_account(address).balance_wei


	@staticmethod
	@transaction.atomic
	def fund(address: str, value_wei: int, *, managed: bool = True) -> WalletStubAccount:
		"""
		Dev faucet: mint native currency to an account (genesis allocation)
		"""
		acct = WalletAdapter.ensure_account(address, for_update=True)
		acct.balance_wei += int(value_wei)
		acct.managed = acct.managed or managed
		acct.save(update_fields=["balance_wei", "managed"])
		WalletStubTx.objects.create(sender=ZERO_ADDRESS, to=acct.address, value_wei=int(value_wei), memo="faucet")
		return acct


	@staticmethod
	@transaction.atomic
	def move(sender: str, to: str, value_wei: int, *, tx_hash: str = "", memo: str = "") -> WalletStubTx:
		"""
		Move native value between two addresses; fails if the sender is short
		"""
		value_wei = int(value_wei)
		if value_wei <= 0:
			raise InvalidAmount("value must be positive")
		to = checksum(to)
		if to == ZERO_ADDRESS:
			raise InvalidAddress()
		src = WalletAdapter.ensure_account(sender, for_update=True)
		if src.balance_wei < value_wei:
			raise InsufficientBalance("insufficient funds for transfer")
		dst = WalletAdapter.ensure_account(to, for_update=True)
		src.balance_wei -= value_wei
		src.save(update_fields=["balance_wei"])
		# re-read in case sender == to
		dst.refresh_from_db()
		dst.balance_wei += value_wei
		dst.save(update_fields=["balance_wei"])
		logger.debug("native %s -> %s value=%s", src.address, dst.address, value_wei)
		return WalletStubTx.objects.create(tx_hash=tx_hash, sender=src.address, to=dst.address, value_wei=value_wei, memo=memo)


	@staticmethod
	def managed_accounts() -> list[str]:
		return list(WalletStubAccount.objects.filter(managed=True).order_by("id").values_list("address", flat=True))
