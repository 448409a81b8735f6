"""Deterministic in-process wallet provider.

Holds native (ETH) balances for every address, an append-only native transfer
log, and the provider session (connected flag, active chain, known chains).
Used to simulate an injected browser wallet without network calls.
"""

from django.db import models

from core.fields import AddressField, Uint256Field


class WalletStubAccount(models.Model):
	"""
	Native balance of an address. `managed` accounts are the ones the wallet can sign for.
	"""
	address = AddressField(unique=True)
	balance_wei = Uint256Field()
	managed = models.BooleanField(default=False)


class WalletStubTx(models.Model):
	"""
	Append-only native value movement
	"""
	tx_hash = models.CharField(max_length=66, blank=True, default="")
	sender = AddressField()
	to = AddressField()
	value_wei = Uint256Field()
	memo = models.CharField(max_length=64, blank=True, default="")
	created_at = models.DateTimeField(auto_now_add=True)


class WalletStubChain(models.Model):
	"""
	Chains the wallet knows about (wallet_addEthereumChain registers more)
	"""
	chain_id = models.BigIntegerField(unique=True)
	chain_name = models.CharField(max_length=100)
	rpc_url = models.CharField(max_length=200, blank=True, default="")
	native_symbol = models.CharField(max_length=16, default="ETH")
	native_decimals = models.PositiveSmallIntegerField(default=18)


class WalletStubState(models.Model):
	"""
	Single row: whether the dapp is connected and which chain is active
	"""
	id = models.PositiveSmallIntegerField(primary_key=True, default=1)
	connected = models.BooleanField(default=False)
	active_chain_id = models.BigIntegerField(default=1)
