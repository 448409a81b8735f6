"""Adapter over the local dev chain stub

In production, contract calls would be signed and broadcast to a node and the
client would poll for inclusion. Here every confirmed call mines one block in
the chain_stub tables, gets a receipt and appends its event logs.
"""

import logging
import time

from django.db import transaction
from eth_utils import keccak, to_bytes, to_checksum_address

from chain_stub.models import BlockClock, EventLog, TransactionReceipt

logger = logging.getLogger(__name__)


class ChainAdapter:
	"""
	Block clock, receipts, events and confirmation waits for the dev chain.
	Callers run inside transaction.atomic so a revert discards the receipt too.
	"""

	@staticmethod
	def _clock(for_update: bool = False) -> BlockClock:
		qs = BlockClock.objects.select_for_update() if for_update else BlockClock.objects
		clock, _ = qs.get_or_create(pk=1)
		return clock

	@staticmethod
	def now() -> int:
		"""
		Current block timestamp in unix seconds (never goes backwards)
		"""
		clock = ChainAdapter._clock()
		return max(int(time.time()) + clock.time_offset, clock.last_timestamp)

	@staticmethod
	def block_number() -> int:
		return ChainAdapter._clock().block_number

	@staticmethod
	@transaction.atomic
	def increase_time(seconds: int) -> int:
		"""
		Dev-chain time travel (evm_increaseTime); returns the total offset
		"""
		if seconds < 0:
			raise ValueError("Cannot move time backwards")
		clock = ChainAdapter._clock(for_update=True)
		clock.time_offset += int(seconds)
		clock.save(update_fields=["time_offset"])
		return clock.time_offset

	@staticmethod
	@transaction.atomic
	def mine() -> int:
		"""
		Mine an empty block (evm_mine); returns the new block number
		"""
		clock = ChainAdapter._clock(for_update=True)
		clock.block_number += 1
		clock.last_timestamp = max(int(time.time()) + clock.time_offset, clock.last_timestamp)
		clock.save(update_fields=["block_number", "last_timestamp"])
		return clock.block_number

	@staticmethod
	def next_nonce(sender: str) -> int:
		return TransactionReceipt.objects.filter(sender=to_checksum_address(sender)).count()

	@staticmethod
	@transaction.atomic
	def record_tx(sender: str, to: str, method: str, value: int = 0) -> TransactionReceipt:
		"""
		Mine the block that includes this call and store its receipt.
		tx hash = keccak(sender || nonce || to || method)
		"""
		sender = to_checksum_address(sender)
		nonce = ChainAdapter.next_nonce(sender)
		block_number = ChainAdapter.mine()
		tx_hash = "0x" + keccak(
			to_bytes(hexstr=sender) + nonce.to_bytes(32, "big") + (to_bytes(hexstr=to) if to else b"") + method.encode()
		).hex()
		receipt = TransactionReceipt.objects.create(
			tx_hash=tx_hash,
			block_number=block_number,
			timestamp=ChainAdapter.now(),
			sender=sender,
			to=to or "",
			method=method,
			value=int(value),
			nonce=nonce,
		)
		logger.info("tx %s %s from=%s block=%s", tx_hash, method, sender, block_number)
		return receipt

	@staticmethod
	def emit(receipt: TransactionReceipt, address: str, name: str, **args) -> EventLog:
		"""
		Append an event log to the receipt; ints are stored as decimal strings
		"""
		log_index = receipt.logs.count()
		return EventLog.objects.create(
			receipt=receipt,
			log_index=log_index,
			address=address,
			name=name,
			args={k: (str(v) if isinstance(v, int) and not isinstance(v, bool) else v) for k, v in args.items()},
		)

	@staticmethod
	def contract_address(deployer: str, nonce: int) -> str:
		"""
		Deterministic address for a contract created by `deployer` at `nonce`
		"""
		digest = keccak(to_bytes(hexstr=to_checksum_address(deployer)) + nonce.to_bytes(32, "big"))
		return to_checksum_address(digest[-20:])

	@staticmethod
	def get_receipt(tx_hash: str) -> TransactionReceipt | None:
		return TransactionReceipt.objects.filter(tx_hash=tx_hash).first()

	@staticmethod
	def wait_for_receipt(tx_hash: str, confirmations: int = 1) -> TransactionReceipt:
		"""
		Return the receipt once it has `confirmations` blocks on top (its own block counts).
		The dev chain mines empty blocks instead of sleeping.
		"""
		receipt = ChainAdapter.get_receipt(tx_hash)
		if receipt is None:
			raise LookupError(f"unknown transaction {tx_hash}")
		while ChainAdapter.block_number() - receipt.block_number + 1 < confirmations:
			ChainAdapter.mine()
		return receipt

	@staticmethod
	def events(address: str, name: str | None = None, from_block: int = 0):
		"""
		Logs emitted by a contract, oldest first (queryFilter)
		"""
		qs = EventLog.objects.select_related("receipt").filter(
			address=to_checksum_address(address), receipt__block_number__gte=from_block
		)
		if name:
			qs = qs.filter(name=name)
		return list(qs)
