"""In-process dev chain: block clock, transaction receipts and event logs"""

from django.db import models

from core.fields import AddressField, Uint256Field


class BlockClock(models.Model):
	"""
	Single row. Block timestamp = wall clock + time_offset (moved by evm_increaseTime)
	"""
	id = models.PositiveSmallIntegerField(primary_key=True, default=1)
	block_number = models.BigIntegerField(default=0)
	time_offset = models.BigIntegerField(default=0)
	last_timestamp = models.BigIntegerField(default=0)


class TransactionReceipt(models.Model):
	"""
	Receipt of a confirmed state-changing call; one per mined block
	"""
	tx_hash = models.CharField(max_length=66, unique=True)
	block_number = models.BigIntegerField()
	timestamp = models.BigIntegerField()
	sender = AddressField()
	to = AddressField(blank=True, default="")
	method = models.CharField(max_length=64)
	value = Uint256Field()
	nonce = models.BigIntegerField()
	status = models.CharField(max_length=16, default="confirmed")
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		indexes = [
			models.Index(fields=["sender", "nonce"]),
		]

	def as_dict(self):
		return {
			"tx_hash": self.tx_hash,
			"block_number": self.block_number,
			"timestamp": self.timestamp,
			"from": self.sender,
			"to": self.to,
			"method": self.method,
			"value": str(self.value),
			"status": self.status,
		}


class EventLog(models.Model):
	"""
	Append-only contract event. Uniqueness: (receipt, log_index)
	"""
	receipt = models.ForeignKey(TransactionReceipt, on_delete=models.CASCADE, related_name="logs")
	log_index = models.IntegerField()
	address = AddressField()
	name = models.CharField(max_length=64)
	args = models.JSONField(default=dict)

	class Meta:
		unique_together = (("receipt", "log_index"),)
		ordering = ["receipt__block_number", "log_index"]

	def as_dict(self):
		return {
			"tx_hash": self.receipt.tx_hash,
			"block_number": self.receipt.block_number,
			"log_index": self.log_index,
			"address": self.address,
			"event": self.name,
			"args": self.args,
		}
