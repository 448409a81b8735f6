"""Model fields shared by the contract apps.

Token amounts use 18 decimals, so a 1,000,000 token supply is 10**24 base units
and does not fit a BigIntegerField. Uint256Field keeps the value as decimal text
in the database and as a plain int in Python.
"""

from django.core import exceptions
from django.db import models
from eth_utils import is_address, to_checksum_address

UINT256_MAX = 2 ** 256 - 1


class Uint256Field(models.CharField):
	"""
	Unsigned 256-bit integer stored as decimal text (no DB-side arithmetic)
	"""
	description = "Unsigned 256-bit integer"

	def __init__(self, *args, **kwargs):
		kwargs["max_length"] = 78
		kwargs.setdefault("default", 0)
		super().__init__(*args, **kwargs)

	def deconstruct(self):
		name, path, args, kwargs = super().deconstruct()
		del kwargs["max_length"]
		return name, path, args, kwargs

	def from_db_value(self, value, expression, connection):
		if value is None:
			return value
		return int(value)

	def to_python(self, value):
		if value is None or isinstance(value, int):
			return value
		try:
			return int(str(value))
		except ValueError:
			raise exceptions.ValidationError(f"'{value}' is not an unsigned integer", code="invalid")

	def get_prep_value(self, value):
		value = self.to_python(value)
		if value is None:
			return None
		if value < 0 or value > UINT256_MAX:
			raise ValueError(f"uint256 out of range: {value}")
		return str(value)


class AddressField(models.CharField):
	"""
	20-byte account address, always stored EIP-55 checksummed
	"""
	description = "Ethereum-style address"

	def __init__(self, *args, **kwargs):
		kwargs["max_length"] = 42
		super().__init__(*args, **kwargs)

	def deconstruct(self):
		name, path, args, kwargs = super().deconstruct()
		del kwargs["max_length"]
		return name, path, args, kwargs

	def get_prep_value(self, value):
		value = super().get_prep_value(value)
		if value and is_address(value):
			return to_checksum_address(value)
		return value
