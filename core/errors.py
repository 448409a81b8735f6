"""Contract revert taxonomy.

Every failure a contract call can produce is a ContractRevert. It subclasses
Django's ValidationError so views keep the `except ValidationError` shape and
answer `{"error": e.message}` with a 400.

Hierarchy
---------
ContractRevert
 ├─ InvalidAddress        : zero/malformed address where a real one is required
 ├─ InsufficientBalance   : token, custody or native balance too small
 ├─ InsufficientAllowance : transferFrom beyond the approved amount
 ├─ NotOwner              : privileged call from a non-owner
 ├─ InvalidAmount         : zero amount where a positive one is required
 ├─ InvalidDuration       : stake duration outside the reward table
 ├─ StillLocked           : unstake before the unlock time
 ├─ AlreadyClaimed        : unstake of a claimed entry
 ├─ InvalidIndex          : stake index out of range
 └─ UnknownContract       : no contract deployed at the address
"""

from django.core.exceptions import ValidationError


class ContractRevert(ValidationError):
	"""Base class for contract-call reverts."""

	code = "Revert"
	default_message = "execution reverted"

	def __init__(self, message: str | None = None):
		super().__init__(message or self.default_message, code=self.code)

	def __str__(self) -> str:
		return self.message


class InvalidAddress(ContractRevert):
	code = "InvalidAddress"
	default_message = "DAppToken: invalid address"


class InsufficientBalance(ContractRevert):
	code = "InsufficientBalance"
	default_message = "DAppToken: insufficient balance"


class InsufficientAllowance(ContractRevert):
	code = "InsufficientAllowance"
	default_message = "DAppToken: insufficient allowance"


class NotOwner(ContractRevert):
	code = "NotOwner"
	default_message = "DAppToken: caller is not the owner"


class InvalidAmount(ContractRevert):
	code = "InvalidAmount"
	default_message = "DAppToken: amount must be positive"


class InvalidDuration(ContractRevert):
	code = "InvalidDuration"
	default_message = "DAppToken: unsupported staking duration"


class StillLocked(ContractRevert):
	code = "StillLocked"
	default_message = "DAppToken: stake is still locked"


class AlreadyClaimed(ContractRevert):
	code = "AlreadyClaimed"
	default_message = "DAppToken: stake already claimed"


class InvalidIndex(ContractRevert):
	code = "InvalidIndex"
	default_message = "DAppToken: invalid stake index"


class UnknownContract(ContractRevert):
	code = "UnknownContract"
	default_message = "no contract deployed at address"
