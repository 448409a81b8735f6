"""Token ledger core: balances, allowances and total supply of one DAppToken.

TokenLedger is the aggregate every other contract component is handed
explicitly (ownership guard, staking, ETH custody). Mutations run inside
@transaction.atomic with the touched rows locked, so a revert leaves balances,
allowances, receipts and events exactly as they were.

Conservation: sum(balance) + sum(staked) == total_supply.
"""

from django.db import transaction

from .adapters.chain_adapter import ChainAdapter
from .adapters.wallet_adapter import checksum
from .constants import ZERO_ADDRESS
from .errors import InsufficientAllowance, InsufficientBalance, InvalidAddress, InvalidAmount, UnknownContract
from .fields import UINT256_MAX
from .models import Allowance, TokenBalance, TokenContract


def as_uint(value) -> int:
	"""
	Coerce a call argument to uint256; negatives and junk revert like ABI decoding would
	"""
	if isinstance(value, float) and not value.is_integer():
		raise InvalidAmount(f"not an unsigned integer: {value!r}")
	try:
		value = int(value)
	except (TypeError, ValueError):
		raise InvalidAmount(f"not an unsigned integer: {value!r}")
	if value < 0 or value > UINT256_MAX:
		raise InvalidAmount(f"value out of uint256 range: {value}")
	return value


class TokenLedger:

	def __init__(self, contract: TokenContract):
		self.contract = contract

	@classmethod
	def at(cls, address: str) -> "TokenLedger":
		try:
			return cls(TokenContract.objects.get(address=checksum(address)))
		except TokenContract.DoesNotExist:
			raise UnknownContract(f"no DAppToken deployed at {address}")

	@property
	def address(self) -> str:
		return self.contract.address

	# --- Reads -------------------------------------------------------------------

	def refresh(self) -> TokenContract:
		self.contract.refresh_from_db()
		return self.contract

	def total_supply(self) -> int:
		return self.refresh().total_supply

	def owner(self) -> str:
		return self.refresh().owner

	def balance_of(self, holder: str) -> int:
		row = TokenBalance.objects.filter(contract=self.contract, holder=checksum(holder)).first()
		return row.balance if row else 0

	def staked_of(self, holder: str) -> int:
		row = TokenBalance.objects.filter(contract=self.contract, holder=checksum(holder)).first()
		return row.staked if row else 0

	def allowance(self, owner: str, spender: str) -> int:
		row = Allowance.objects.filter(contract=self.contract, owner=checksum(owner), spender=checksum(spender)).first()
		return row.amount if row else 0

	def get_balance(self, holder: str) -> int:
		return self.balance_of(holder)

	def get_allowance(self, owner: str, spender: str) -> int:
		return self.allowance(owner, spender)

	def holders(self) -> dict[str, int]:
		return {row.holder: row.balance for row in TokenBalance.objects.filter(contract=self.contract)}

	# --- Row helpers (callers hold a transaction) -------------------------------

	def lock_contract(self) -> TokenContract:
		self.contract = TokenContract.objects.select_for_update().get(pk=self.contract.pk)
		return self.contract

	def balance_row(self, holder: str) -> TokenBalance:
		row, _ = TokenBalance.objects.select_for_update().get_or_create(
			contract=self.contract, holder=checksum(holder), defaults={"balance": 0, "staked": 0}
		)
		return row

	def begin(self, sender: str, method: str, value: int = 0):
		"""
		Mine the receipt for a call that passed its checks
		"""
		return ChainAdapter.record_tx(sender, self.address, method, value)

	def debit(self, holder: str, amount: int, error: InsufficientBalance | None = None) -> TokenBalance:
		row = self.balance_row(holder)
		if row.balance < amount:
			raise error or InsufficientBalance()
		row.balance -= amount
		row.save(update_fields=["balance"])
		return row

	def credit(self, holder: str, amount: int) -> TokenBalance:
		row = self.balance_row(holder)
		row.balance += amount
		row.save(update_fields=["balance"])
		return row

	def grow_supply(self, amount: int) -> TokenContract:
		contract = self.lock_contract()
		if contract.total_supply + amount > UINT256_MAX:
			raise InvalidAmount("DAppToken: supply overflow")
		contract.total_supply += amount
		contract.save(update_fields=["total_supply"])
		return contract

	def mint_to(self, receipt, to: str, amount: int):
		"""
		Create `amount` new tokens for `to`; emits Mint + Transfer(0x0, to, amount).
		Privilege checks belong to the caller.
		"""
		self.grow_supply(amount)
		self.credit(to, amount)
		ChainAdapter.emit(receipt, self.address, "Mint", to=checksum(to), amount=amount)
		ChainAdapter.emit(receipt, self.address, "Transfer", **{"from": ZERO_ADDRESS, "to": checksum(to), "value": amount})

	# --- ERC20 surface -----------------------------------------------------------

	@transaction.atomic
	def transfer(self, sender: str, to: str, amount: int):
		"""
		Move `amount` from the caller to `to`. Zero address is rejected before the balance check.
		"""
		sender, to, amount = checksum(sender), checksum(to), as_uint(amount)
		if to == ZERO_ADDRESS:
			raise InvalidAddress()
		self.debit(sender, amount)
		self.credit(to, amount)
		receipt = self.begin(sender, "transfer")
		ChainAdapter.emit(receipt, self.address, "Transfer", **{"from": sender, "to": to, "value": amount})
		return receipt

	@transaction.atomic
	def approve(self, sender: str, spender: str, amount: int):
		"""
		Overwrite (never accumulate) the spender's allowance.

		There are no increase/decrease helpers: to change a non-zero allowance
		safely a holder sets it to 0 first, otherwise the spender can front-run
		and spend both the old and the new amount.
		"""
		sender, spender, amount = checksum(sender), checksum(spender), as_uint(amount)
		if spender == ZERO_ADDRESS:
			raise InvalidAddress()
		row, _ = Allowance.objects.select_for_update().get_or_create(
			contract=self.contract, owner=sender, spender=spender, defaults={"amount": 0}
		)
		row.amount = amount
		row.save(update_fields=["amount"])
		receipt = self.begin(sender, "approve")
		ChainAdapter.emit(receipt, self.address, "Approval", owner=sender, spender=spender, value=amount)
		return receipt

	@transaction.atomic
	def transfer_from(self, sender: str, from_: str, to: str, amount: int):
		"""
		Spend `amount` of `from_`'s tokens under the caller's allowance
		"""
		sender, from_, to, amount = checksum(sender), checksum(from_), checksum(to), as_uint(amount)
		if to == ZERO_ADDRESS:
			raise InvalidAddress()
		row = Allowance.objects.select_for_update().filter(contract=self.contract, owner=from_, spender=sender).first()
		if row is None or row.amount < amount:
			raise InsufficientAllowance()
		self.debit(from_, amount)
		self.credit(to, amount)
		row.amount -= amount
		row.save(update_fields=["amount"])
		receipt = self.begin(sender, "transferFrom")
		ChainAdapter.emit(receipt, self.address, "Transfer", **{"from": from_, "to": to, "value": amount})
		return receipt

	@transaction.atomic
	def burn(self, sender: str, amount: int):
		"""
		Destroy the caller's own tokens; emits Burn + Transfer(from, 0x0, amount)
		"""
		sender, amount = checksum(sender), as_uint(amount)
		if amount <= 0:
			raise InvalidAmount("DAppToken: burn amount must be positive")
		self.debit(sender, amount, InsufficientBalance("DAppToken: insufficient balance to burn"))
		contract = self.lock_contract()
		contract.total_supply -= amount
		contract.save(update_fields=["total_supply"])
		receipt = self.begin(sender, "burn")
		ChainAdapter.emit(receipt, self.address, "Burn", **{"from": sender, "amount": amount})
		ChainAdapter.emit(receipt, self.address, "Transfer", **{"from": sender, "to": ZERO_ADDRESS, "value": amount})
		return receipt
