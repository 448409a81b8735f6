"""Contract orchestration for the demo.

This module coordinates: deploy -> fund accounts -> contract calls, and the
payable path (native value sent to a token contract lands in ETH custody).
Critical mutations are wrapped in @transaction.atomic to keep state consistent.
"""
import logging

from django.conf import settings
from django.db import transaction

from .adapters.chain_adapter import ChainAdapter
from .adapters.wallet_adapter import WalletAdapter, checksum
from .constants import ZERO_ADDRESS, parse_ether, parse_units
from .custody import EthCustody
from .errors import ContractRevert, InvalidAmount, UnknownContract
from .ledger import TokenLedger, as_uint
from .models import CounterContract, TokenBalance, TokenContract
from .ownership import OwnershipGuard
from .staking import StakingService

logger = logging.getLogger(__name__)


class DAppToken:
	"""
	One deployed token contract: the ledger plus the components built on it.
	Each component gets the same ledger instance passed in explicitly.
	"""

	def __init__(self, ledger: TokenLedger):
		self.ledger = ledger
		self.ownership = OwnershipGuard(ledger)
		self.staking = StakingService(ledger)
		self.custody = EthCustody(ledger)

	@classmethod
	def at(cls, address: str) -> "DAppToken":
		return cls(TokenLedger.at(address))

	@property
	def address(self) -> str:
		return self.ledger.address

	def info(self) -> dict:
		contract = self.ledger.refresh()
		return {
			"address": contract.address,
			"name": contract.name,
			"symbol": contract.symbol,
			"decimals": contract.decimals,
			"total_supply": contract.total_supply,
			"owner": contract.owner,
		}


class CounterService:
	"""
	Counter contract: x() view, inc(), incBy(by) with by > 0
	"""

	def __init__(self, contract: CounterContract):
		self.contract = contract

	@classmethod
	def at(cls, address: str) -> "CounterService":
		try:
			return cls(CounterContract.objects.get(address=checksum(address)))
		except CounterContract.DoesNotExist:
			raise UnknownContract(f"no Counter deployed at {address}")

	@property
	def address(self) -> str:
		return self.contract.address

	def x(self) -> int:
		self.contract.refresh_from_db()
		return self.contract.x

	@transaction.atomic
	def _add(self, sender: str, by: int, method: str):
		contract = CounterContract.objects.select_for_update().get(pk=self.contract.pk)
		contract.x += by
		contract.save(update_fields=["x"])
		self.contract = contract
		receipt = ChainAdapter.record_tx(sender, contract.address, method)
		ChainAdapter.emit(receipt, contract.address, "Increment", by=by)
		return receipt

	def inc(self, sender: str):
		return self._add(checksum(sender), 1, "inc")

	def inc_by(self, sender: str, by: int):
		by = as_uint(by)
		if by == 0:
			raise InvalidAmount("incBy: increment should be positive")
		return self._add(checksum(sender), by, "incBy")


# --- Deployment ------------------------------------------------------------------

@transaction.atomic
def deploy_token(deployer: str, initial_supply: int, *, name: str | None = None, symbol: str | None = None, decimals: int | None = None) -> DAppToken:
	"""
	Deploy a DAppToken; the whole initial supply goes to the deployer, who becomes owner.
	`initial_supply` is in base units.
	"""
	deployer = checksum(deployer)
	initial_supply = as_uint(initial_supply)
	address = ChainAdapter.contract_address(deployer, ChainAdapter.next_nonce(deployer))
	contract = TokenContract.objects.create(
		address=address,
		name=name or getattr(settings, "TOKEN_NAME", "DApp Demo Token"),
		symbol=symbol or getattr(settings, "TOKEN_SYMBOL", "DDT"),
		decimals=getattr(settings, "TOKEN_DECIMALS", 18) if decimals is None else decimals,
		total_supply=initial_supply,
		owner=deployer,
		deployer=deployer,
	)
	TokenBalance.objects.create(contract=contract, holder=deployer, balance=initial_supply, staked=0)
	WalletAdapter.ensure_account(address)
	receipt = ChainAdapter.record_tx(deployer, "", "deploy:DAppToken")
	if initial_supply:
		ChainAdapter.emit(receipt, address, "Transfer", **{"from": ZERO_ADDRESS, "to": deployer, "value": initial_supply})
	ChainAdapter.emit(receipt, address, "OwnershipTransferred", previousOwner=ZERO_ADDRESS, newOwner=deployer)
	logger.info("DAppToken deployed at %s by %s (supply %s)", address, deployer, initial_supply)
	return DAppToken(TokenLedger(contract))


@transaction.atomic
def deploy_counter(deployer: str) -> CounterService:
	deployer = checksum(deployer)
	address = ChainAdapter.contract_address(deployer, ChainAdapter.next_nonce(deployer))
	contract = CounterContract.objects.create(address=address, deployer=deployer, x=0)
	ChainAdapter.record_tx(deployer, "", "deploy:Counter")
	logger.info("Counter deployed at %s by %s", address, deployer)
	return CounterService(contract)


# --- Native value ----------------------------------------------------------------

@transaction.atomic
def send_eth(sender: str, to: str, value_wei: int):
	"""
	Plain native transfer. Sending to a DAppToken runs its payable receive path
	(custody credit + EthDeposited); if that reverts, the value stays with the sender.
	"""
	sender, to, value_wei = checksum(sender), checksum(to), as_uint(value_wei)
	token = TokenContract.objects.filter(address=to).first()
	receipt = ChainAdapter.record_tx(sender, to, "receive" if token else "transfer", value_wei)
	WalletAdapter.move(sender, to, value_wei, tx_hash=receipt.tx_hash, memo=receipt.method)
	if token is not None:
		EthCustody(TokenLedger(token)).receive(receipt, sender, value_wei)
	return receipt


# --- Contract calls --------------------------------------------------------------

# ABI name -> (component, method, argument count after the sender)
TOKEN_METHODS = {
	"transfer": ("ledger", "transfer", 2),
	"approve": ("ledger", "approve", 2),
	"transferFrom": ("ledger", "transfer_from", 3),
	"burn": ("ledger", "burn", 1),
	"mint": ("ownership", "mint", 2),
	"transferOwnership": ("ownership", "transfer_ownership", 1),
	"withdrawEth": ("ownership", "withdraw_eth", 1),
	"withdrawAllEth": ("ownership", "withdraw_all_eth", 0),
	"emergencyWithdraw": ("ownership", "emergency_withdraw", 1),
	"stakeTokens": ("staking", "stake_tokens", 2),
	"unstakeTokens": ("staking", "unstake_tokens", 1),
	"withdrawMyEth": ("custody", "withdraw_my_eth", 1),
	"withdrawAllMyEth": ("custody", "withdraw_all_my_eth", 0),
}

COUNTER_METHODS = {
	"inc": ("inc", 0),
	"incBy": ("inc_by", 1),
}


@transaction.atomic
def call_contract(sender: str, to: str, method: str, args=()):
	"""
	Run a signed contract call: `method` on whatever is deployed at `to`, on behalf of `sender`.
	Returns the receipt; unknown functions and wrong argument counts revert.
	"""
	to, args = checksum(to), list(args or [])
	token = TokenContract.objects.filter(address=to).first()
	if token is not None:
		entry = TOKEN_METHODS.get(method)
		if entry is None:
			raise ContractRevert(f"DAppToken: unknown function {method!r}")
		component, name, arity = entry
		target = getattr(DAppToken(TokenLedger(token)), component)
	else:
		counter = CounterContract.objects.filter(address=to).first()
		if counter is None:
			raise UnknownContract(f"no contract deployed at {to}")
		entry = COUNTER_METHODS.get(method)
		if entry is None:
			raise ContractRevert(f"Counter: unknown function {method!r}")
		name, arity = entry
		target = CounterService(counter)
	if len(args) != arity:
		raise ContractRevert(f"{method}: expected {arity} arguments, got {len(args)}")
	logger.debug("call %s.%s%s from %s", to, method, tuple(args), sender)
	return getattr(target, name)(sender, *args)


class DemoServices:

	@staticmethod
	@transaction.atomic
	def fund_demo_accounts(amount_eth: str | None = None) -> list[str]:
		"""
		Credit every configured dev account with native currency and mark it wallet-managed
		"""
		amount_wei = parse_ether(amount_eth or getattr(settings, "DEMO_ACCOUNT_BALANCE_ETH", "10000"))
		accounts = [checksum(a) for a in getattr(settings, "DEMO_ACCOUNTS", [])]
		for address in accounts:
			WalletAdapter.fund(address, amount_wei)
		return accounts

	@staticmethod
	@transaction.atomic
	def deploy_all(deployer: str | None = None) -> dict:
		"""
		Fund the dev accounts, then deploy DAppToken (configured supply) and Counter
		"""
		accounts = DemoServices.fund_demo_accounts()
		deployer = checksum(deployer or accounts[0])
		supply = parse_units(getattr(settings, "TOKEN_INITIAL_SUPPLY", "1000000"), getattr(settings, "TOKEN_DECIMALS", 18))
		token = deploy_token(deployer, supply)
		counter = deploy_counter(deployer)
		return {"token": token.address, "counter": counter.address, "deployer": deployer, "accounts": accounts}
