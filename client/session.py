"""Client view layer: the request/response glue behind the demo UI tabs.

A DAppSession holds what one browser tab would: the connected account, the
loaded contracts, a read-through cache of on-chain values and an in-memory
history. Every write is a wallet-signed transaction: submit -> wait for
confirmation -> refresh cache -> prepend a history record. Failures come back
as ActionResult(ok=False) with the message the UI would alert; nothing is
retried and cached state is untouched. Each action has its own busy flag, so
a pending action only blocks itself.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError

from core.adapters.chain_adapter import ChainAdapter
from core.constants import SECONDS_PER_DAY, format_ether, format_units, parse_ether, parse_units
from core.services import CounterService, DAppToken
from wallet_stub.rpc import WalletRpcError
from .cache import CacheKey, ReadThroughCache
from .wallet import WalletProvider

logger = logging.getLogger(__name__)


@dataclass
class TransferRecord:
	sender: str
	to: str
	amount: str
	hash: str
	timestamp: float
	type: str  # transfer | mint | burn | stake | unstake | deposit | withdraw


@dataclass
class StakeInfo:
	index: int
	amount: str
	start_time: datetime
	duration_days: int
	unlock_time: datetime
	claimed: bool
	reward: str

	@property
	def locked(self) -> bool:
		return datetime.fromtimestamp(ChainAdapter.now(), tz=timezone.utc) < self.unlock_time


@dataclass
class ActionResult:
	ok: bool
	message: str
	tx_hash: str | None = None


def _positive(amount) -> Decimal | None:
	try:
		value = Decimal(str(amount))
	except (InvalidOperation, ValueError):
		return None
	return value if value.is_finite() and value > 0 else None


def _utc(ts: int) -> datetime:
	return datetime.fromtimestamp(ts, tz=timezone.utc)


@dataclass
class DAppSession:
	wallet: WalletProvider = field(default_factory=WalletProvider)
	cache: ReadThroughCache = field(default_factory=ReadThroughCache)
	confirmations: int = field(default_factory=lambda: getattr(settings, "CONFIRMATIONS", 1))

	account: str = ""
	token: DAppToken | None = None
	counter: CounterService | None = None
	history: list[TransferRecord] = field(default_factory=list)
	eth_history: list[TransferRecord] = field(default_factory=list)
	busy: dict[str, bool] = field(default_factory=dict)

	# --- Plumbing ------------------------------------------------------------------

	def _key(self, contract, field_name, account=True) -> CacheKey:
		return CacheKey(contract, self.account if account else None, field_name)

	def _run(self, action: str, submit, success: str, failure: str) -> ActionResult:
		"""
		Run one write: busy flag, submit, confirmation wait, error -> alert message
		"""
		if self.busy.get(action):
			return ActionResult(False, f"{action} already in progress")
		self.busy[action] = True
		try:
			tx_hash = submit()
			receipt = ChainAdapter.wait_for_receipt(tx_hash, self.confirmations)
			logger.info("%s confirmed in block %s (%s)", action, receipt.block_number, tx_hash)
			return ActionResult(True, success, tx_hash)
		except (ValidationError, WalletRpcError) as e:
			reason = getattr(e, "message", str(e))
			logger.warning("%s failed: %s", action, reason)
			return ActionResult(False, f"{failure} ({reason})")
		finally:
			self.busy[action] = False

	def _send(self, to: str, method: str, *args) -> str:
		"""
		Contract call signed by the wallet; it refuses when disconnected or on another chain
		"""
		return self.wallet.call_contract(self.account, to, method, *args)

	def _record(self, history, sender, to, amount, tx_hash, kind):
		history.insert(0, TransferRecord(sender, to, str(amount), tx_hash, time.time(), kind))

	# --- Wallet ------------------------------------------------------------------

	def connect_wallet(self) -> ActionResult:
		"""
		Request accounts, make sure the wallet is on the dev chain, load the ETH balance
		"""
		try:
			self.account = self.wallet.connect()
			self.wallet.ensure_chain()
			self.refresh_native_balance()
		except WalletRpcError as e:
			logger.warning("wallet connect failed: %s", e.message)
			return ActionResult(False, f"Failed to connect wallet. Please try again. ({e.message})")
		return ActionResult(True, f"Wallet connected: {self.account}")

	def restore_connection(self) -> bool:
		account = self.wallet.restore()
		if account:
			self.account = account
			self.refresh_native_balance()
		return bool(account)

	def refresh_native_balance(self) -> str:
		key = CacheKey(None, self.account, "native")
		self.cache.invalidate(key)
		return format_ether(self.cache.read(key, lambda: self.wallet.get_balance(self.account)))

	@property
	def native_balance(self) -> str:
		return format_ether(self.cache.peek(CacheKey(None, self.account, "native"), 0))

	# --- Token tab ---------------------------------------------------------------

	def connect_token(self, address: str) -> ActionResult:
		if not self.account or not address:
			return ActionResult(False, "Please connect wallet and enter token address")
		try:
			self.token = DAppToken.at(address)
			info = self.token_info(refresh=True)
			self.token_balance(refresh=True)
			self.eth_balances(refresh=True)
			self.user_stakes(refresh=True)
		except ValidationError as e:
			self.token = None
			return ActionResult(False, f"Failed to connect to token contract. Please check the address. ({e.message})")
		return ActionResult(True, f"Connected to {info['name']} ({info['symbol']}) successfully!")

	def token_info(self, refresh: bool = False) -> dict:
		key = self._key(self.token.address, "info", account=False)
		if refresh:
			self.cache.invalidate(key)
		return self.cache.read(key, self.token.info)

	@property
	def decimals(self) -> int:
		return self.token_info()["decimals"]

	@property
	def is_owner(self) -> bool:
		return self.token_info()["owner"].lower() == self.account.lower()

	def token_balance(self, refresh: bool = False) -> str:
		key = self._key(self.token.address, "balance")
		if refresh:
			self.cache.invalidate(key)
		return format_units(self.cache.read(key, lambda: self.token.ledger.balance_of(self.account)), self.decimals)

	def eth_balances(self, refresh: bool = False) -> tuple[str, str]:
		"""
		(contract pool, my custody) in ETH
		"""
		pool_key = self._key(self.token.address, "eth_pool", account=False)
		mine_key = self._key(self.token.address, "eth_custody")
		if refresh:
			self.cache.invalidate(pool_key, mine_key)
		pool = self.cache.read(pool_key, self.token.custody.get_eth_balance)
		mine = self.cache.read(mine_key, lambda: self.token.custody.get_user_eth_balance(self.account))
		return format_ether(pool), format_ether(mine)

	def user_stakes(self, refresh: bool = False) -> list[StakeInfo]:
		key = self._key(self.token.address, "stakes")
		if refresh:
			self.cache.invalidate(key)

		def load():
			staking = self.token.staking
			out = []
			for index in range(staking.get_user_stakes(self.account)):
				amount, start, duration, unlock, claimed, reward = staking.get_stake_details(self.account, index)
				out.append(StakeInfo(
					index=index,
					amount=format_units(amount, self.decimals),
					start_time=_utc(start),
					duration_days=duration // SECONDS_PER_DAY,
					unlock_time=_utc(unlock),
					claimed=claimed,
					reward=format_units(reward, self.decimals),
				))
			return out

		return self.cache.read(key, load)

	def total_staked(self) -> str:
		total = sum((Decimal(s.amount) for s in self.user_stakes() if not s.claimed), Decimal(0))
		return format(total.normalize(), "f") if total else "0"

	def _after_token_write(self, *accounts):
		self.cache.invalidate_matching(contract=self.token.address, account=self.account)
		self.cache.invalidate(self._key(self.token.address, "info", account=False),
			self._key(self.token.address, "eth_pool", account=False))
		for account in accounts:
			self.cache.invalidate_matching(contract=self.token.address, account=account)

	def transfer_tokens(self, to: str, amount: str) -> ActionResult:
		if not self.token or not to or not amount:
			return ActionResult(False, "Please fill in all fields")
		if _positive(amount) is None:
			return ActionResult(False, "Transfer amount must be greater than 0")
		result = self._run(
			"transfer",
			lambda: self._send(self.token.address, "transfer", to, str(parse_units(amount, self.decimals))),
			f"Transferred {amount} {self.token_info()['symbol']} successfully!",
			"Transfer failed. Check your balance and try again.",
		)
		if result.ok:
			self._record(self.history, self.account, to, amount, result.tx_hash, "transfer")
			self._after_token_write(to)
			self.token_balance()
		return result

	def mint_tokens(self, to: str, amount: str) -> ActionResult:
		if not self.token or not to or not amount:
			return ActionResult(False, "Please fill in all fields")
		if _positive(amount) is None:
			return ActionResult(False, "Mint amount must be greater than 0")
		result = self._run(
			"mint",
			lambda: self._send(self.token.address, "mint", to, str(parse_units(amount, self.decimals))),
			f"Minted {amount} {self.token_info()['symbol']} successfully!",
			"Mint failed. Make sure you are the owner.",
		)
		if result.ok:
			self._record(self.history, "Mint", to, amount, result.tx_hash, "mint")
			self._after_token_write(to)
			self.token_balance()
		return result

	def burn_tokens(self, amount: str) -> ActionResult:
		if not self.token or not amount:
			return ActionResult(False, "Please enter burn amount")
		if _positive(amount) is None:
			return ActionResult(False, "Burn amount must be greater than 0")
		result = self._run(
			"burn",
			lambda: self._send(self.token.address, "burn", str(parse_units(amount, self.decimals))),
			f"Burned {amount} {self.token_info()['symbol']} successfully!",
			"Burn failed. Check your balance and try again.",
		)
		if result.ok:
			self._record(self.history, self.account, "Burn", amount, result.tx_hash, "burn")
			self._after_token_write()
			self.token_balance()
		return result

	def deposit_eth(self, amount: str) -> ActionResult:
		"""
		Plain value transfer to the token contract, signed by the wallet (payable receive path)
		"""
		if not self.token or not amount:
			return ActionResult(False, "Please enter deposit amount")
		if _positive(amount) is None:
			return ActionResult(False, "Deposit amount must be greater than 0")
		result = self._run(
			"deposit",
			lambda: self.wallet.send_transaction(self.account, self.token.address, parse_ether(amount)),
			f"Deposited {amount} ETH to contract successfully!",
			"ETH deposit failed. Please try again.",
		)
		if result.ok:
			self._record(self.history, self.account, "Contract", amount, result.tx_hash, "deposit")
			self._after_token_write()
			self.eth_balances()
			self.refresh_native_balance()
		return result

	def withdraw_my_eth(self, amount: str) -> ActionResult:
		if not self.token or not amount:
			return ActionResult(False, "Please enter withdraw amount")
		value = _positive(amount)
		if value is None:
			return ActionResult(False, "Withdraw amount must be greater than 0")
		_, mine = self.eth_balances()
		if value > Decimal(mine):
			return ActionResult(False, f"You can only withdraw up to {mine} ETH (your deposited amount)")
		result = self._run(
			"withdraw",
			lambda: self._send(self.token.address, "withdrawMyEth", str(parse_ether(amount))),
			f"Withdrew {amount} ETH from contract successfully!",
			"ETH withdraw failed. Please check your balance and try again.",
		)
		if result.ok:
			self._record(self.history, "Contract", self.account, amount, result.tx_hash, "withdraw")
			self._after_token_write()
			self.eth_balances()
			self.refresh_native_balance()
		return result

	def withdraw_all_my_eth(self) -> ActionResult:
		if not self.token:
			return ActionResult(False, "Please connect to the token contract first")
		_, mine = self.eth_balances()
		if Decimal(mine) == 0:
			return ActionResult(False, "You have no ETH to withdraw")
		result = self._run(
			"withdraw",
			lambda: self._send(self.token.address, "withdrawAllMyEth"),
			f"Withdrew all {mine} ETH from contract successfully!",
			"Withdraw all ETH failed. Please try again.",
		)
		if result.ok:
			self._record(self.history, "Contract", self.account, mine, result.tx_hash, "withdraw")
			self._after_token_write()
			self.eth_balances()
			self.refresh_native_balance()
		return result

	def stake_tokens(self, amount: str, days: int = 30) -> ActionResult:
		if not self.token or not amount:
			return ActionResult(False, "Please enter stake amount")
		if _positive(amount) is None:
			return ActionResult(False, "Stake amount must be greater than 0")
		try:
			days = int(days)
		except (TypeError, ValueError):
			return ActionResult(False, "Please select a valid staking period")
		result = self._run(
			"stake",
			lambda: self._send(
				self.token.address, "stakeTokens", str(parse_units(amount, self.decimals)), days * SECONDS_PER_DAY
			),
			f"Staked {amount} {self.token_info()['symbol']} for {days} days successfully!",
			"Staking failed. Check your balance and try again.",
		)
		if result.ok:
			self._record(self.history, self.account, "Staking Contract", amount, result.tx_hash, "stake")
			self._after_token_write()
			self.user_stakes()
			self.token_balance()
		return result

	def unstake_tokens(self, index: int) -> ActionResult:
		if not self.token:
			return ActionResult(False, "Please connect to the token contract first")
		stakes = self.user_stakes()
		amount = stakes[index].amount if 0 <= index < len(stakes) else "0"
		result = self._run(
			"unstake",
			lambda: self._send(self.token.address, "unstakeTokens", index),
			"Tokens unstaked successfully!",
			"Unstaking failed. Make sure the stake period has ended.",
		)
		if result.ok:
			self._record(self.history, "Staking Contract", self.account, amount, result.tx_hash, "unstake")
			self._after_token_write()
			self.user_stakes()
			self.token_balance()
		return result

	# --- Counter tab -------------------------------------------------------------

	def load_counter(self, address: str) -> ActionResult:
		try:
			self.counter = CounterService.at(address)
			value = self.counter_value(refresh=True)
		except ValidationError as e:
			self.counter = None
			return ActionResult(False, f"Failed to load counter ({e.message})")
		return ActionResult(True, f"Counter loaded: {value}")

	def counter_value(self, refresh: bool = False) -> int:
		key = CacheKey(self.counter.address, None, "x")
		if refresh:
			self.cache.invalidate(key)
		return self.cache.read(key, self.counter.x)

	def increment(self) -> ActionResult:
		result = self._run(
			"inc",
			lambda: self._send(self.counter.address, "inc"),
			"Counter incremented successfully!",
			"Failed to increment.",
		)
		if result.ok:
			self.counter_value(refresh=True)
		return result

	def increment_by(self, amount: int) -> ActionResult:
		result = self._run(
			"incBy",
			lambda: self._send(self.counter.address, "incBy", amount),
			f"Counter incremented by {amount} successfully!",
			"Failed to increment.",
		)
		if result.ok:
			self.counter_value(refresh=True)
		return result

	# --- ETH transfer tab ----------------------------------------------------------

	def transfer_eth(self, to: str, amount: str) -> ActionResult:
		if not self.account or not to or not amount:
			return ActionResult(False, "Please fill in all fields")
		value = _positive(amount)
		if value is None:
			return ActionResult(False, "Transfer amount must be greater than 0")
		if value > Decimal(self.native_balance):
			return ActionResult(False, "Insufficient balance")
		result = self._run(
			"eth_transfer",
			lambda: self.wallet.send_transaction(self.account, to, parse_ether(amount)),
			f"Transferred {amount} ETH successfully!",
			"ETH transfer failed. Please try again.",
		)
		if result.ok:
			self._record(self.eth_history, self.account, to, amount, result.tx_hash, "transfer")
			self.refresh_native_balance()
		return result
