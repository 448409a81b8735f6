"""EIP-1193 style request handling for the stub wallet provider.

dispatch(method, params) is what an injected browser wallet's
`request({method, params})` would answer. Errors carry the provider codes the
client reacts to (4902 triggers the add-chain fallback).
"""

import logging

from django.conf import settings
from django.db import transaction

from core.adapters.wallet_adapter import WalletAdapter, checksum
from core.errors import ContractRevert
from core.services import call_contract, send_eth
from .models import WalletStubAccount, WalletStubChain, WalletStubState

logger = logging.getLogger(__name__)

USER_REJECTED = 4001
UNAUTHORIZED = 4100
CHAIN_DISCONNECTED = 4901
UNRECOGNIZED_CHAIN = 4902
INVALID_PARAMS = -32602
METHOD_NOT_FOUND = -32601
EXECUTION_REVERTED = -32000

# Chains every fresh wallet knows about
DEFAULT_CHAINS = [
	{"chain_id": 1, "chain_name": "Ethereum Mainnet", "rpc_url": "", "native_symbol": "ETH", "native_decimals": 18},
]


class WalletRpcError(Exception):
	"""
	Provider RPC error: `code` follows EIP-1193 / JSON-RPC numbering
	"""

	def __init__(self, code: int, message: str, data=None):
		super().__init__(message)
		self.code = code
		self.message = message
		self.data = data

	def as_dict(self) -> dict:
		out = {"code": self.code, "message": self.message}
		if self.data is not None:
			out["data"] = self.data
		return out


def _state() -> WalletStubState:
	for chain in DEFAULT_CHAINS:
		WalletStubChain.objects.get_or_create(chain_id=chain["chain_id"], defaults=chain)
	state, _ = WalletStubState.objects.get_or_create(pk=1, defaults={"active_chain_id": DEFAULT_CHAINS[0]["chain_id"]})
	return state


def _parse_chain_id(value) -> int:
	try:
		return int(value, 16) if isinstance(value, str) else int(value)
	except (TypeError, ValueError):
		raise WalletRpcError(INVALID_PARAMS, f"invalid chainId: {value!r}")


def _first_param(params) -> dict:
	if not params or not isinstance(params[0], dict):
		raise WalletRpcError(INVALID_PARAMS, "expected a single object parameter")
	return params[0]


# --- Handlers ----------------------------------------------------------------------

def eth_request_accounts(params):
	state = _state()
	accounts = WalletAdapter.managed_accounts()
	if not accounts:
		raise WalletRpcError(USER_REJECTED, "User rejected the request.")
	state.connected = True
	state.save(update_fields=["connected"])
	return accounts


def eth_accounts(params):
	return WalletAdapter.managed_accounts() if _state().connected else []


def eth_chain_id(params):
	return hex(_state().active_chain_id)


def wallet_switch_ethereum_chain(params):
	chain_id = _parse_chain_id(_first_param(params).get("chainId"))
	state = _state()
	if not WalletStubChain.objects.filter(chain_id=chain_id).exists():
		raise WalletRpcError(UNRECOGNIZED_CHAIN, f"Unrecognized chain ID {hex(chain_id)}. Try adding the chain using wallet_addEthereumChain first.")
	state.active_chain_id = chain_id
	state.save(update_fields=["active_chain_id"])
	return None


def wallet_add_ethereum_chain(params):
	spec = _first_param(params)
	chain_id = _parse_chain_id(spec.get("chainId"))
	native = spec.get("nativeCurrency") or {}
	rpc_urls = spec.get("rpcUrls") or [""]
	WalletStubChain.objects.update_or_create(
		chain_id=chain_id,
		defaults={
			"chain_name": spec.get("chainName") or hex(chain_id),
			"rpc_url": rpc_urls[0],
			"native_symbol": native.get("symbol", "ETH"),
			"native_decimals": int(native.get("decimals", 18)),
		},
	)
	state = _state()
	state.active_chain_id = chain_id
	state.save(update_fields=["active_chain_id"])
	logger.info("wallet added chain %s (%s)", chain_id, spec.get("chainName"))
	return None


def eth_get_balance(params):
	if not params:
		raise WalletRpcError(INVALID_PARAMS, "address required")
	try:
		return hex(WalletAdapter.balance(params[0]))
	except ContractRevert as e:
		raise WalletRpcError(INVALID_PARAMS, e.message)


def eth_send_transaction(params):
	"""
	Signed transaction from a managed account: plain value transfer, or a contract
	call when `data` carries {"method", "args"}
	"""
	tx = _first_param(params)
	state = _state()
	if not state.connected:
		raise WalletRpcError(UNAUTHORIZED, "The requested account has not been authorized by the user.")
	if state.active_chain_id != getattr(settings, "CHAIN_ID", 31337):
		raise WalletRpcError(CHAIN_DISCONNECTED, "Wallet is not connected to the dev chain.")
	try:
		sender = checksum(tx.get("from", ""))
		to = checksum(tx.get("to", ""))
	except ContractRevert as e:
		raise WalletRpcError(INVALID_PARAMS, e.message)
	if not WalletStubAccount.objects.filter(address=sender, managed=True).exists():
		raise WalletRpcError(UNAUTHORIZED, f"Account {sender} is not managed by this wallet.")
	value = tx.get("value", 0)
	try:
		value = int(value, 16) if isinstance(value, str) and value.startswith("0x") else int(value)
	except (TypeError, ValueError):
		raise WalletRpcError(INVALID_PARAMS, f"invalid value: {value!r}")
	data = tx.get("data")
	if data is not None:
		if not isinstance(data, dict) or not data.get("method") or not isinstance(data.get("args", []), (list, tuple)):
			raise WalletRpcError(INVALID_PARAMS, 'data must be {"method": name, "args": [...]}')
		if value:
			raise WalletRpcError(INVALID_PARAMS, f"{data['method']} is not payable")
	try:
		if data is not None:
			receipt = call_contract(sender, to, data["method"], data.get("args", []))
		else:
			receipt = send_eth(sender, to, value)
	except ContractRevert as e:
		raise WalletRpcError(EXECUTION_REVERTED, e.message, data={"code": e.code})
	return receipt.tx_hash


HANDLERS = {
	"eth_requestAccounts": eth_request_accounts,
	"eth_accounts": eth_accounts,
	"eth_chainId": eth_chain_id,
	"wallet_switchEthereumChain": wallet_switch_ethereum_chain,
	"wallet_addEthereumChain": wallet_add_ethereum_chain,
	"eth_getBalance": eth_get_balance,
	"eth_sendTransaction": eth_send_transaction,
}


@transaction.atomic
def dispatch(method: str, params=None):
	"""
	Answer one provider request; raises WalletRpcError on failure
	"""
	handler = HANDLERS.get(method)
	if handler is None:
		raise WalletRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")
	return handler(params or [])
