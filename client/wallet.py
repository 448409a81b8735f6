"""Client-side wrapper around an EIP-1193 wallet provider.

The transport is any callable `request(method, params)`; by default it is the
in-process stub wallet. Errors surface as WalletRpcError with the provider code.
"""

import logging

from django.conf import settings

from wallet_stub.rpc import UNRECOGNIZED_CHAIN, WalletRpcError, dispatch

logger = logging.getLogger(__name__)


class WalletProvider:

	def __init__(self, request=None):
		self._request = request or dispatch

	def request(self, method: str, params=None):
		return self._request(method, params or [])

	def connect(self) -> str:
		"""
		eth_requestAccounts; returns the first authorized account
		"""
		accounts = self.request("eth_requestAccounts")
		logger.info("wallet connected: %s", accounts[0])
		return accounts[0]

	def restore(self) -> str | None:
		"""
		eth_accounts: the already-authorized account, if any (no prompt)
		"""
		accounts = self.request("eth_accounts")
		return accounts[0] if accounts else None

	def chain_id(self) -> int:
		return int(self.request("eth_chainId"), 16)

	def ensure_chain(self, chain_id: int | None = None, chain_name: str | None = None, rpc_url: str | None = None) -> int:
		"""
		Switch to the dev chain; when the wallet does not know it (4902), add it instead.
		"""
		chain_id = chain_id or getattr(settings, "CHAIN_ID", 31337)
		try:
			self.request("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])
		except WalletRpcError as e:
			if e.code != UNRECOGNIZED_CHAIN:
				raise
			logger.info("chain %s unknown to wallet, adding it", chain_id)
			self.request("wallet_addEthereumChain", [{
				"chainId": hex(chain_id),
				"chainName": chain_name or getattr(settings, "CHAIN_NAME", "Hardhat Local Network"),
				"rpcUrls": [rpc_url or getattr(settings, "RPC_URL", "http://127.0.0.1:8545")],
				"nativeCurrency": {
					"name": "Ether",
					"symbol": getattr(settings, "NATIVE_SYMBOL", "ETH"),
					"decimals": getattr(settings, "NATIVE_DECIMALS", 18),
				},
			}])
		return chain_id

	def get_balance(self, address: str) -> int:
		return int(self.request("eth_getBalance", [address, "latest"]), 16)

	def send_transaction(self, sender: str, to: str, value_wei: int) -> str:
		return self.request("eth_sendTransaction", [{"from": sender, "to": to, "value": hex(value_wei)}])

	def call_contract(self, sender: str, to: str, method: str, *args) -> str:
		"""
		eth_sendTransaction carrying a contract call; returns the tx hash
		"""
		return self.request("eth_sendTransaction", [{"from": sender, "to": to, "data": {"method": method, "args": list(args)}}])
