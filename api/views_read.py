"""Read-only endpoints mirroring the contract view functions (no side effects)."""

from functools import wraps
from django.http import JsonResponse
from django.core.exceptions import ValidationError
from core.adapters.chain_adapter import ChainAdapter
from core.services import DAppToken, CounterService


def view_call(fn):
	"""
	Map reverts (unknown contract, bad address, bad index) to 400
	"""
	@wraps(fn)
	def wrapper(request, *args, **kwargs):
		try:
			return fn(request, *args, **kwargs)
		except ValidationError as e:
			return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return wrapper


def _stake_dict(index, entry_tuple):
	amount, start, duration, unlock, claimed, reward = entry_tuple
	return {
		"index": index,
		"amount": str(amount),
		"start_time": start,
		"duration": duration,
		"unlock_time": unlock,
		"claimed": claimed,
		"reward": str(reward),
	}


@view_call
def token_info(request, address: str):
	"""
	GET: name, symbol, decimals, totalSupply, owner and the pooled ETH balance
	"""
	token = DAppToken.at(address)
	info = token.info()
	info["total_supply"] = str(info["total_supply"])
	info["eth_balance"] = str(token.custody.get_eth_balance())
	return JsonResponse(info)


@view_call
def balance_of(request, address: str, account: str):
	token = DAppToken.at(address)
	return JsonResponse({
		"balance": str(token.ledger.balance_of(account)),
		"staked": str(token.staking.total_staked(account)),
	})


@view_call
def allowance(request, address: str, owner: str, spender: str):
	return JsonResponse({"allowance": str(DAppToken.at(address).ledger.allowance(owner, spender))})


@view_call
def stakes(request, address: str, account: str):
	"""
	GET: getUserStakes + getStakeDetails for every index
	"""
	staking = DAppToken.at(address).staking
	entries = [_stake_dict(e.index, e.as_tuple()) for e in staking.stakes(account)]
	return JsonResponse({
		"count": len(entries),
		"total_staked": str(staking.total_staked(account)),
		"stakes": entries,
	})


@view_call
def stake_details(request, address: str, account: str, index: int):
	staking = DAppToken.at(address).staking
	return JsonResponse(_stake_dict(index, staking.get_stake_details(account, index)))


@view_call
def eth_balance(request, address: str):
	return JsonResponse({"eth_balance": str(DAppToken.at(address).custody.get_eth_balance())})


@view_call
def user_eth_balance(request, address: str, account: str):
	return JsonResponse({"eth_balance": str(DAppToken.at(address).custody.get_user_eth_balance(account))})


@view_call
def token_events(request, address: str):
	"""
	GET: Event logs of the token (?name=Transfer)
	"""
	token = DAppToken.at(address)
	logs = ChainAdapter.events(token.address, request.GET.get("name"))
	return JsonResponse([log.as_dict() for log in logs], safe=False)


@view_call
def counter(request, address: str):
	contract = CounterService.at(address)
	return JsonResponse({"address": contract.address, "x": str(contract.x())})
