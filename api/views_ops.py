"""State-changing endpoints: one per contract method that sends a transaction.

Every endpoint takes a JSON body with the caller in "from" and amounts as
base-unit integer strings. Success answers 201 with the mined receipt; a revert
answers 400 with {"error": reason, "code": revert type} and changes nothing.
"""

import json
import logging
from django.http import JsonResponse, HttpResponseBadRequest
from django.core.exceptions import ValidationError
from django.middleware.csrf import get_token
from core.services import DAppToken, CounterService, send_eth

logger = logging.getLogger(__name__)


def health(request):
	return JsonResponse({"ok": True})


def csrf(request):
	# Forces creation/rotation of the CSRF token AND sets 'csrftoken' cookie
	return JsonResponse({"csrftoken": get_token(request)})


# --- Helpers -----------------------------------------------------------------

def _receipt_response(receipt):
	return JsonResponse(receipt.as_dict(), status=201)


def _call(request, fn):
	"""
	POST-only wrapper: parse the body, run the contract call, map reverts to 400
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return HttpResponseBadRequest("Invalid JSON")
	try:
		receipt = fn(body)
	except KeyError as e:
		return HttpResponseBadRequest(f"Missing field: {e}")
	except ValidationError as e:
		logger.warning("revert %s: %s", request.path, e.message)
		return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return _receipt_response(receipt)


# --- DAppToken ----------------------------------------------------------------

def transfer(request, address: str):
	"""
	POST: {"from", "to", "amount"}
	"""
	return _call(request, lambda b: DAppToken.at(address).ledger.transfer(b["from"], b["to"], b["amount"]))


def approve(request, address: str):
	"""
	POST: {"from", "spender", "amount"}: overwrites the allowance
	"""
	return _call(request, lambda b: DAppToken.at(address).ledger.approve(b["from"], b["spender"], b["amount"]))


def transfer_from(request, address: str):
	"""
	POST: {"from" (spender), "owner", "to", "amount"}
	"""
	return _call(request, lambda b: DAppToken.at(address).ledger.transfer_from(b["from"], b["owner"], b["to"], b["amount"]))


def burn(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).ledger.burn(b["from"], b["amount"]))


def mint(request, address: str):
	"""
	POST: {"from" (owner), "to", "amount"}
	"""
	return _call(request, lambda b: DAppToken.at(address).ownership.mint(b["from"], b["to"], b["amount"]))


def transfer_ownership(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).ownership.transfer_ownership(b["from"], b["new_owner"]))


def stake(request, address: str):
	"""
	POST: {"from", "amount", "duration"} with duration in seconds (30/90/180/365 days)
	"""
	return _call(request, lambda b: DAppToken.at(address).staking.stake_tokens(b["from"], b["amount"], b["duration"]))


def unstake(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).staking.unstake_tokens(b["from"], b["index"]))


def withdraw_my_eth(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).custody.withdraw_my_eth(b["from"], b["amount"]))


def withdraw_all_my_eth(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).custody.withdraw_all_my_eth(b["from"]))


def withdraw_eth(request, address: str):
	"""
	POST: owner-only drain of the contract's pooled ETH
	"""
	return _call(request, lambda b: DAppToken.at(address).ownership.withdraw_eth(b["from"], b["amount"]))


def withdraw_all_eth(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).ownership.withdraw_all_eth(b["from"]))


def emergency_withdraw(request, address: str):
	return _call(request, lambda b: DAppToken.at(address).ownership.emergency_withdraw(b["from"], b["amount"]))


# --- Counter ------------------------------------------------------------------

def counter_inc(request, address: str):
	return _call(request, lambda b: CounterService.at(address).inc(b["from"]))


def counter_inc_by(request, address: str):
	"""
	POST: {"from", "by"}; by == 0 reverts
	"""
	return _call(request, lambda b: CounterService.at(address).inc_by(b["from"], b["by"]))


# --- Native ETH ---------------------------------------------------------------

def eth_send(request):
	"""
	POST: {"from", "to", "value"} raw ETH transfer; into a DAppToken it is a custody deposit
	"""
	return _call(request, lambda b: send_eth(b["from"], b["to"], b["value"]))
