"""HTTP endpoints for the wallet stub.

The client talks to the provider in-process through wallet_stub.rpc.dispatch;
these endpoints expose the same provider over HTTP (JSON-RPC) plus two
read helpers.
"""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from core.adapters.wallet_adapter import WalletAdapter
from core.constants import format_ether
from core.errors import InvalidAddress
from .models import WalletStubTx
from .rpc import WalletRpcError, dispatch


@csrf_exempt
def rpc(request):
	"""
	POST: {"jsonrpc": "2.0", "id": 1, "method": "eth_requestAccounts", "params": []}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return JsonResponse({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}})
	req_id = body.get("id")
	try:
		result = dispatch(body.get("method"), body.get("params"))
	except WalletRpcError as e:
		return JsonResponse({"jsonrpc": "2.0", "id": req_id, "error": e.as_dict()})
	return JsonResponse({"jsonrpc": "2.0", "id": req_id, "result": result})


def balance(request, address: str):
	"""
	GET: Native balance of an address in wei and ETH
	"""
	try:
		wei = WalletAdapter.balance(address)
	except InvalidAddress as e:
		return JsonResponse({"error": e.message}, status=400)
	return JsonResponse({"balance_wei": str(wei), "balance_eth": format_ether(wei)})


def transactions(request):
	"""
	GET: Chronological list of native value movements
	"""
	qs = WalletStubTx.objects.order_by("id")
	data = [
		{
			"tx_hash": tx.tx_hash,
			"from": tx.sender,
			"to": tx.to,
			"value_wei": str(tx.value_wei),
			"memo": tx.memo,
			"created_at": tx.created_at.isoformat().replace("+00:00", "Z"),
		}
		for tx in qs
	]
	return JsonResponse(data, safe=False)
