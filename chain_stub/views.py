"""HTTP endpoints for the chain stub mirroring a dev node's JSON-RPC surface"""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from core.adapters.chain_adapter import ChainAdapter
from core.adapters.wallet_adapter import checksum
from core.errors import InvalidAddress


def _result(req_id, result):
	return JsonResponse({"jsonrpc": "2.0", "id": req_id, "result": result})


def _error(req_id, code: int, message: str):
	return JsonResponse({"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}})


@csrf_exempt
def rpc(request):
	"""
	POST: eth_blockNumber | eth_getTransactionReceipt | evm_increaseTime | evm_mine
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	try:
		body = json.loads(request.body or b"{}")
	except ValueError:
		return _error(None, -32700, "Parse error")
	req_id = body.get("id")
	method = body.get("method")
	params = body.get("params") or []

	if method == "eth_blockNumber":
		return _result(req_id, hex(ChainAdapter.block_number()))
	if method == "eth_getTransactionReceipt":
		if not params:
			return _error(req_id, -32602, "tx hash required")
		receipt = ChainAdapter.get_receipt(params[0])
		return _result(req_id, receipt.as_dict() if receipt else None)
	if method == "evm_increaseTime":
		try:
			seconds = int(params[0])
			return _result(req_id, ChainAdapter.increase_time(seconds))
		except (IndexError, TypeError, ValueError) as e:
			return _error(req_id, -32602, str(e) or "seconds required")
	if method == "evm_mine":
		return _result(req_id, hex(ChainAdapter.mine()))
	return _error(req_id, -32601, f"Method not found: {method}")


def events(request, address: str):
	"""
	GET: Event logs emitted by a contract, oldest first (?name=Transfer&from_block=0)
	"""
	try:
		address = checksum(address)
	except InvalidAddress as e:
		return JsonResponse({"error": e.message}, status=400)
	try:
		from_block = int(request.GET.get("from_block", 0))
	except ValueError:
		return JsonResponse({"error": "from_block must be an integer"}, status=400)
	logs = ChainAdapter.events(address, request.GET.get("name"), from_block)
	return JsonResponse([log.as_dict() for log in logs], safe=False)
