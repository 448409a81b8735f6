"""Demo helpers: fund dev accounts and deploy the contracts."""

import json
from django.http import JsonResponse, HttpResponseBadRequest
from django.core.exceptions import ValidationError
from core.constants import parse_units
from core.services import DemoServices, deploy_counter, deploy_token


def seed(request):
	"""
	POST: Fund the dev accounts and deploy DAppToken + Counter in one go
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	return JsonResponse(DemoServices.deploy_all(), status=201)


def fund(request):
	"""
	POST: Native faucet for every configured dev account ({"amount_eth": "10000"})
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	accounts = DemoServices.fund_demo_accounts(body.get("amount_eth"))
	return JsonResponse({"accounts": accounts}, status=201)


def deploy_token_view(request):
	"""
	POST: {"from", "initial_supply" (whole tokens, e.g. "1000000")}
	"""
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	if not body.get("from"):
		return HttpResponseBadRequest("from required")
	try:
		token = deploy_token(body["from"], parse_units(body.get("initial_supply", "1000000")))
	except ValidationError as e:
		return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return JsonResponse({"address": token.address}, status=201)


def deploy_counter_view(request):
	if request.method != "POST":
		return HttpResponseBadRequest("POST only")
	body = json.loads(request.body or b"{}")
	if not body.get("from"):
		return HttpResponseBadRequest("from required")
	try:
		counter = deploy_counter(body["from"])
	except ValidationError as e:
		return JsonResponse({"error": e.message, "code": e.code}, status=400)
	return JsonResponse({"address": counter.address}, status=201)
