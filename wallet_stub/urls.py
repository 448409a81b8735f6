from django.urls import path
from .views import rpc, balance, transactions


urlpatterns = [
	path("rpc", rpc),
	path("balance/<str:address>", balance),
	path("transactions", transactions),
]
