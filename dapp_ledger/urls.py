"""URL routing for API + local stubs (wallet + chain).


The /api/ namespace exposes the contract call surface; /stub/* exposes the
deterministic dev chain and wallet provider used by adapters and the client.
"""

from django.contrib import admin
from django.urls import path, include


urlpatterns = [
	path("admin/", admin.site.urls),
	path("api/", include("api.urls")),
	path("stub/wallet/", include("wallet_stub.urls")),
	path("stub/chain/", include("chain_stub.urls")),
]
