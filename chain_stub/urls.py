from django.urls import path
from .views import rpc, events


urlpatterns = [
	path("rpc", rpc),
	path("events/<str:address>", events),
]
