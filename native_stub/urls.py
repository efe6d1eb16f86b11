from django.urls import path
from .views import balance, transactions


urlpatterns = [
	path("balance/<str:address>", balance),
	path("transactions/<str:address>", transactions),
]
